"""
Unit tests for posting page and pasted text builders.
"""
from hunt.extract.posting import describe, parse_pasted_text, parse_posting
from hunt.models import JobSource


def test_describe_derives_fields():
    html = (
        "<div><p>Compensation: $150K - $180K</p>"
        "<p>Job ID: PLT-778</p>"
        "<p>No longer accepting applications</p></div>"
    )
    desc = describe(html)
    assert desc.pay_min == 150000
    assert desc.pay_max == 180000
    assert desc.job_code == "PLT-778"
    assert desc.no_longer_accepting is True
    assert desc.text.startswith("Compensation:")


def test_describe_takes_job_code_from_url():
    desc = describe("<p>Build things</p>", url="https://www.linkedin.com/jobs/view/555/")
    assert desc.job_code == "linkedin-555"


def test_parse_posting_with_known_title():
    html = "<div><p>Build infra.</p><p>$45/hr - $60/hr</p></div>"
    job = parse_posting(
        html,
        url="https://www.linkedin.com/jobs/view/555/?trk=x",
        title="Platform Engineer",
        employer="Acme",
    )
    assert job.title == "Platform Engineer"
    assert job.employer == "Acme"
    assert job.url == "https://www.linkedin.com/jobs/view/555/"
    assert job.source is JobSource.SCRAPE
    assert (job.pay_min, job.pay_max) == (93600, 124800)
    assert job.job_code == "linkedin-555"
    assert job.raw_text == "Build infra.\n$45/hr - $60/hr"


def test_parse_posting_splits_first_line():
    job = parse_posting("<h1>Staff Engineer at Initech</h1><p>Details</p>")
    assert job.title == "Staff Engineer"
    assert job.employer == "Initech"


def test_parse_posting_without_content():
    assert parse_posting("<div></div>") is None


def test_parse_pasted_text():
    content = (
        "Senior Data Engineer at Acme\n"
        "We are hiring.\n"
        "Salary: $140K - $170K\n"
        "Job ID: DE-2201\n"
    )
    job = parse_pasted_text(content, url="https://acme.example.com/careers/2201")
    assert job.title == "Senior Data Engineer"
    assert job.employer == "Acme"
    assert (job.pay_min, job.pay_max) == (140000, 170000)
    assert job.job_code == "DE-2201"
    assert job.raw_text == content.strip()


def test_parse_pasted_text_guesses_employer_from_body():
    content = "Backend Engineer\nJoin the team as a backend engineer at Globex, fully remote."
    job = parse_pasted_text(content)
    assert job.title == "Backend Engineer"
    assert job.employer == "Globex"


def test_parse_pasted_text_empty():
    assert parse_pasted_text("   ") is None
