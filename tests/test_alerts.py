"""
Unit tests for job-alert email parsing.
"""
from email.message import EmailMessage

from hunt.extract.alerts import (
    extract_jobs_from_text,
    get_email_body,
    parse_email,
    parse_email_body,
    parse_generic_email,
    parse_indeed_email,
    parse_linkedin_email,
)
from hunt.models import JobSource

LINKEDIN_SENDER = "LinkedIn Job Alerts <jobalerts-noreply@linkedin.com>"

LINKEDIN_BODY = """
<html><body>
<table>
  <tr><td>
    <a href="https://www.linkedin.com/comm/jobs/view/3812345678/?trackingId=abc&refId=xyz">Staff DevOps Engineer, DevInfra             SandboxAQ · United States (Remote)</a>
  </td></tr>
  <tr><td>
    <a href="https://www.linkedin.com/comm/jobs/view/3899999999/?trackingId=def">Senior Platform Engineer             Sully.ai · Mountain View, CA (Remote)</a>
  </td></tr>
  <tr><td>
    <a href="https://www.linkedin.com/comm/jobs/view/3812345678/?trackingId=ghi">Staff DevOps Engineer, DevInfra             SandboxAQ · United States (Remote)</a>
  </td></tr>
  <tr><td>
    <a href="https://www.linkedin.com/comm/jobs/search?keywords=devops">DevOps Engineer jobs</a>
    <a href="https://www.linkedin.com/comm/jobs/alerts">Manage job alerts</a>
    <a href="https://www.linkedin.com/comm/psettings/email-unsubscribe">Unsubscribe</a>
  </td></tr>
</table>
</body></html>
"""

INDEED_BODY = """
<html><body>
  <a href="https://www.indeed.com/rc/clk?jk=abc123&from=ja&tk=x">Platform Engineer - Stripe</a>
  <a href="https://www.indeed.com/viewjob?jk=def456&from=ja">Backend Developer at Globex</a>
  <a href="https://www.indeed.com/account/settings">Edit this job alert</a>
  <a href="https://www.indeed.com/jobs/search?q=engineer">See all jobs</a>
</body></html>
"""


def _message(sender: str, body: str, subtype: str = "html") -> bytes:
    msg = EmailMessage()
    msg["From"] = sender
    msg["Subject"] = "New jobs for you"
    msg["Date"] = "Mon, 06 Jan 2025 09:00:00 +0000"
    msg.set_content(body, subtype=subtype)
    return msg.as_bytes()


def test_linkedin_links_become_jobs():
    jobs = parse_linkedin_email(LINKEDIN_BODY)
    assert [j.title for j in jobs] == ["Staff DevOps Engineer, DevInfra", "Senior Platform Engineer"]

    first = jobs[0]
    assert first.employer == "SandboxAQ"
    assert first.location == "United States (Remote)"
    assert first.url == "https://www.linkedin.com/comm/jobs/view/3812345678/"
    assert first.job_code == "linkedin-3812345678"
    assert first.source is JobSource.LINKEDIN


def test_linkedin_falls_back_to_text_scan():
    """Test that an alert without job links is scanned for title-shaped phrases."""
    body = "<p>Hiring now: Senior Backend Engineer and Staff Data Engineer roles.</p>"
    jobs = parse_linkedin_email(body)
    assert [j.title for j in jobs] == ["Senior Backend Engineer", "Staff Data Engineer"]
    assert all(j.source is JobSource.LINKEDIN for j in jobs)


def test_indeed_posting_links_only():
    jobs = parse_indeed_email(INDEED_BODY)
    assert [(j.title, j.employer) for j in jobs] == [
        ("Platform Engineer", "Stripe"),
        ("Backend Developer", "Globex"),
    ]
    assert jobs[0].url == "https://www.indeed.com/rc/clk?jk=abc123"
    assert jobs[1].url == "https://www.indeed.com/viewjob?jk=def456"
    assert all(j.source is JobSource.INDEED for j in jobs)


def test_generic_text_scan():
    body = "<p>Matches: Senior Backend Engineer at Foo, Data Engineer at Bar, senior backend engineer again.</p>"
    jobs = parse_generic_email(body)
    assert [j.title for j in jobs] == ["Senior Backend Engineer", "Data Engineer"]
    assert all(j.source is JobSource.EMAIL_GENERIC for j in jobs)


def test_text_scan_caps_raw_text():
    text = "Cloud Architect wanted. " + "x" * 1000
    jobs = extract_jobs_from_text(text, JobSource.EMAIL_GENERIC)
    assert jobs[0].title == "Cloud Architect"
    assert len(jobs[0].raw_text) == 500


def test_dispatch_by_sender():
    assert parse_email_body("alert@indeed.com", INDEED_BODY)[0].source is JobSource.INDEED
    assert parse_email_body(LINKEDIN_SENDER, LINKEDIN_BODY)[0].source is JobSource.LINKEDIN
    assert parse_email_body("someone@example.com", "<p>nothing here</p>") == []


def test_get_email_body_prefers_html():
    msg = EmailMessage()
    msg["From"] = LINKEDIN_SENDER
    msg.set_content("plain version")
    msg.add_alternative("<p>html version</p>", subtype="html")
    assert "html version" in get_email_body(msg.as_bytes())


def test_get_email_body_plain_only():
    raw = _message("a@example.com", "just text", subtype="plain")
    assert get_email_body(raw).strip() == "just text"


def test_parse_email_headers_and_jobs():
    result = parse_email(_message(LINKEDIN_SENDER, LINKEDIN_BODY))
    assert result.subject == "New jobs for you"
    assert result.sender == LINKEDIN_SENDER
    assert result.date == "Mon, 06 Jan 2025 09:00:00 +0000"
    assert len(result.jobs) == 2
