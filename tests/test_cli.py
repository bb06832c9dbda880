"""
End-to-end tests for the command-line interface.
"""
from email.message import EmailMessage

from hunt.cli import main, parse_args

BODY = """
<html><body>
<a href="https://www.linkedin.com/comm/jobs/view/111/?trackingId=a">Staff DevOps Engineer             Wiraa · Remote</a>
</body></html>
"""


def _write_alert(path):
    msg = EmailMessage()
    msg["From"] = "LinkedIn Job Alerts <jobalerts-noreply@linkedin.com>"
    msg["Subject"] = "1 new job"
    msg.set_content(BODY, subtype="html")
    path.write_bytes(msg.as_bytes())
    return path


def test_add_and_list(tmp_path, capsys):
    db = str(tmp_path / "jobs.db")
    assert main(["--db", db, "add", "--title", "Platform Engineer", "--employer", "Acme"]) == 0
    assert "Added job #1" in capsys.readouterr().out

    assert main(["--db", db, "add", "--title", "platform engineer", "--employer", "ACME"]) == 0
    assert "Duplicate of job #1" in capsys.readouterr().out

    assert main(["--db", db, "list"]) == 0
    out = capsys.readouterr().out
    assert "Platform Engineer at Acme" in out
    assert "1 job(s)" in out


def test_add_from_pasted_text(tmp_path, capsys):
    db = str(tmp_path / "jobs.db")
    posting = tmp_path / "posting.txt"
    posting.write_text("Data Engineer at Globex\nSalary: $140K - $160K\n", encoding="utf-8")
    assert main(["--db", db, "add", str(posting)]) == 0
    assert "Added job #1: Data Engineer at Globex" in capsys.readouterr().out

    main(["--db", db, "list"])
    assert "$140k-$160k" in capsys.readouterr().out


def test_add_requires_input(tmp_path, capsys):
    assert main(["--db", str(tmp_path / "jobs.db"), "add"]) == 2


def test_email_import(tmp_path, capsys):
    db = str(tmp_path / "jobs.db")
    alert = _write_alert(tmp_path / "alert.eml")

    assert main(["--db", db, "email", str(alert)]) == 0
    out = capsys.readouterr().out
    assert "[added] Staff DevOps Engineer at Wiraa" in out
    assert "Added:      1" in out

    main(["--db", db, "email", str(alert)])
    assert "[duplicate] Staff DevOps Engineer at Wiraa" in capsys.readouterr().out


def test_status_and_export(tmp_path, capsys):
    db = str(tmp_path / "jobs.db")
    main(["--db", db, "add", "--title", "Platform Engineer", "--employer", "Acme"])
    assert main(["--db", db, "status", "1", "applied"]) == 0
    assert main(["--db", db, "status", "9", "applied"]) == 1

    csv_path = tmp_path / "out.csv"
    assert main(["--db", db, "export", "--csv", str(csv_path), "--status", "applied"]) == 0
    assert "Exported 1 job(s)" in capsys.readouterr().out
    assert csv_path.exists()


def test_cleanup_dry_run(tmp_path, capsys):
    db = str(tmp_path / "jobs.db")
    main(["--db", db, "add", "--title", "Apply now", "--employer", "Acme"])
    capsys.readouterr()

    assert main(["--db", db, "cleanup", "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "Would remove 1 artifact(s)" in out
    assert "Would remove 0 duplicate(s)" in out

    assert main(["--db", db, "cleanup", "--artifacts"]) == 0
    assert "Removed 1 artifact(s)" in capsys.readouterr().out


def test_show(tmp_path, capsys):
    db = str(tmp_path / "jobs.db")
    posting = tmp_path / "posting.txt"
    posting.write_text("Site Reliability Engineer at Initech\nSalary: $150,000 - $180,000\n", encoding="utf-8")
    main(["--db", db, "add", str(posting), "--url", "https://example.com/jobs/1"])
    main(["--db", db, "employer", "yuck", "initech"])
    capsys.readouterr()

    assert main(["--db", db, "show", "1"]) == 0
    out = capsys.readouterr().out
    assert "Title:    Site Reliability Engineer" in out
    assert "Employer: Initech (yuck)" in out
    assert "Pay:      $150,000 - $180,000" in out
    assert "Snapshots: 1" in out
    assert "--- Raw Text ---" in out

    assert main(["--db", db, "show", "9"]) == 1


def test_employer_commands(tmp_path, capsys):
    db = str(tmp_path / "jobs.db")
    main(["--db", db, "add", "--title", "Platform Engineer", "--employer", "Acme"])
    capsys.readouterr()

    assert main(["--db", db, "employer", "block", "ACME"]) == 0
    assert "Marked 'ACME' as NEVER (blocked)." in capsys.readouterr().out

    assert main(["--db", db, "employer", "list", "--status", "never"]) == 0
    out = capsys.readouterr().out
    assert "Acme" in out
    assert "never" in out

    assert main(["--db", db, "employer", "ok", "acme"]) == 0
    capsys.readouterr()
    assert main(["--db", db, "employer", "show", "Acme"]) == 0
    out = capsys.readouterr().out
    assert "Status: ok" in out
    assert "Jobs:   1" in out

    assert main(["--db", db, "employer", "show", "Nobody"]) == 1


def test_rank(tmp_path, capsys):
    db = str(tmp_path / "jobs.db")
    assert main(["--db", db, "rank"]) == 0
    assert "No jobs to rank." in capsys.readouterr().out

    main(["--db", db, "add", "--title", "Platform Engineer", "--employer", "Acme"])
    main(["--db", db, "add", "--title", "Data Engineer", "--employer", "Initech"])
    main(["--db", db, "employer", "yuck", "Initech"])
    capsys.readouterr()

    assert main(["--db", db, "rank", "--limit", "5"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert "Platform Engineer" in lines[2]
    assert "Data Engineer" in lines[3]


def test_fetch_headless_flag_can_be_turned_off():
    assert parse_args(["fetch", "--headless"]).headless is True
    assert parse_args(["fetch", "--no-headless"]).headless is False
