"""
Job-alert email parsing.

LinkedIn and Indeed alerts carry one link per posting; anything else is
scanned as free text for job-title shaped phrases.
"""

from __future__ import annotations

import email
import logging
import re
from dataclasses import dataclass, field
from email import policy
from email.message import EmailMessage
from typing import Iterable, List, Optional, Set

from bs4 import BeautifulSoup

from hunt.extract.artifacts import is_navigation_artifact, is_search_link
from hunt.extract.fields import detect_closed, extract_job_code, extract_pay_range
from hunt.extract.split import split
from hunt.models import JobSource, ParsedJob, normalize_text

logger = logging.getLogger(__name__)

LINKEDIN_JOB_LINK = "a[href*='linkedin.com/comm/jobs']"
INDEED_LINK = "a[href*='indeed.com']"
INDEED_POSTING_MARKERS = ("/viewjob", "/rc/clk", "jk=")

# Free-text raw_text is capped; the full body is mostly boilerplate.
FREE_TEXT_RAW_LEN = 500

_RE_JOB_TITLE = re.compile(
    r"(senior|staff|principal|lead|junior|sr\.?|jr\.?)?\s*"
    r"(software|devops|platform|infrastructure|site reliability|sre|cloud|backend|frontend"
    r"|full[- ]?stack|data|ml|machine learning)\s*"
    r"(engineer|developer|architect|manager|lead|specialist)",
    re.IGNORECASE,
)


@dataclass
class EmailJobs:
    """Jobs parsed from one email, with the headers used to report them."""
    subject: str = ""
    sender: str = ""
    date: str = ""
    jobs: List[ParsedJob] = field(default_factory=list)


def get_email_body(raw: bytes) -> str:
    """Return the HTML body if present, else plain text, else the first part."""
    msg = email.message_from_bytes(raw, policy=policy.default)
    return _body_of(msg)


def _body_of(msg: EmailMessage) -> str:
    body = msg.get_body(preferencelist=("html", "plain"))
    if body is not None:
        return body.get_content()
    for part in msg.iter_parts():
        if not part.is_multipart():
            content = part.get_content()
            if isinstance(content, str):
                return content
    payload = msg.get_payload(decode=True)
    if isinstance(payload, bytes):
        return payload.decode(msg.get_content_charset() or "utf-8", errors="replace")
    return ""


def _link_text(a) -> str:
    # Joined with single spaces so the wide gap in LinkedIn cards survives.
    return " ".join(a.strings).strip()


def _unique_by_title(jobs: Iterable[ParsedJob]) -> List[ParsedJob]:
    seen: Set[str] = set()
    out: List[ParsedJob] = []
    for job in jobs:
        key = job.title.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(job)
    return out


def _job_from_link(text: str, href: str, source: JobSource) -> Optional[ParsedJob]:
    title, employer, location = split(text)
    if not title:
        return None

    pay_min, pay_max = extract_pay_range(text)
    return ParsedJob(
        title=title,
        source=source,
        employer=employer,
        url=href or None,
        location=location,
        pay_min=pay_min,
        pay_max=pay_max,
        job_code=extract_job_code(text) or extract_job_code(href),
        no_longer_accepting=detect_closed(text),
        raw_text=text,
    )


def extract_jobs_from_text(text: str, source: JobSource) -> List[ParsedJob]:
    """Scan free text for job-title shaped phrases."""
    pay_min, pay_max = extract_pay_range(text)
    raw = text[:FREE_TEXT_RAW_LEN]
    jobs: List[ParsedJob] = []
    for m in _RE_JOB_TITLE.finditer(text):
        title = normalize_text(m.group(0))
        if len(title) <= 5:
            continue
        jobs.append(ParsedJob(
            title=title,
            source=source,
            pay_min=pay_min,
            pay_max=pay_max,
            raw_text=raw,
        ))
    return _unique_by_title(jobs)


def _document_text(soup: BeautifulSoup) -> str:
    return normalize_text(soup.get_text(" "))


def parse_linkedin_email(body: str) -> List[ParsedJob]:
    """Parse a LinkedIn job-alert body."""
    soup = BeautifulSoup(body or "", "lxml")
    jobs: List[ParsedJob] = []

    for a in soup.select(LINKEDIN_JOB_LINK):
        href = a.get("href", "")
        text = _link_text(a)
        if not text or is_navigation_artifact(text) or is_search_link(href):
            continue
        job = _job_from_link(text, href, JobSource.LINKEDIN)
        if job:
            jobs.append(job)

    if not jobs:
        logger.debug("No LinkedIn job links found; scanning text")
        jobs = extract_jobs_from_text(_document_text(soup), JobSource.LINKEDIN)

    return _unique_by_title(jobs)


def parse_indeed_email(body: str) -> List[ParsedJob]:
    """Parse an Indeed job-alert body."""
    soup = BeautifulSoup(body or "", "lxml")
    jobs: List[ParsedJob] = []

    for a in soup.select(INDEED_LINK):
        href = a.get("href", "")
        text = _link_text(a)
        if not text or is_navigation_artifact(text) or is_search_link(href):
            continue
        if not any(marker in href for marker in INDEED_POSTING_MARKERS):
            continue
        job = _job_from_link(text, href, JobSource.INDEED)
        if job:
            jobs.append(job)

    return _unique_by_title(jobs)


def parse_generic_email(body: str) -> List[ParsedJob]:
    """Parse an alert from an unknown sender by free-text scanning."""
    soup = BeautifulSoup(body or "", "lxml")
    return extract_jobs_from_text(_document_text(soup), JobSource.EMAIL_GENERIC)


def parse_email_body(sender: str, body: str) -> List[ParsedJob]:
    """Dispatch to the parser for the sender's job board."""
    source = JobSource.from_sender(sender)
    if source == JobSource.LINKEDIN:
        return parse_linkedin_email(body)
    if source == JobSource.INDEED:
        return parse_indeed_email(body)
    return parse_generic_email(body)


def parse_email(raw: bytes) -> EmailJobs:
    """Parse a raw RFC 822 message into its jobs."""
    msg = email.message_from_bytes(raw, policy=policy.default)
    sender = str(msg.get("From", "") or "")
    result = EmailJobs(
        subject=str(msg.get("Subject", "") or ""),
        sender=sender,
        date=str(msg.get("Date", "") or ""),
    )
    result.jobs = parse_email_body(sender, _body_of(msg))
    logger.debug("Parsed %d job(s) from %r", len(result.jobs), result.subject)
    return result
