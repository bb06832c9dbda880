"""
Builders that turn raw page HTML or pasted text into records.
"""

from __future__ import annotations

from typing import Optional

from hunt.extract.fields import detect_closed, extract_job_code, extract_pay_range
from hunt.extract.html import clean
from hunt.extract.split import first_line_title, guess_employer, split
from hunt.models import JobDescription, JobSource, ParsedJob


def describe_text(text: str, url: Optional[str] = None) -> JobDescription:
    """Derive pay, job code and closure from already-clean text."""
    pay_min, pay_max = extract_pay_range(text)
    job_code = extract_job_code(text)
    if job_code is None and url:
        job_code = extract_job_code(url)
    return JobDescription(
        text=text,
        pay_min=pay_min,
        pay_max=pay_max,
        job_code=job_code,
        no_longer_accepting=detect_closed(text),
    )


def describe(html: str, url: Optional[str] = None) -> JobDescription:
    """Clean a posting page fragment and derive its fields."""
    return describe_text(clean(html), url)


def parse_posting(
    html: str,
    url: Optional[str] = None,
    title: Optional[str] = None,
    employer: Optional[str] = None,
    source: JobSource = JobSource.SCRAPE,
) -> Optional[ParsedJob]:
    """
    Build a record from a scraped posting page.

    A known title/employer (e.g. from the listing that linked here) wins over
    what is split from the page's first line. Returns None if no title can
    be found.
    """
    desc = describe(html, url)
    location = None
    if not title:
        title, split_employer, location = split(first_line_title(desc.text))
        employer = employer or split_employer
    if not title:
        return None

    return ParsedJob(
        title=title,
        source=source,
        employer=employer,
        url=url,
        location=location,
        pay_min=desc.pay_min,
        pay_max=desc.pay_max,
        job_code=desc.job_code,
        no_longer_accepting=desc.no_longer_accepting,
        raw_text=desc.text,
    )


def parse_pasted_text(content: str, url: Optional[str] = None) -> Optional[ParsedJob]:
    """Build a record from freeform pasted posting text."""
    content = (content or "").strip()
    if not content:
        return None

    title, employer, location = split(first_line_title(content))
    if not employer:
        employer = guess_employer(content)
    if not title:
        return None

    desc = describe_text(content, url)
    return ParsedJob(
        title=title,
        source=JobSource.SCRAPE,
        employer=employer,
        url=url,
        location=location,
        pay_min=desc.pay_min,
        pay_max=desc.pay_max,
        job_code=desc.job_code,
        no_longer_accepting=desc.no_longer_accepting,
        raw_text=content,
    )
