"""
Ingestion pipeline for hunt.

Ties raw content providers (alert emails, the posting-page browser) to the
extractors, the dedupe engine and the record store. Collaborators are
passed in as narrow protocols; nothing here reaches for a global store or
browser.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from hunt.dedupe import DuplicatePair, find_duplicate, find_duplicates
from hunt.extract.alerts import parse_email
from hunt.extract.artifacts import is_stale_artifact_title
from hunt.extract.posting import describe_text
from hunt.fetchers.browser import FetchResult
from hunt.models import ExistingRecordView, JobDescription, ParsedJob

logger = logging.getLogger(__name__)


# ----------------------------- Errors -----------------------------

class HuntError(Exception):
    """Base error for ingestion failures on a single input."""


class FetchError(HuntError):
    """A posting page could not be fetched or had no content."""


class EmailParseError(HuntError):
    """A raw message could not be decoded."""


# ----------------------------- Collaborators -----------------------------

class RecordLookup(Protocol):
    """Read access to stored records for duplicate checks."""

    def records_for_employer(self, employer: str) -> List[ExistingRecordView]: ...

    def record_for_url(self, url: str) -> Optional[ExistingRecordView]: ...


class JobStore(RecordLookup, Protocol):
    """Record store used by ingestion and cleanup."""

    def add_job(self, job: ParsedJob) -> int: ...

    def records(self) -> List[ExistingRecordView]: ...

    def delete_job(self, job_id: int) -> None: ...

    def get_jobs_without_descriptions(self, limit: Optional[int] = None, force: bool = False) -> List[Dict]: ...

    def update_job_description(self, job_id: int, desc: JobDescription) -> None: ...


class JobPageFetcher(Protocol):
    """Raw content provider for posting pages."""

    async def fetch_job_description(self, url: str) -> FetchResult: ...


# ----------------------------- Results -----------------------------

ADDED = "added"
DUPLICATE = "duplicate"
DRY_RUN = "dry-run"


@dataclass
class JobResult:
    """What happened to one parsed job."""
    title: str
    employer: str
    status: str
    job_id: Optional[int] = None


@dataclass
class EmailResult:
    """Outcome of ingesting one email."""
    subject: str = ""
    date: str = ""
    sender: str = ""
    jobs_found: List[JobResult] = field(default_factory=list)


@dataclass
class IngestStats:
    """Statistics for an email ingestion run."""
    emails_found: int = 0
    jobs_added: int = 0
    duplicates: int = 0
    errors: int = 0


@dataclass
class FetchStats:
    """Statistics for a description fetch run."""
    total: int = 0
    fetched: int = 0
    failed: int = 0
    closed: int = 0
    failures: List[Tuple[int, str]] = field(default_factory=list)


# ----------------------------- Dedupe against storage -----------------------------

def check_duplicate(job: ParsedJob, lookup: RecordLookup) -> Optional[int]:
    """
    Id of the stored record this job duplicates, or None.

    The corpus is read once per candidate: the URL match (if any) plus the
    records of the same employer.
    """
    corpus: List[ExistingRecordView] = []
    if job.url:
        record = lookup.record_for_url(job.url)
        if record:
            corpus.append(record)
    if job.employer:
        corpus.extend(lookup.records_for_employer(job.employer))
    return find_duplicate(job, corpus)


def admit_job(job: ParsedJob, store: JobStore) -> Tuple[bool, int]:
    """
    Store the job unless it duplicates a known record.

    Returns (is_new, id): the new record's id, or the id it duplicates.
    Callers admitting concurrently must serialize calls.
    """
    existing = check_duplicate(job, store)
    if existing is not None:
        return False, existing
    return True, store.add_job(job)


# ----------------------------- Email ingestion -----------------------------

def ingest_email(raw: bytes, store: JobStore, dry_run: bool = False) -> EmailResult:
    """Parse one alert email and store its new jobs."""
    try:
        parsed = parse_email(raw)
    except (LookupError, UnicodeError, ValueError) as e:
        raise EmailParseError(f"Could not decode message: {e}") from e

    result = EmailResult(subject=parsed.subject, date=parsed.date, sender=parsed.sender)

    for job in parsed.jobs:
        employer = job.employer or "?"
        if dry_run:
            result.jobs_found.append(JobResult(job.title, employer, DRY_RUN))
            continue
        is_new, job_id = admit_job(job, store)
        if is_new:
            logger.info("Added job #%s: %s at %s", job_id, job.title, employer)
        result.jobs_found.append(
            JobResult(job.title, employer, ADDED if is_new else DUPLICATE, job_id)
        )

    return result


def ingest_emails(
    messages: Iterable[bytes],
    store: JobStore,
    dry_run: bool = False,
    on_result: Optional[Callable[[EmailResult], None]] = None,
) -> IngestStats:
    """Ingest a sequence of raw messages; one bad message does not stop the run."""
    stats = IngestStats()

    for raw in messages:
        stats.emails_found += 1
        try:
            result = ingest_email(raw, store, dry_run=dry_run)
        except HuntError as e:
            stats.errors += 1
            logger.warning("Error processing email: %s", e)
            continue

        for jr in result.jobs_found:
            if jr.status == ADDED:
                stats.jobs_added += 1
            elif jr.status == DUPLICATE:
                stats.duplicates += 1

        if on_result:
            on_result(result)

    return stats


# ----------------------------- Description fetching -----------------------------

def add_jitter(seconds: int, ratio: float = 0.2, rng: Optional[random.Random] = None) -> int:
    """A delay within ±ratio of seconds, so fetches do not run on a fixed beat."""
    rng = rng or random
    jitter = int(seconds * ratio)
    return rng.randint(max(0, seconds - jitter), seconds + jitter)


async def describe_page(fetcher: JobPageFetcher, url: str) -> JobDescription:
    """Fetch a posting page and derive its description fields."""
    result = await fetcher.fetch_job_description(url)
    if not result.ok:
        raise FetchError(result.error or "No content found on page")
    return describe_text(result.text, url)


async def fetch_descriptions(
    store: JobStore,
    fetcher: JobPageFetcher,
    delay_s: int = 10,
    jitter_ratio: float = 0.2,
    limit: Optional[int] = None,
    force: bool = False,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_progress: Optional[Callable[[int, int, Dict, Optional[str]], None]] = None,
) -> FetchStats:
    """
    Fetch posting pages one at a time and store their descriptions.

    Waits a jittered delay between fetches, not after the last one.
    on_progress(index, total, job, error) is called after each job.
    """
    jobs = store.get_jobs_without_descriptions(limit=limit, force=force)
    stats = FetchStats(total=len(jobs))

    for i, job in enumerate(jobs, start=1):
        error: Optional[str] = None
        try:
            desc = await describe_page(fetcher, job["url"])
            store.update_job_description(job["id"], desc)
            stats.fetched += 1
            if desc.no_longer_accepting:
                stats.closed += 1
        except FetchError as e:
            error = str(e)
            stats.failed += 1
            stats.failures.append((job["id"], error))
            logger.warning("Failed to fetch job #%s: %s", job["id"], error)

        if on_progress:
            on_progress(i, stats.total, job, error)

        if i < stats.total:
            await sleep(add_jitter(delay_s, jitter_ratio))

    return stats


# ----------------------------- Cleanup -----------------------------

def cleanup_duplicates(store: JobStore, dry_run: bool = False) -> List[DuplicatePair]:
    """Find duplicates across the whole store and delete the later record of each pair."""
    pairs = find_duplicates(store.records())
    if not dry_run:
        for pair in pairs:
            logger.info(pair.description)
            store.delete_job(pair.duplicate_id)
    return pairs


def cleanup_artifacts(store: JobStore, dry_run: bool = False) -> List[ExistingRecordView]:
    """Delete stored records whose title is a click-through link rather than a posting."""
    artifacts = [r for r in store.records() if is_stale_artifact_title(r.title)]
    if not dry_run:
        for record in artifacts:
            logger.info("Removing artifact #%s: %r", record.id, record.title)
            store.delete_job(record.id)
    return artifacts
