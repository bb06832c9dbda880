"""
Core data models for hunt.

Provides:
- JobSource: where a posting came from
- ParsedJob: immutable record produced by one extraction pass
- JobDescription: fields derived from a fetched posting page
- ExistingRecordView: read-only projection of a stored record, used for dedupe
"""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from hunt.rules import IDENTITY_PARAMS


# ----------------------------- Enums -----------------------------

class JobSource(str, Enum):
    """Origin of a parsed posting."""
    LINKEDIN = "linkedin"
    INDEED = "indeed"
    EMAIL_GENERIC = "email-generic"
    SCRAPE = "scrape"

    @classmethod
    def from_sender(cls, sender: str) -> "JobSource":
        """Infer the source from an email From header."""
        s = (sender or "").lower()
        if "linkedin.com" in s:
            return cls.LINKEDIN
        if "indeed.com" in s:
            return cls.INDEED
        return cls.EMAIL_GENERIC


# ----------------------------- Utilities -----------------------------

def normalize_text(s: str) -> str:
    """Collapse whitespace and strip."""
    return re.sub(r"\s+", " ", (s or "")).strip()


def normalize_title(title: str) -> str:
    """Comparison key for titles: trimmed and lowercased."""
    return (title or "").strip().lower()


def employer_key(employer: Optional[str]) -> str:
    """Comparison key for employer names: trimmed and case-folded."""
    return (employer or "").strip().casefold()


def clean_tracking_url(url: Optional[str]) -> Optional[str]:
    """
    Strip tracking decoration from a posting URL.

    LinkedIn and Indeed wrap links in redirect/tracking query strings, so the
    query and fragment are dropped. Parameters that identify the posting
    itself (Indeed's ``jk``) are kept.
    """
    if not url or not url.strip():
        return None
    u = urllib.parse.urlsplit(url.strip())
    q = urllib.parse.parse_qsl(u.query, keep_blank_values=False)
    q = [(k, v) for k, v in q if k in IDENTITY_PARAMS]
    return urllib.parse.urlunsplit(u._replace(query=urllib.parse.urlencode(q), fragment=""))


def now_utc() -> datetime:
    """Current UTC datetime."""
    return datetime.now(timezone.utc)


def now_utc_iso() -> str:
    """Current UTC time as ISO string."""
    return now_utc().replace(microsecond=0).isoformat().replace("+00:00", "Z")


# ----------------------------- Records -----------------------------

@dataclass(frozen=True)
class ParsedJob:
    """
    A posting extracted from one piece of raw content.

    Constructed once per extraction pass. Pay bounds are annual USD; a
    reversed range is swapped on construction.
    """

    title: str
    source: JobSource = JobSource.SCRAPE
    employer: Optional[str] = None
    url: Optional[str] = None
    location: Optional[str] = None
    pay_min: Optional[int] = None
    pay_max: Optional[int] = None
    job_code: Optional[str] = None
    no_longer_accepting: bool = False
    raw_text: str = ""

    def __post_init__(self):
        title = normalize_text(self.title)
        if not title:
            raise ValueError("ParsedJob requires a non-empty title")
        object.__setattr__(self, "title", title)
        object.__setattr__(self, "employer", normalize_text(self.employer or "") or None)
        object.__setattr__(self, "location", normalize_text(self.location or "") or None)
        object.__setattr__(self, "url", clean_tracking_url(self.url))
        if not isinstance(self.source, JobSource):
            object.__setattr__(self, "source", JobSource(self.source))
        if (
            self.pay_min is not None
            and self.pay_max is not None
            and self.pay_min > self.pay_max
        ):
            low, high = self.pay_max, self.pay_min
            object.__setattr__(self, "pay_min", low)
            object.__setattr__(self, "pay_max", high)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage/export."""
        d = asdict(self)
        d["source"] = self.source.value
        return d


@dataclass(frozen=True)
class JobDescription:
    """Fields derived from a fetched posting page."""
    text: str
    pay_min: Optional[int] = None
    pay_max: Optional[int] = None
    job_code: Optional[str] = None
    no_longer_accepting: bool = False


@dataclass(frozen=True)
class ExistingRecordView:
    """Read-only projection of a stored record, as supplied by storage."""
    id: int
    title: str
    employer: Optional[str] = None
    url: Optional[str] = None
