"""
hunt: job-posting extraction and deduplication.

Turns job-alert emails, posting pages and pasted text into structured
records, and keeps one record per real posting across sources.
"""

__version__ = "0.3.0"

from hunt.dedupe import DedupeEngine, find_duplicate, find_duplicates
from hunt.extract.html import clean
from hunt.extract.fields import detect_closed, extract_job_code, extract_pay_range
from hunt.extract.split import split
from hunt.extract.artifacts import is_navigation_artifact, is_search_link
from hunt.models import ExistingRecordView, JobSource, ParsedJob

__all__ = [
    "clean",
    "extract_pay_range",
    "extract_job_code",
    "split",
    "is_navigation_artifact",
    "is_search_link",
    "detect_closed",
    "find_duplicate",
    "find_duplicates",
    "DedupeEngine",
    "ParsedJob",
    "JobSource",
    "ExistingRecordView",
]
