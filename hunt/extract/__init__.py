"""
Extraction utilities for hunt.

Provides:
- HTML content cleaning
- Pay range, job code and closure extraction
- Title / employer / location splitting
- Navigation artifact filters
- Job-alert email parsing
- Builders for posting pages and pasted text
"""

from hunt.extract.html import clean
from hunt.extract.fields import detect_closed, extract_job_code, extract_pay_range
from hunt.extract.split import split, split_title_employer
from hunt.extract.artifacts import is_navigation_artifact, is_search_link, is_stale_artifact_title
from hunt.extract.alerts import get_email_body, parse_email
from hunt.extract.posting import describe, parse_pasted_text, parse_posting

__all__ = [
    "clean",
    "extract_pay_range",
    "extract_job_code",
    "detect_closed",
    "split",
    "split_title_employer",
    "is_navigation_artifact",
    "is_search_link",
    "is_stale_artifact_title",
    "get_email_body",
    "parse_email",
    "describe",
    "parse_posting",
    "parse_pasted_text",
]
