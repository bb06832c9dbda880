"""
Title / employer / location splitting for one-line posting summaries.

Common shapes:
    "Software Engineer at Google"
    "DevOps Lead - Amazon"
    "Software Engineer, Google"
    "Title             Company · Location"   (LinkedIn alert cards)
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from hunt.rules import (
    EMPLOYER_MAX_LEN,
    LOCATION_MARKERS,
    MIDDOT,
    PASTED_TITLE_MAX_LEN,
    TITLE_WORDS,
)

Split = Tuple[str, Optional[str], Optional[str]]

# Any whitespace run of 2+: card text carries newlines and indentation in the gap
_RE_WIDE_GAP = re.compile(r"\s{2,}")
_RE_AT = re.compile(r" at ", re.IGNORECASE)
_RE_AT_EMPLOYER = re.compile(r" at ([^\n,\-]+)", re.IGNORECASE)


def split_linkedin_layout(text: str) -> Optional[Split]:
    """
    Parse the LinkedIn card layout "Title<2+ spaces>Company · Location".

    Returns None unless the text has a middot and both title and company
    are non-empty.
    """
    text = (text or "").strip()
    idx = text.find(MIDDOT)
    if idx == -1:
        return None

    before = text[:idx].strip()
    location = text[idx + len(MIDDOT):].strip()

    gaps = list(_RE_WIDE_GAP.finditer(before))
    if not gaps:
        return None
    last = gaps[-1]

    title = before[:last.start()].strip()
    employer = before[last.end():].strip()
    if not title or not employer:
        return None
    return title, employer, location or None


def split_title_employer(text: str) -> Tuple[str, Optional[str]]:
    """Split "Title at/-/, Employer" with guards against hyphenated titles and locations."""
    text = (text or "").strip()

    m = _RE_AT.search(text)
    if m:
        employer = text[m.end():].strip()
        if employer:
            return text[:m.start()].strip(), employer

    idx = text.rfind(" - ")
    if idx != -1:
        employer = text[idx + 3:].strip()
        lower = employer.lower()
        if employer and not any(word in lower for word in TITLE_WORDS):
            return text[:idx].strip(), employer

    idx = text.rfind(", ")
    if idx != -1:
        employer = text[idx + 2:].strip()
        if (
            employer
            and len(employer) < EMPLOYER_MAX_LEN
            and not any(marker in employer for marker in LOCATION_MARKERS)
        ):
            return text[:idx].strip(), employer

    return text, None


def split(text: str) -> Split:
    """Split a posting summary into (title, employer, location)."""
    parsed = split_linkedin_layout(text)
    if parsed:
        return parsed
    title, employer = split_title_employer(text)
    return title, employer, None


def guess_employer(content: str) -> Optional[str]:
    """Find "at <Company>" anywhere in freeform text, up to the next newline, comma or dash."""
    m = _RE_AT_EMPLOYER.search(content or "")
    if not m:
        return None
    employer = m.group(1).strip()
    if employer and len(employer) < EMPLOYER_MAX_LEN:
        return employer
    return None


def first_line_title(content: str) -> str:
    """First non-empty line, shortened to a title-sized string."""
    for line in (content or "").splitlines():
        line = line.strip()
        if line:
            if len(line) > PASTED_TITLE_MAX_LEN:
                return line[:PASTED_TITLE_MAX_LEN - 3] + "..."
            return line
    return ""
