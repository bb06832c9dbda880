"""
Field extractors over cleaned posting text.

All functions are pure and return None/False/(None, None) when nothing is
found rather than raising.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from hunt.rules import (
    CLOSURE_PHRASES,
    HOURS_PER_YEAR,
    JOB_CODE_LABELS,
    JOB_CODE_MAX_LEN,
    JR_CODE_MAX_LEN,
    JR_CODE_MIN_LEN,
    THOUSANDS_CUTOFF,
)

PayRange = Tuple[Optional[int], Optional[int]]

_DASH = r"\s*(?:-|–|—|to)\s*"

# $150K - $200K, $150k/yr – $200k/yr
_RE_PAY_K = re.compile(
    r"\$(\d{1,3}(?:\.\d+)?)\s*[kK](?:\s*/\s*(?:yr|year))?"
    + _DASH
    + r"\$(\d{1,3}(?:\.\d+)?)\s*[kK]"
)

_GROUPED_RANGE = (
    r"\$(\d{1,3}),(\d{3})(?:\.\d{2})?"
    + _DASH
    + r"\$(\d{1,3}),(\d{3})"
)

# Compensation Range: $120,000 - $180,000
_RE_PAY_LABELED = re.compile(r"compensation[\s\S]*?" + _GROUPED_RANGE, re.IGNORECASE)

# $120,000 - $180,000
_RE_PAY_GROUPED = re.compile(_GROUPED_RANGE)

# $45/hr - $60/hr, $45.50/hour – $60/hour
_RE_PAY_HOURLY = re.compile(
    r"\$(\d+(?:\.\d{1,2})?)\s*/\s*(?:hr|hour)"
    + _DASH
    + r"\$(\d+(?:\.\d{1,2})?)\s*/\s*(?:hr|hour)",
    re.IGNORECASE,
)

_RE_CENTS = re.compile(r"\.\d{1,2}$")


def _ordered(low: Optional[int], high: Optional[int]) -> PayRange:
    if low is not None and high is not None and low > high:
        return high, low
    return low, high


def _scan_dollar_amounts(text: str) -> List[int]:
    """
    Read every '$' amount in order.

    A trailing 'k' multiplies by 1000, and so does any bare amount under
    1000 since postings rarely quote literal pay that low.
    """
    amounts: List[int] = []
    n = len(text)
    i = 0
    while i < n:
        if text[i] != "$":
            i += 1
            continue
        j = i + 1
        while j < n and (text[j].isdigit() or text[j] in ",."):
            j += 1
        run = _RE_CENTS.sub("", text[i + 1:j].rstrip(",."))
        digits = "".join(c for c in run if c.isdigit())
        if digits:
            value = int(digits)
            if j < n and text[j] in "kK":
                value *= 1000
            elif value < THOUSANDS_CUTOFF:
                value *= 1000
            amounts.append(value)
        i = j
    return amounts


def extract_pay_range(text: str) -> PayRange:
    """
    Extract an annual USD pay range.

    Patterns are tried in priority order: "$XXXk - $YYYk", a
    "compensation"-labeled "$XXX,XXX - $YYY,YYY", the same range unlabeled,
    an hourly range annualized at 2080 hours, and finally the first two
    dollar amounts anywhere in the text.
    """
    if not text:
        return None, None

    m = _RE_PAY_K.search(text)
    if m:
        return _ordered(
            int(float(m.group(1)) * 1000),
            int(float(m.group(2)) * 1000),
        )

    for pattern in (_RE_PAY_LABELED, _RE_PAY_GROUPED):
        m = pattern.search(text)
        if m:
            return _ordered(
                int(m.group(1) + m.group(2)),
                int(m.group(3) + m.group(4)),
            )

    m = _RE_PAY_HOURLY.search(text)
    if m:
        return _ordered(
            round(float(m.group(1)) * HOURS_PER_YEAR),
            round(float(m.group(2)) * HOURS_PER_YEAR),
        )

    amounts = _scan_dollar_amounts(text)
    low = amounts[0] if amounts else None
    high = amounts[1] if len(amounts) > 1 else None
    return _ordered(low, high)


_RE_CODE = re.compile(r"\s*([A-Za-z0-9_/-]+)")
_RE_LINKEDIN_VIEW = re.compile(r"/jobs?/view/(\d+)")
_RE_JR_CODE = re.compile(
    r"JR([A-Za-z0-9-]{%d,%d})(?![A-Za-z0-9-])" % (JR_CODE_MIN_LEN, JR_CODE_MAX_LEN)
)


def extract_job_code(text: str) -> Optional[str]:
    """
    Extract an employer requisition/reference code.

    Labeled fields ("Job ID:", "Req #:", ...) are tried first, then a
    LinkedIn /jobs/view/<id> URL, then a bare "JR..." code.
    """
    if not text:
        return None

    for label in JOB_CODE_LABELS:
        m = re.search(re.escape(label), text, re.IGNORECASE)
        if not m:
            continue
        code = _RE_CODE.match(text, m.end())
        if code and len(code.group(1)) <= JOB_CODE_MAX_LEN:
            return code.group(1)

    m = _RE_LINKEDIN_VIEW.search(text)
    if m:
        return f"linkedin-{m.group(1)}"

    m = _RE_JR_CODE.search(text)
    if m:
        return f"JR{m.group(1)}"

    return None


def detect_closed(text: str) -> bool:
    """True if the posting says it is no longer accepting applications."""
    t = (text or "").lower()
    return any(phrase in t for phrase in CLOSURE_PHRASES)
