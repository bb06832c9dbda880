"""
Filters for UI chrome that looks like a job listing.
"""

from __future__ import annotations

from hunt.rules import (
    ARTIFACT_CONTAINS,
    ARTIFACT_EXACT,
    ARTIFACT_MIN_LEN,
    ARTIFACT_PREFIXES,
    ARTIFACT_SUFFIXES,
    SEARCH_LINK_MARKERS,
    STALE_TITLE_MAX_LEN,
    STALE_TITLE_MIN_LEN,
    STALE_TITLE_PHRASES,
)


def is_navigation_artifact(text: str) -> bool:
    """
    True if a link text is navigation rather than a posting.

    Titles ending in " jobs" ("Engineering Manager jobs") are search-result
    links; "jobs" elsewhere in a title is allowed.
    """
    trimmed = (text or "").strip()
    lower = trimmed.lower()

    if len(trimmed) < ARTIFACT_MIN_LEN:
        return True
    if lower in ARTIFACT_EXACT:
        return True
    if lower.startswith(ARTIFACT_PREFIXES):
        return True
    if any(s in lower for s in ARTIFACT_CONTAINS):
        return True
    if trimmed.endswith(ARTIFACT_SUFFIXES):
        return True
    return False


def is_search_link(url: str) -> bool:
    """True for search, alert and settings URLs rather than posting URLs."""
    u = url or ""
    return any(marker in u for marker in SEARCH_LINK_MARKERS)


def is_stale_artifact_title(title: str) -> bool:
    """True for a stored title that is really a click-through link ("Apply now", "View job")."""
    title = title or ""
    if len(title) < STALE_TITLE_MIN_LEN:
        return True
    lower = title.lower()
    return len(lower) < STALE_TITLE_MAX_LEN and any(p in lower for p in STALE_TITLE_PHRASES)
