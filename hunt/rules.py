"""
Static heuristic tables.

Every phrase list, label table and threshold used by the extractors and
the dedupe engine lives here so the rules can be audited and tested on
their own.
"""

from __future__ import annotations

from typing import Tuple


# ----------------------------- HTML cleaning -----------------------------

# Elements dropped with their whole subtree.
SKIP_TAGS: Tuple[str, ...] = ("script", "style", "noscript", "svg", "path")

BLOCK_TAGS: Tuple[str, ...] = ("p", "div", "h1", "h2", "h3", "h4", "h5", "h6")
LIST_TAGS: Tuple[str, ...] = ("ul", "ol")
BULLET = "• "

# Inlined page-state / bundler output leaking into the DOM as text.
JS_SIGNATURES: Tuple[str, ...] = ("window.__", "webpack", "module_cache", "__como_")

# Direct text must be longer than this before the JS check applies.
JS_TEXT_MIN_LEN = 50

# Job-board UI chrome. Matched against the lowercased full text of an element.
NOISE_PHRASES: Tuple[str, ...] = (
    "set alert for similar jobs",
    "tailor my resume",
    "show premium insights",
    "see how you compare",
    "try premium",
    "am i a good fit for this job",
    "how can i best position myself",
    "show match details",
    "help me stand out",
    "people you can reach out to",
    "meet the hiring team",
    "save this job",
    "report this job",
    "easy apply",
)

# Noise phrases only discard elements whose full text is shorter than this,
# so a long description that mentions one in passing survives.
NOISE_MAX_LEN = 500

# Cleaned text is cut at the first of these found, checked in this order.
END_MARKERS: Tuple[str, ...] = (
    "… more",
    "More jobs",
    "Looking for talent?",
    "Actively reviewing applicants",
    "LinkedIn Corporation ©",
    "Select language",
)


# ----------------------------- Pay -----------------------------

HOURS_PER_YEAR = 2080

# Bare numbers below this after a '$' are read as thousands ("$150" -> 150000).
THOUSANDS_CUTOFF = 1000


# ----------------------------- Job codes -----------------------------

JOB_CODE_LABELS: Tuple[str, ...] = (
    "job id:",
    "job code:",
    "requisition id:",
    "req id:",
    "req#:",
    "req #:",
    "job #:",
    "job number:",
    "job no:",
    "reference:",
    "ref:",
)

JOB_CODE_MAX_LEN = 50
JR_CODE_MIN_LEN = 4
JR_CODE_MAX_LEN = 20


# ----------------------------- Closure -----------------------------

CLOSURE_PHRASES: Tuple[str, ...] = (
    "no longer accepting applications",
    "no longer accepting applicants",
    "this position has been filled",
    "application window has closed",
    "this job is no longer available",
    "this position is no longer available",
    "this job has expired",
    "this posting has closed",
    "applications are closed",
    "job is closed",
)


# ----------------------------- Splitting -----------------------------

MIDDOT = "·"

# A trailing ", X" segment is not an employer if it contains one of these.
LOCATION_MARKERS: Tuple[str, ...] = ("Remote", "Hybrid")
EMPLOYER_MAX_LEN = 50

# A trailing " - X" segment containing these is part of the title.
TITLE_WORDS: Tuple[str, ...] = ("engineer", "developer")

PASTED_TITLE_MAX_LEN = 100


# ----------------------------- Navigation artifacts -----------------------------

ARTIFACT_MIN_LEN = 10

ARTIFACT_EXACT: Tuple[str, ...] = (
    "jobs",
    "search for jobs",
    "see all jobs",
    "view all",
    "search other jobs",
)

ARTIFACT_PREFIXES: Tuple[str, ...] = ("jobs similar to", "jobs in ", "manage job")
ARTIFACT_CONTAINS: Tuple[str, ...] = ("unsubscribe", "privacy")
ARTIFACT_SUFFIXES: Tuple[str, ...] = (" jobs", " Jobs")

SEARCH_LINK_MARKERS: Tuple[str, ...] = ("/jobs/search", "/search?", "/jobs/alerts")

# Titles of stored records that are click-through links rather than postings.
STALE_TITLE_PHRASES: Tuple[str, ...] = (
    "view this job",
    "view job",
    "apply now",
    "see more",
    "view all",
    "click here",
    "learn more",
    "read more",
    "get started",
    "sign in",
    "log in",
    "unsubscribe",
)
STALE_TITLE_MIN_LEN = 5
STALE_TITLE_MAX_LEN = 50


# ----------------------------- Dedupe -----------------------------

# Jaro-Winkler similarity strictly above this marks two titles as the same posting.
FUZZY_TITLE_THRESHOLD = 0.8
WINKLER_PREFIX_LEN = 4
WINKLER_SCALING = 0.1
# Jaro scores at or below this get no prefix boost.
WINKLER_BOOST_THRESHOLD = 0.7

# ----------------------------- URLs -----------------------------

# Query parameters that identify the posting itself and survive URL cleaning.
IDENTITY_PARAMS: Tuple[str, ...] = ("jk",)
