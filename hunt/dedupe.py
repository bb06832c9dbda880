"""
Tiered deduplication of postings against known records.

Deduplication strategy (first match wins):
1. URL: identical cleaned URL, regardless of title or employer
2. Same employer (case-insensitive), normalized titles:
   a. exact match
   b. one title contains the other
   c. Jaro-Winkler similarity above FUZZY_TITLE_THRESHOLD

Employer absence on either side leaves only the URL rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from hunt.models import ExistingRecordView, ParsedJob, employer_key, normalize_title
from hunt.rules import (
    FUZZY_TITLE_THRESHOLD,
    WINKLER_BOOST_THRESHOLD,
    WINKLER_PREFIX_LEN,
    WINKLER_SCALING,
)

Candidate = Union[ParsedJob, ExistingRecordView]

RULE_URL = "url"
RULE_EXACT = "exact"
RULE_SUBSTRING = "substring"
RULE_FUZZY = "fuzzy"


@dataclass(frozen=True)
class DedupeMatch:
    """Which existing record a candidate duplicates, and by which rule."""
    existing_id: int
    rule: str


@dataclass(frozen=True)
class DuplicatePair:
    """A later record found to duplicate an earlier one."""
    original_id: int
    duplicate_id: int
    rule: str
    description: str = ""


@dataclass
class DedupeResult:
    """Result of deduplicating a batch of candidates."""
    unique_jobs: List[ParsedJob]
    duplicates_removed: int
    duplicates_by_url: int
    duplicates_by_title: int
    matches: List[Tuple[ParsedJob, DedupeMatch]] = field(default_factory=list)


# ----------------------------- Similarity -----------------------------

def jaro(s1: str, s2: str) -> float:
    """Jaro similarity in [0, 1]."""
    if s1 == s2:
        return 1.0
    len1, len2 = len(s1), len(s2)
    if not len1 or not len2:
        return 0.0

    window = max(max(len1, len2) // 2 - 1, 0)
    matched1 = [False] * len1
    matched2 = [False] * len2
    matches = 0

    for i, c in enumerate(s1):
        lo = max(0, i - window)
        hi = min(len2, i + window + 1)
        for j in range(lo, hi):
            if not matched2[j] and s2[j] == c:
                matched1[i] = matched2[j] = True
                matches += 1
                break

    if not matches:
        return 0.0

    transpositions = 0
    k = 0
    for i in range(len1):
        if not matched1[i]:
            continue
        while not matched2[k]:
            k += 1
        if s1[i] != s2[k]:
            transpositions += 1
        k += 1

    m = float(matches)
    return (m / len1 + m / len2 + (m - transpositions // 2) / m) / 3


def jaro_winkler(s1: str, s2: str) -> float:
    """
    Jaro-Winkler similarity, boosting a common prefix of up to 4 chars.

    Only scores above WINKLER_BOOST_THRESHOLD are boosted.
    """
    sim = jaro(s1, s2)
    if sim <= WINKLER_BOOST_THRESHOLD:
        return sim
    prefix = 0
    for a, b in zip(s1[:WINKLER_PREFIX_LEN], s2[:WINKLER_PREFIX_LEN]):
        if a != b:
            break
        prefix += 1
    return sim + prefix * WINKLER_SCALING * (1 - sim)


# ----------------------------- Rules -----------------------------

def title_rule(title1: str, title2: str) -> Optional[str]:
    """Name of the first title rule that matches, or None."""
    n1 = normalize_title(title1)
    n2 = normalize_title(title2)
    if n1 == n2:
        return RULE_EXACT
    if n1 and n2 and (n1 in n2 or n2 in n1):
        return RULE_SUBSTRING
    if jaro_winkler(n1, n2) > FUZZY_TITLE_THRESHOLD:
        return RULE_FUZZY
    return None


def match_rule(candidate: Candidate, existing: Candidate) -> Optional[str]:
    """Name of the first rule under which candidate duplicates existing, or None."""
    if candidate.url and candidate.url == existing.url:
        return RULE_URL
    key = employer_key(candidate.employer)
    if key and key == employer_key(existing.employer):
        return title_rule(candidate.title, existing.title)
    return None


# ----------------------------- Engine -----------------------------

class DedupeEngine:
    """
    Match candidates against a corpus snapshot.

    Candidates accepted with admit() join the snapshot, so a batch is
    checked as if each accepted candidate had already been stored.
    """

    def __init__(self, corpus: Optional[Iterable[ExistingRecordView]] = None):
        self._urls: Dict[str, int] = {}
        self._by_employer: Dict[str, List[ExistingRecordView]] = {}
        self._next_temp_id = -1
        for record in corpus or ():
            self.add(record)

    def clear(self) -> None:
        """Clear all indexes."""
        self._urls.clear()
        self._by_employer.clear()

    def add(self, record: ExistingRecordView) -> None:
        """Add a known record to the indexes."""
        if record.url:
            # Earliest record wins the URL slot
            self._urls.setdefault(record.url, record.id)
        key = employer_key(record.employer)
        if key:
            self._by_employer.setdefault(key, []).append(record)

    def check(self, candidate: Candidate) -> Optional[DedupeMatch]:
        """Return the first matching record, URL rule before title rules."""
        if candidate.url and candidate.url in self._urls:
            return DedupeMatch(self._urls[candidate.url], RULE_URL)

        key = employer_key(candidate.employer)
        if not key:
            return None
        for record in self._by_employer.get(key, []):
            rule = title_rule(candidate.title, record.title)
            if rule:
                return DedupeMatch(record.id, rule)
        return None

    def admit(self, candidate: ParsedJob, record_id: Optional[int] = None) -> ExistingRecordView:
        """
        Add an accepted candidate to the snapshot.

        Without a storage id the record gets a temporary negative id.
        """
        if record_id is None:
            record_id = self._next_temp_id
            self._next_temp_id -= 1
        record = ExistingRecordView(
            id=record_id,
            title=candidate.title,
            employer=candidate.employer,
            url=candidate.url,
        )
        self.add(record)
        return record

    def dedupe(self, candidates: Iterable[ParsedJob]) -> DedupeResult:
        """Split a batch into unique candidates and duplicates."""
        unique: List[ParsedJob] = []
        matches: List[Tuple[ParsedJob, DedupeMatch]] = []
        by_url = 0
        by_title = 0

        for job in candidates:
            match = self.check(job)
            if match:
                matches.append((job, match))
                if match.rule == RULE_URL:
                    by_url += 1
                else:
                    by_title += 1
                continue
            self.admit(job)
            unique.append(job)

        return DedupeResult(
            unique_jobs=unique,
            duplicates_removed=by_url + by_title,
            duplicates_by_url=by_url,
            duplicates_by_title=by_title,
            matches=matches,
        )


def find_duplicate_match(
    candidate: Candidate,
    corpus: Iterable[ExistingRecordView],
) -> Optional[DedupeMatch]:
    """Like find_duplicate, but also report the rule that fired."""
    return DedupeEngine(corpus).check(candidate)


def find_duplicate(
    candidate: Candidate,
    corpus: Iterable[ExistingRecordView],
) -> Optional[int]:
    """Id of the existing record the candidate duplicates, or None if it is novel."""
    match = find_duplicate_match(candidate, corpus)
    return match.existing_id if match else None


def find_duplicates(records: Iterable[ExistingRecordView]) -> List[DuplicatePair]:
    """
    Scan a corpus for duplicates of earlier records.

    Records must be in ascending insertion order. Each record is compared
    with every earlier record not itself flagged as a duplicate, and the
    first match is reported. This is a first-match mapping, not a
    transitive clustering.
    """
    records = list(records)
    flagged: Set[int] = set()
    pairs: List[DuplicatePair] = []

    for i in range(1, len(records)):
        record = records[i]
        for earlier in records[:i]:
            if earlier.id in flagged:
                continue
            rule = match_rule(record, earlier)
            if rule:
                pairs.append(DuplicatePair(
                    original_id=earlier.id,
                    duplicate_id=record.id,
                    rule=rule,
                    description=(
                        f"Job #{record.id} ('{record.title}') duplicates "
                        f"job #{earlier.id} ('{earlier.title}')"
                    ),
                ))
                flagged.add(record.id)
                break

    return pairs
