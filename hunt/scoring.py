"""
Deterministic ranking of stored jobs.

Scores favour well-paid postings still in play and push down employers
marked "yuck" or "never". Scores are floats clamped at 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

BASE_SCORE = 50.0

# Pay bonus: max pay per point (capped), or min pay per point when only a floor is known
PAY_MAX_PER_POINT = 10000.0
PAY_MAX_CAP = 30.0
PAY_MIN_PER_POINT = 15000.0
PAY_MIN_CAP = 20.0

EMPLOYER_PENALTIES: Dict[str, float] = {
    "yuck": 20.0,
    "never": 100.0,
}

STATUS_BONUSES: Dict[str, float] = {
    "reviewing": 10.0,
    "new": 5.0,
}

# Jobs in these states are out of the running
UNRANKED_STATUSES = ("closed", "rejected")


@dataclass(frozen=True)
class ScoreBreakdown:
    score: float
    reasons: List[str]


def score_job(job: Dict) -> ScoreBreakdown:
    """
    Score one job row (as returned by JobDatabase.list_jobs).
    """
    score = BASE_SCORE
    reasons: List[str] = []

    pay_max: Optional[int] = job.get("pay_max")
    pay_min: Optional[int] = job.get("pay_min")
    if pay_max:
        bonus = min(pay_max / PAY_MAX_PER_POINT, PAY_MAX_CAP)
        score += bonus
        reasons.append(f"+{bonus:.1f} pay up to ${pay_max:,}")
    elif pay_min:
        bonus = min(pay_min / PAY_MIN_PER_POINT, PAY_MIN_CAP)
        score += bonus
        reasons.append(f"+{bonus:.1f} pay from ${pay_min:,}")

    penalty = EMPLOYER_PENALTIES.get(job.get("employer_status") or "ok", 0.0)
    if penalty:
        score -= penalty
        reasons.append(f"-{penalty:.0f} employer marked {job['employer_status']}")

    bonus = STATUS_BONUSES.get(job.get("status") or "", 0.0)
    if bonus:
        score += bonus
        reasons.append(f"+{bonus:.0f} {job['status']}")

    return ScoreBreakdown(score=max(0.0, score), reasons=reasons)


def rank_jobs(jobs: Iterable[Dict], limit: Optional[int] = 10) -> List[Tuple[Dict, ScoreBreakdown]]:
    """Open jobs with their scores, best first. Ties keep insertion order."""
    scored = [
        (job, score_job(job))
        for job in jobs
        if job.get("status") not in UNRANKED_STATUSES
    ]
    scored.sort(key=lambda pair: pair[1].score, reverse=True)
    return scored[:limit] if limit is not None else scored
