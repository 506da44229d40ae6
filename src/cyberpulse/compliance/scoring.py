"""Compliance scoring, status thresholds and the evidence gate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..models.compliance import ComplianceStatus

CATEGORY_WEIGHTS: dict[str, int] = {
    "mfa": 25,
    "encryption": 20,
    "logging": 15,
    "backups": 15,
    "patching": 15,
    "access_reviews": 10,
}

EVIDENCE_POINTS_PER_ITEM = 5
EVIDENCE_BOOST_CAP = 10
MAX_SCORE = 100

COMPLIANT_THRESHOLD = 85
PARTIAL_THRESHOLD = 60

NO_EVIDENCE_GAP = "No evidence provided"


@dataclass(frozen=True)
class ScoreResult:
    score: int
    status: ComplianceStatus


def raw_weight(categories: Iterable[str]) -> int:
    """Sum category weights. Unknown categories weigh nothing."""
    return sum(CATEGORY_WEIGHTS.get(c, 0) for c in categories)


def evidence_boost(evidence_count: int) -> int:
    """Bonus points for attached evidence, capped at two items' worth."""
    return min(max(evidence_count, 0) * EVIDENCE_POINTS_PER_ITEM, EVIDENCE_BOOST_CAP)


def status_for_score(score: int) -> ComplianceStatus:
    """Map a score to its status.

    - Compliant: 85 and above
    - Partial: 60 to 84
    - Non-Compliant: below 60
    """
    if score >= COMPLIANT_THRESHOLD:
        return ComplianceStatus.COMPLIANT
    if score >= PARTIAL_THRESHOLD:
        return ComplianceStatus.PARTIAL
    return ComplianceStatus.NON_COMPLIANT


def score_categories(categories: Iterable[str], evidence_count: int) -> ScoreResult:
    score = min(raw_weight(categories) + evidence_boost(evidence_count), MAX_SCORE)
    return ScoreResult(score=score, status=status_for_score(score))


def apply_evidence_gate(
    status: ComplianceStatus,
    evidence_count: int,
) -> tuple[ComplianceStatus, list[str]]:
    """Cap the status at Partial when no evidence is attached.

    Returns the (possibly downgraded) status and the gaps it produced. Lower
    statuses pass through unchanged but still record the missing evidence.
    """
    if evidence_count > 0:
        return status, []

    if status == ComplianceStatus.COMPLIANT:
        status = ComplianceStatus.PARTIAL
    return status, [NO_EVIDENCE_GAP]
