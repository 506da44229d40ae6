"""Single-control evaluation pipeline.

text -> categories -> {score + evidence gate, crosswalk mapping, actions}
"""

from __future__ import annotations

from ..compliance.actions import suggest_actions
from ..compliance.classifier import classify_categories
from ..compliance.crosswalk import DEFAULT_CROSSWALK, map_requirements
from ..compliance.scoring import apply_evidence_gate, score_categories
from ..models.compliance import Crosswalk, EvaluationInput, EvaluationResult

ADVISORY_NOTE = "Prototype result. Tune keywords, weights, and crosswalk JSON for your org."


def evaluate_control(
    item: EvaluationInput,
    crosswalk: Crosswalk = DEFAULT_CROSSWALK,
) -> EvaluationResult:
    """Evaluate one control statement against a crosswalk."""
    evidence = list(item.evidence_urls)
    frameworks = list(item.frameworks)

    categories = classify_categories(item.control_text)
    scored = score_categories(categories, len(evidence))
    status, gaps = apply_evidence_gate(scored.status, len(evidence))

    return EvaluationResult(
        input_control_text=item.control_text,
        categories=categories,
        evidence=evidence,
        status=status,
        score=scored.score,
        mapped_requirements=map_requirements(categories, frameworks, crosswalk),
        frameworks_selected=frameworks,
        gaps=gaps,
        actions=suggest_actions(categories, len(evidence)),
        notes=ADVISORY_NOTE,
    )
