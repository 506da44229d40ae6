"""Suggested remediation actions."""

from __future__ import annotations

from typing import Iterable

CATEGORY_ACTIONS: dict[str, str] = {
    "mfa": "Confirm MFA enforced for all privileged accounts",
    "encryption": "Verify encryption at rest & in transit",
    "logging": "Forward critical logs to SIEM & alert on anomalies",
    "backups": "Test restores to validate RPO/RTO targets",
    "patching": "Apply critical patches within policy SLA",
    "access_reviews": "Perform quarterly access recertifications",
}

ATTACH_EVIDENCE_ACTION = "Attach relevant evidence links"


def suggest_actions(categories: Iterable[str], evidence_count: int) -> list[str]:
    actions = [CATEGORY_ACTIONS[c] for c in categories if c in CATEGORY_ACTIONS]
    if evidence_count <= 0:
        actions.append(ATTACH_EVIDENCE_ACTION)
    return actions
