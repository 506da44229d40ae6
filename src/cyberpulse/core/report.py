"""Batch summaries, exit codes and report generation."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .. import __version__
from ..models.compliance import BatchSummary, ComplianceStatus, EvaluationResult, ItemFailure

Record = Union[EvaluationResult, ItemFailure]

DEFAULT_EXIT_CODES = {"compliant": 0, "partial": 2, "non_compliant": 1}

_STATUS_LABELS = {
    ComplianceStatus.COMPLIANT: "PASS",
    ComplianceStatus.PARTIAL: "REVIEW",
    ComplianceStatus.NON_COMPLIANT: "FAIL",
}


def summarize_results(records: list[Record]) -> BatchSummary:
    summary = BatchSummary(total=len(records))
    scores: list[int] = []

    for record in records:
        if isinstance(record, ItemFailure):
            summary.failed += 1
            continue
        scores.append(record.score)
        if record.status == ComplianceStatus.COMPLIANT:
            summary.compliant += 1
        elif record.status == ComplianceStatus.PARTIAL:
            summary.partial += 1
        else:
            summary.non_compliant += 1

    if scores:
        summary.average_score = round(sum(scores) / len(scores), 1)
    return summary


def calculate_overall_status(records: list[Record]) -> Optional[ComplianceStatus]:
    """Worst status across a batch.

    - NON_COMPLIANT: any Non-Compliant control or any failed item
    - PARTIAL: no failures but at least one Partial control
    - COMPLIANT: everything else
    Returns None for an empty batch.
    """
    if not records:
        return None
    summary = summarize_results(records)
    if summary.non_compliant or summary.failed:
        return ComplianceStatus.NON_COMPLIANT
    if summary.partial:
        return ComplianceStatus.PARTIAL
    return ComplianceStatus.COMPLIANT


def get_exit_code(records: list[Record], exit_codes: Optional[dict] = None) -> int:
    """Map the overall batch status to a process exit code."""
    codes = {**DEFAULT_EXIT_CODES, **(exit_codes or {})}
    status = calculate_overall_status(records)
    return {
        ComplianceStatus.COMPLIANT: codes["compliant"],
        ComplianceStatus.PARTIAL: codes["partial"],
        ComplianceStatus.NON_COMPLIANT: codes["non_compliant"],
    }.get(status, codes["compliant"])


def results_to_dict(records: list[Record], crosswalk_source: str = "default") -> dict:
    """JSON-ready document for a batch. Carries no timestamps."""
    return {
        "version": __version__,
        "crosswalk_source": crosswalk_source,
        "summary": summarize_results(records).model_dump(),
        "results": [r.model_dump(mode="json") for r in records],
    }


def export_results_json(
    records: list[Record],
    output_path: Path,
    crosswalk_source: str = "default",
) -> Path:
    """Write batch results to a JSON file (UTF-8, no BOM)."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(results_to_dict(records, crosswalk_source), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return output_path


def generate_evaluation_report(
    records: list[Record],
    project_name: str = "",
    crosswalk_source: str = "default",
    duration_seconds: float = 0,
) -> str:
    """Generate the COMPLIANCE-REPORT.md markdown report."""
    summary = summarize_results(records)
    overall = calculate_overall_status(records)
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    lines: list[str] = []
    lines.append("# Control Compliance Report")
    lines.append("")
    if project_name:
        lines.append(f"**Project:** {project_name}")
    lines.append(f"**Date:** {timestamp}")
    if overall is not None:
        lines.append(f"**Overall:** {_STATUS_LABELS[overall]} ({overall.value})")
    lines.append(f"**Crosswalk:** {crosswalk_source}")
    lines.append(f"**Duration:** {round(duration_seconds, 1)}s")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append("| Status | Count |")
    lines.append("|--------|-------|")
    lines.append(f"| Compliant     | {summary.compliant} |")
    lines.append(f"| Partial       | {summary.partial} |")
    lines.append(f"| Non-Compliant | {summary.non_compliant} |")
    if summary.failed:
        lines.append(f"| Failed        | {summary.failed} |")
    lines.append(f"| **Total** | **{summary.total}** |")
    if summary.average_score is not None:
        lines.append("")
        lines.append(f"Average score: **{summary.average_score}**")
    lines.append("")

    if records:
        lines.append("## Controls")
        lines.append("")

    for i, record in enumerate(records, start=1):
        if isinstance(record, ItemFailure):
            text = str(record.input.get("control_text", "")) or "(empty)"
            lines.append(f"### {i}. {text} [ERROR]")
            lines.append(f"**Error:** {record.error}")
            lines.append("")
            continue

        text = record.input_control_text or "(empty)"
        lines.append(f"### {i}. {text} [{record.status.value}]")
        lines.append(f"**Score:** {record.score}/100")
        lines.append(f"**Categories:** {', '.join(record.categories)}")
        if record.frameworks_selected:
            lines.append(f"**Frameworks:** {', '.join(record.frameworks_selected)}")
        if record.evidence:
            lines.append("**Evidence:**")
            for url in record.evidence:
                lines.append(f"- {url}")
        if record.mapped_requirements:
            lines.append("")
            lines.append("| Framework | Clause | Title |")
            lines.append("|-----------|--------|-------|")
            for c in record.mapped_requirements:
                lines.append(f"| {c.framework} | {c.clause} | {c.title} |")
        if record.gaps:
            lines.append("")
            lines.append("**Gaps:**")
            for gap in record.gaps:
                lines.append(f"- {gap}")
        if record.actions:
            lines.append("")
            lines.append("**Actions:**")
            for action in record.actions:
                lines.append(f"- {action}")
        lines.append("")

    lines.append("---")
    lines.append(f"*Generated by CyberPulse Compliance v{__version__} at {timestamp}*")

    return "\n".join(lines)
