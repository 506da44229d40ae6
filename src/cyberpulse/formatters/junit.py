"""JUnit XML formatter for CI/CD integration.

One testcase per evaluated control. Non-Compliant controls are failures,
Partial controls are failures only in strict mode, and items whose evaluation
failed are reported as errors.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Union
from xml.dom import minidom
from xml.etree import ElementTree as ET

from ..models.compliance import ComplianceStatus, EvaluationResult, ItemFailure

_NAME_LIMIT = 80


def _case_name(index: int, text: str) -> str:
    text = " ".join((text or "").split()) or "(empty)"
    if len(text) > _NAME_LIMIT:
        text = text[: _NAME_LIMIT - 3] + "..."
    return f"CONTROL-{index + 1:03d}: {text}"


def export_junit_results(
    records: list[Union[EvaluationResult, ItemFailure]],
    output_path: Path,
    strict: bool = False,
    project_name: str = "CyberPulse Compliance",
    duration: float = 0,
) -> dict:
    """Export evaluation results as JUnit XML.

    Args:
        records: Evaluation results (or failure placeholders) in batch order.
        output_path: Path to write the XML file.
        strict: Also fail Partial controls.
        project_name: Name for the testsuites element.
        duration: Total duration in seconds.

    Returns:
        Dict with: path, total_tests, failures, errors, passed.
    """
    fail_set = {ComplianceStatus.NON_COMPLIANT}
    if strict:
        fail_set.add(ComplianceStatus.PARTIAL)

    testsuites = ET.Element("testsuites")
    testsuites.set("name", project_name)
    testsuites.set("timestamp", datetime.now().strftime("%Y-%m-%dT%H:%M:%S"))

    testsuite = ET.SubElement(testsuites, "testsuite")
    testsuite.set("name", "controls")
    testsuite.set("tests", str(len(records)))

    total_failures = 0
    total_errors = 0

    for index, record in enumerate(records):
        testcase = ET.SubElement(testsuite, "testcase")
        testcase.set("classname", "controls")

        if isinstance(record, ItemFailure):
            total_errors += 1
            testcase.set("name", _case_name(index, str(record.input.get("control_text", ""))))
            error = ET.SubElement(testcase, "error")
            error.set("message", record.error)
            error.set("type", "evaluation_error")
            continue

        testcase.set("name", _case_name(index, record.input_control_text))
        if record.status not in fail_set:
            continue

        total_failures += 1
        failure = ET.SubElement(testcase, "failure")
        failure.set("message", f"[{record.status.value}] score {record.score}/100")
        failure.set("type", record.status.value.lower())

        text_parts = [
            f"Status: {record.status.value}",
            f"Score: {record.score}",
            f"Categories: {', '.join(record.categories)}",
        ]
        if record.mapped_requirements:
            text_parts.append("\nRequirements:")
            text_parts.extend(
                f"  {c.framework} {c.clause} - {c.title}" for c in record.mapped_requirements
            )
        if record.gaps:
            text_parts.append("\nGaps:")
            text_parts.extend(f"  {g}" for g in record.gaps)
        if record.actions:
            text_parts.append("\nRemediation:")
            text_parts.extend(f"  {a}" for a in record.actions)

        failure.text = "\n".join(text_parts)

    testsuite.set("failures", str(total_failures))
    testsuite.set("errors", str(total_errors))
    testsuite.set("skipped", "0")

    testsuites.set("tests", str(len(records)))
    testsuites.set("failures", str(total_failures))
    testsuites.set("errors", str(total_errors))
    if duration > 0:
        testsuites.set("time", str(round(duration, 2)))

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Pretty-print XML
    rough = ET.tostring(testsuites, encoding="unicode")
    dom = minidom.parseString(rough)
    xml_str = dom.toprettyxml(indent="  ", encoding="UTF-8")
    output_path.write_bytes(xml_str)

    return {
        "path": str(output_path),
        "total_tests": len(records),
        "failures": total_failures,
        "errors": total_errors,
        "passed": len(records) - total_failures - total_errors,
    }
