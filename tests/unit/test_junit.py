"""Tests for formatters/junit.py."""

from __future__ import annotations

from pathlib import Path
from xml.etree import ElementTree as ET

from cyberpulse.core.evaluator import evaluate_control
from cyberpulse.formatters.junit import export_junit_results
from cyberpulse.models.compliance import EvaluationInput, ItemFailure


class TestExportJunitResults:
    def _make_records(self) -> list:
        return [
            # Compliant: 90 + 5
            evaluate_control(EvaluationInput(
                control_text="MFA, encryption, logging, backups and patching are all enforced",
                evidence_urls=["https://e/1"],
                frameworks=["ISO 27001"],
            )),
            # Partial: 90 without evidence
            evaluate_control(EvaluationInput(
                control_text="MFA, encryption, logging, backups and patching are all enforced",
                frameworks=["ISO 27001"],
            )),
            # Non-Compliant: 25
            evaluate_control(EvaluationInput(control_text="Admins must use MFA", frameworks=["SOC 2"])),
            ItemFailure(item_index=3, input={"control_text": "broken"}, error="boom"),
        ]

    def test_creates_xml_file(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        result = export_junit_results(self._make_records(), out)
        assert out.exists()
        assert result["total_tests"] == 4
        assert result["failures"] == 1
        assert result["errors"] == 1
        assert result["passed"] == 2

    def test_non_compliant_is_failure(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        export_junit_results(self._make_records(), out)
        root = ET.parse(out).getroot()
        failures = root.findall(".//failure")
        assert len(failures) == 1
        assert failures[0].get("type") == "non-compliant"
        assert "SOC 2 CC6.1" in failures[0].text

    def test_strict_fails_partial(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        result = export_junit_results(self._make_records(), out, strict=True)
        assert result["failures"] == 2

    def test_item_failure_is_error(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        export_junit_results(self._make_records(), out)
        root = ET.parse(out).getroot()
        errors = root.findall(".//error")
        assert len(errors) == 1
        assert errors[0].get("type") == "evaluation_error"
        assert errors[0].get("message") == "boom"

    def test_testcase_names(self, tmp_path: Path):
        records = self._make_records()
        records.append(evaluate_control(EvaluationInput(control_text="x" * 120)))
        out = tmp_path / "results.xml"
        export_junit_results(records, out)
        names = [tc.get("name") for tc in ET.parse(out).getroot().iter("testcase")]
        assert names[2] == "CONTROL-003: Admins must use MFA"
        assert names[3] == "CONTROL-004: broken"
        assert names[4].startswith("CONTROL-005: xxx")
        assert names[4].endswith("...")
        assert len(names[4]) == len("CONTROL-005: ") + 80

    def test_testsuites_attributes(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        export_junit_results(self._make_records(), out, project_name="My Project", duration=10.5)
        root = ET.parse(out).getroot()
        assert root.get("name") == "My Project"
        assert root.get("tests") == "4"
        assert root.get("time") == "10.5"

    def test_creates_parent_dirs(self, tmp_path: Path):
        out = tmp_path / "sub" / "dir" / "results.xml"
        export_junit_results(self._make_records(), out)
        assert out.exists()

    def test_empty_records(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        result = export_junit_results([], out)
        assert result["total_tests"] == 0
        assert result["failures"] == 0
        ET.parse(out)
