"""Tests for CLI entry points."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from cyberpulse.cli.cpc import cpc_cli


class TestEvaluateCommand:
    @patch("cyberpulse.core.orchestrator.run_evaluation", new_callable=AsyncMock)
    def test_passes_options(self, mock_eval, tmp_path: Path):
        mock_eval.return_value = 0
        runner = CliRunner()
        result = runner.invoke(cpc_cli, [
            "evaluate",
            "-p", str(tmp_path),
            "-c", "MFA for admins",
            "-e", "https://e/1",
            "-e", "https://e/2",
            "-F", "iso27001",
            "-F", "SOC 2",
            "-f", "markdown",
        ])
        assert result.exit_code == 0
        kwargs = mock_eval.call_args.kwargs
        assert kwargs["control_text"] == "MFA for admins"
        assert kwargs["evidence_urls"] == ["https://e/1", "https://e/2"]
        assert kwargs["frameworks"] == ["iso27001", "SOC 2"]
        assert kwargs["output_format"] == "markdown"
        assert kwargs["continue_on_fail"] is None
        assert kwargs["ci"] is False

    @patch("cyberpulse.core.orchestrator.run_evaluation", new_callable=AsyncMock)
    def test_no_frameworks_means_config_default(self, mock_eval, tmp_path: Path):
        mock_eval.return_value = 0
        runner = CliRunner()
        runner.invoke(cpc_cli, ["evaluate", "-p", str(tmp_path), "-c", "x"])
        assert mock_eval.call_args.kwargs["frameworks"] is None

    @patch("cyberpulse.core.orchestrator.run_evaluation", new_callable=AsyncMock)
    def test_continue_on_fail_flag(self, mock_eval, tmp_path: Path):
        mock_eval.return_value = 0
        runner = CliRunner()
        runner.invoke(cpc_cli, ["evaluate", "-p", str(tmp_path), "-c", "x", "--continue-on-fail", "--strict"])
        assert mock_eval.call_args.kwargs["continue_on_fail"] is True
        assert mock_eval.call_args.kwargs["strict"] is True

    @patch("cyberpulse.core.orchestrator.run_evaluation", new_callable=AsyncMock)
    def test_verdict_ignored_outside_ci(self, mock_eval, tmp_path: Path):
        mock_eval.return_value = 1
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["evaluate", "-p", str(tmp_path), "-c", "x"])
        assert result.exit_code == 0

    @patch("cyberpulse.core.orchestrator.run_evaluation", new_callable=AsyncMock)
    def test_ci_mode_exit_code(self, mock_eval, tmp_path: Path):
        mock_eval.return_value = 2
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["evaluate", "-p", str(tmp_path), "-c", "x", "--ci"])
        assert result.exit_code == 2

    @patch("cyberpulse.core.orchestrator.run_evaluation", new_callable=AsyncMock)
    def test_usage_errors_always_exit(self, mock_eval, tmp_path: Path):
        mock_eval.return_value = 11
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["evaluate", "-p", str(tmp_path)])
        assert result.exit_code == 11

    def test_rejects_unknown_format(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["evaluate", "-p", str(tmp_path), "-c", "x", "-f", "pdf"])
        assert result.exit_code == 2

    def test_end_to_end(self, tmp_path: Path):
        out = tmp_path / "out"
        runner = CliRunner()
        result = runner.invoke(cpc_cli, [
            "evaluate",
            "-p", str(tmp_path),
            "-c", "We require MFA and AES-256 encryption for all admin access",
            "-F", "gdpr",
            "-o", str(out),
            "--ci",
        ])
        assert result.exit_code == 1
        data = json.loads((out / "cyberpulse-results.json").read_text(encoding="utf-8"))
        assert data["results"][0]["score"] == 45
        assert (out / "cyberpulse-results.xml").exists()


class TestOtherCommands:
    def test_frameworks_lists_slugs(self):
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["frameworks"])
        assert result.exit_code == 0
        assert "Essential Eight" in result.output
        assert "pcidss" in result.output

    def test_crosswalk_export(self, tmp_path: Path):
        out = tmp_path / "crosswalk.json"
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["crosswalk", "-o", str(out)])
        assert result.exit_code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["mfa"]["ISO 27001"] == [
            {"framework": "ISO 27001", "clause": "A.5.17", "title": "Authentication information"},
        ]

    def test_crosswalk_to_stdout(self):
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["crosswalk"])
        assert result.exit_code == 0
        assert list(json.loads(result.output)) == [
            "mfa", "encryption", "logging", "backups", "patching", "access_reviews",
        ]

    @patch("cyberpulse.core.orchestrator.initialize_project")
    def test_init_subcommand(self, mock_init, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["init", "-p", str(tmp_path)])
        assert result.exit_code == 0
        mock_init.assert_called_once()

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cpc_cli, ["--version"])
        assert result.exit_code == 0
        assert "cpc" in result.output
