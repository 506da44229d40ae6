"""Batch evaluation orchestrator.

Resolves the crosswalk once per batch, evaluates items in input order and
writes the requested reports.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import httpx
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..compliance.crosswalk import DEFAULT_CROSSWALK
from ..compliance.loader import CrosswalkResolution, CrosswalkSource, get_crosswalk_source, resolve_crosswalk
from ..formatters.junit import export_junit_results
from ..models.compliance import Crosswalk, EvaluationInput, ItemFailure
from ..utils.sanitize import sanitize_error
from .config import CONFIG_DIR, get_config_path, get_effective_config, get_effective_frameworks
from .evaluator import evaluate_control
from .inputs import InputFileError, load_batch_file, parse_items
from .report import Record, export_results_json, generate_evaluation_report, get_exit_code, summarize_results

console = Console()

RESULTS_JSON = "cyberpulse-results.json"
REPORT_MARKDOWN = "COMPLIANCE-REPORT.md"
RESULTS_JUNIT = "cyberpulse-results.xml"

EXIT_NO_ITEMS = 11
EXIT_INPUT_ERROR = 12
EXIT_ABORTED = 13


class EvaluationError(Exception):
    """Evaluation of one batch item failed.

    ``item_index`` is the zero-based position of the item in the batch.
    """

    def __init__(self, item_index: int, cause: BaseException):
        self.item_index = item_index
        self.cause = cause
        super().__init__(f"Item {item_index}: {sanitize_error(str(cause))}")


@dataclass
class BatchOutcome:
    records: list[Record] = field(default_factory=list)
    resolution: CrosswalkResolution = field(
        default_factory=lambda: CrosswalkResolution(crosswalk=DEFAULT_CROSSWALK)
    )


def _input_as_dict(item: Any) -> dict:
    if isinstance(item, EvaluationInput):
        return item.model_dump()
    if isinstance(item, dict):
        return dict(item)
    return {"value": repr(item)}


def evaluate_batch(
    items: list[Union[EvaluationInput, dict]],
    crosswalk: Crosswalk = DEFAULT_CROSSWALK,
    continue_on_fail: bool = False,
) -> list[Record]:
    """Evaluate items in order against one read-only crosswalk.

    With ``continue_on_fail`` a failing item yields an ItemFailure at its
    position; otherwise the first failure raises EvaluationError.
    """
    records: list[Record] = []

    for index, raw in enumerate(items):
        try:
            item = raw if isinstance(raw, EvaluationInput) else EvaluationInput.model_validate(raw)
            records.append(evaluate_control(item, crosswalk))
        except Exception as e:
            if not continue_on_fail:
                raise EvaluationError(index, e) from e
            records.append(ItemFailure(
                item_index=index,
                input=_input_as_dict(raw),
                error=sanitize_error(str(e)),
            ))

    return records


async def run_batch(
    items: list[Union[EvaluationInput, dict]],
    crosswalk_location: Optional[str] = None,
    continue_on_fail: bool = False,
    timeout_seconds: float = 30,
    client: Optional[httpx.AsyncClient] = None,
    source: Optional[CrosswalkSource] = None,
) -> BatchOutcome:
    """Resolve the crosswalk once, then evaluate the whole batch.

    An explicit ``source`` takes precedence over ``crosswalk_location``.
    """
    if source is None:
        source = get_crosswalk_source(crosswalk_location, timeout_seconds=timeout_seconds, client=client)
    resolution = await resolve_crosswalk(source)
    records = evaluate_batch(items, resolution.crosswalk, continue_on_fail=continue_on_fail)
    return BatchOutcome(records=records, resolution=resolution)


def initialize_project(project_path: Path) -> None:
    """Initialize the .cyberpulse directory with a starter config."""
    config_path = get_config_path(project_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if not config_path.exists():
        config_path.write_text(
            "# CyberPulse Compliance project configuration\n"
            "\n"
            f"cyberpulse_version: \"{__version__}\"\n"
            "\n"
            "project:\n"
            f'  name: "{project_path.name}"\n'
            "\n"
            "crosswalk:\n"
            '  url: ""\n'
            "  timeout_seconds: 30\n"
            "\n"
            "frameworks:\n"
            "  default:\n"
            '    - "ISO 27001"\n'
            '    - "SOC 2"\n'
            '    - "NIST CSF"\n'
            '    - "PCI DSS"\n'
            '    - "Essential Eight"\n'
            '    - "GDPR"\n',
            encoding="utf-8",
        )

    console.print(f"  [green]Initialized[/green] {CONFIG_DIR}/ in {escape(project_path.name)}")


def _is_ci(ci: bool) -> bool:
    return ci or bool(
        os.environ.get("TF_BUILD")
        or os.environ.get("GITHUB_ACTIONS")
        or os.environ.get("CI")
        or os.environ.get("JENKINS_URL")
    )


async def run_evaluation(
    project_path: Path,
    input_file: Optional[Path] = None,
    control_text: Optional[str] = None,
    evidence_urls: Optional[list[str]] = None,
    frameworks: Optional[list[str]] = None,
    crosswalk_url: Optional[str] = None,
    output_format: Optional[str] = None,
    output_dir: Optional[Path] = None,
    continue_on_fail: Optional[bool] = None,
    strict: Optional[bool] = None,
    ci: bool = False,
) -> int:
    """Main evaluation entry point for the CLI. Returns exit code."""
    start_time = time.time()
    project_path = Path(project_path).resolve()
    is_ci = _is_ci(ci)

    cli_overrides: dict = {}
    if crosswalk_url is not None:
        cli_overrides.setdefault("crosswalk", {})["url"] = crosswalk_url
    if output_format:
        cli_overrides.setdefault("output", {})["format"] = output_format
    if output_dir is not None:
        cli_overrides.setdefault("output", {})["dir"] = str(output_dir)
    if continue_on_fail is not None:
        cli_overrides.setdefault("evaluation", {})["continue_on_fail"] = continue_on_fail
    if strict is not None:
        cli_overrides.setdefault("evaluation", {})["strict"] = strict

    config = get_effective_config(project_path, cli_overrides=cli_overrides or None)
    selected = get_effective_frameworks(config, frameworks)
    crosswalk_config = config.get("crosswalk", {})
    evaluation_config = config.get("evaluation", {})
    output_config = config.get("output", {})

    # Gather items: batch file first, then the inline control
    items: list[EvaluationInput] = []
    location = crosswalk_config.get("url") or ""
    if input_file is not None:
        try:
            batch = load_batch_file(Path(input_file), default_frameworks=selected)
        except InputFileError as e:
            console.print(f"  [red]ERROR[/red] {escape(sanitize_error(str(e)))}")
            return EXIT_INPUT_ERROR
        items.extend(batch.items)
        if batch.crosswalk_url and crosswalk_url is None:
            location = batch.crosswalk_url
    if control_text is not None:
        items.extend(parse_items(
            [{"control_text": control_text, "evidence_urls": evidence_urls or [], "frameworks": selected}]
        ))

    if not items:
        console.print("  [red]ERROR[/red] Nothing to evaluate. Pass --control or --input.")
        return EXIT_NO_ITEMS

    project_name = config.get("project", {}).get("name") or project_path.name

    console.print()
    console.print(f"  [bold cyan]CYBERPULSE COMPLIANCE[/bold cyan] v{__version__}")
    console.print(f"  Project:    [white]{escape(project_name)}[/white]")
    console.print(f"  Controls:   [white]{len(items)}[/white]")
    console.print(f"  Frameworks: [white]{escape(', '.join(selected) or '(none)')}[/white]")
    console.print()

    try:
        outcome = await run_batch(
            items,
            crosswalk_location=location,
            continue_on_fail=bool(evaluation_config.get("continue_on_fail", False)),
            timeout_seconds=float(crosswalk_config.get("timeout_seconds", 30)),
        )
    except EvaluationError as e:
        console.print(f"  [red]ERROR[/red] Batch aborted at item {e.item_index}: {escape(sanitize_error(str(e.cause)))}")
        return EXIT_ABORTED

    resolution = outcome.resolution
    if resolution.fell_back:
        console.print(f"  [dim]INFO[/dim] Crosswalk unavailable, using built-in table ({escape(resolution.error or '')})")
    else:
        console.print(f"  [green]OK[/green] Crosswalk: {escape(resolution.source)}")

    records = outcome.records
    for i, record in enumerate(records):
        if isinstance(record, ItemFailure):
            console.print(f"  [red]FAILED[/red] #{i}: {escape(record.error)}")
            continue
        color = {"Compliant": "green", "Partial": "yellow"}.get(record.status.value, "red")
        console.print(
            f"  [{color}]{record.status.value}[/{color}] #{i} score {record.score} "
            f"({', '.join(record.categories)})"
        )

    out_dir = Path(output_config.get("dir") or "cyberpulse-output")
    if not out_dir.is_absolute():
        out_dir = Path.cwd() / out_dir
    fmt = output_config.get("format", "json")
    duration = time.time() - start_time

    json_path = export_results_json(records, out_dir / RESULTS_JSON, crosswalk_source=resolution.source)
    console.print(f"\n  [green]OK[/green] Results: {json_path}")

    if fmt == "markdown":
        report = generate_evaluation_report(
            records,
            project_name=project_name,
            crosswalk_source=resolution.source,
            duration_seconds=duration,
        )
        report_path = out_dir / REPORT_MARKDOWN
        report_path.write_text(report, encoding="utf-8")
        console.print(f"  [green]OK[/green] Report: {report_path}")

    if fmt == "junit" or is_ci:
        junit_result = export_junit_results(
            records,
            out_dir / RESULTS_JUNIT,
            strict=bool(evaluation_config.get("strict", False)),
            project_name=project_name,
            duration=duration,
        )
        console.print(
            f"  [green]OK[/green] JUnit XML: {junit_result['total_tests']} tests, "
            f"{junit_result['failures']} failures, {junit_result['errors']} errors"
        )

    summary = summarize_results(records)
    exit_code = get_exit_code(records, config.get("ci", {}).get("exit_codes"))
    console.print(
        f"\n  Compliant: {summary.compliant}  Partial: {summary.partial}  "
        f"Non-Compliant: {summary.non_compliant}  Failed: {summary.failed}"
    )
    if is_ci:
        console.print(f"  CI Mode: Exiting with code {exit_code}")
    console.print()

    return exit_code
