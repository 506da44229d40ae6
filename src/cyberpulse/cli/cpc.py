"""CyberPulse Compliance (cpc) - evaluate control statements against frameworks."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click


@click.group()
@click.version_option(package_name="cyberpulse-compliance", prog_name="cpc")
def cpc_cli() -> None:
    """CyberPulse Compliance - classify, score and crosswalk security controls."""


@cpc_cli.command()
@click.option("--control", "-c", "control_text", type=str, help="Control statement to evaluate")
@click.option("--evidence", "-e", multiple=True, help="Evidence URL (repeatable)")
@click.option("--framework", "-F", "frameworks", multiple=True, help="Framework name or slug (repeatable)")
@click.option("--input", "-i", "input_file", type=click.Path(dir_okay=False), help="YAML/JSON batch file")
@click.option("--crosswalk-url", type=str, help="URL or path of a crosswalk JSON overriding the built-in table")
@click.option("--output-format", "-f", type=click.Choice(["json", "markdown", "junit"]))
@click.option("--output-dir", "-o", type=click.Path(file_okay=False), help="Directory for result files")
@click.option("--project", "-p", type=click.Path(exists=True, file_okay=False), default=".", help="Project path")
@click.option("--continue-on-fail/--fail-fast", default=None, help="Keep going when an item fails")
@click.option("--strict/--no-strict", default=None, help="Treat Partial as a failure in JUnit output")
@click.option("--ci", is_flag=True, help="CI mode: enable exit codes")
def evaluate(
    control_text: str | None,
    evidence: tuple[str, ...],
    frameworks: tuple[str, ...],
    input_file: str | None,
    crosswalk_url: str | None,
    output_format: str | None,
    output_dir: str | None,
    project: str,
    continue_on_fail: bool | None,
    strict: bool | None,
    ci: bool,
) -> None:
    """Evaluate one control (--control) or a batch file (--input)."""
    from ..core.orchestrator import run_evaluation

    exit_code = asyncio.run(
        run_evaluation(
            project_path=Path(project),
            input_file=Path(input_file) if input_file else None,
            control_text=control_text,
            evidence_urls=list(evidence),
            frameworks=list(frameworks) or None,
            crosswalk_url=crosswalk_url,
            output_format=output_format,
            output_dir=Path(output_dir) if output_dir else None,
            continue_on_fail=continue_on_fail,
            strict=strict,
            ci=ci,
        )
    )
    # Usage errors always fail; compliance verdicts only in CI mode
    if exit_code >= 10 or ci:
        sys.exit(exit_code)


@cpc_cli.command()
def frameworks() -> None:
    """List the built-in frameworks and their slugs."""
    from ..compliance.crosswalk import FRAMEWORK_SLUGS

    for slug, name in FRAMEWORK_SLUGS.items():
        click.echo(f"{name:<16} {slug}")


@cpc_cli.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to a file instead of stdout")
def crosswalk(output: str | None) -> None:
    """Export the built-in crosswalk as JSON, as a starting point for a custom one.

    Example: cpc crosswalk -o crosswalk.json
    """
    from ..compliance.crosswalk import DEFAULT_CROSSWALK, crosswalk_to_dict

    content = json.dumps(crosswalk_to_dict(DEFAULT_CROSSWALK), indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(content + "\n", encoding="utf-8")
        click.echo(f"Saved to {output}")
    else:
        click.echo(content)


@cpc_cli.command()
@click.option("--project", "-p", type=click.Path(exists=True, file_okay=False), required=True)
def init(project: str) -> None:
    """Initialize CyberPulse configuration in a project."""
    from ..core.orchestrator import initialize_project

    initialize_project(Path(project))


def main() -> None:
    cpc_cli()


if __name__ == "__main__":
    main()
