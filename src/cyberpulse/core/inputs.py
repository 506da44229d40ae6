"""Batch input files.

A batch file is YAML or JSON holding either a list of items, or a mapping with
an ``items`` list and an optional batch-level ``crosswalk_url``::

    crosswalk_url: https://grc.example.com/crosswalk.json
    items:
      - control_text: "Admins must use MFA"
        evidence_urls: ["https://portal.example.com/mfa-report.pdf"]
        frameworks: ["ISO 27001", "soc2"]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from ..models.compliance import EvaluationInput


class InputFileError(Exception):
    """A batch input file is missing or malformed."""


@dataclass
class BatchFile:
    items: list[EvaluationInput] = field(default_factory=list)
    crosswalk_url: Optional[str] = None


def parse_items(raw_items: list, default_frameworks: Optional[list[str]] = None) -> list[EvaluationInput]:
    """Build evaluation inputs from raw mappings.

    Items without their own framework selection use ``default_frameworks``.
    """
    items: list[EvaluationInput] = []
    for i, raw in enumerate(raw_items):
        if isinstance(raw, str):
            raw = {"control_text": raw}
        if not isinstance(raw, dict):
            raise InputFileError(f"Item {i} must be a mapping, got {type(raw).__name__}")
        try:
            item = EvaluationInput.model_validate(raw)
        except ValidationError as e:
            raise InputFileError(f"Item {i} is invalid: {e.error_count()} validation error(s)") from e
        if not item.frameworks and default_frameworks:
            item = item.model_copy(update={"frameworks": list(default_frameworks)})
        items.append(item)
    return items


def load_batch_file(path: Path, default_frameworks: Optional[list[str]] = None) -> BatchFile:
    """Load a YAML/JSON batch file."""
    path = Path(path)
    if not path.is_file():
        raise InputFileError(f"Input file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8-sig"))
    except (OSError, yaml.YAMLError) as e:
        raise InputFileError(f"Could not read input file {path}: {e}") from e

    if data is None:
        return BatchFile()

    if isinstance(data, list):
        return BatchFile(items=parse_items(data, default_frameworks))

    if isinstance(data, dict):
        raw_items = data.get("items") or []
        if not isinstance(raw_items, list):
            raise InputFileError(f"'items' in {path} must be a list")
        crosswalk_url = data.get("crosswalk_url") or data.get("crosswalkUrl")
        return BatchFile(
            items=parse_items(raw_items, default_frameworks),
            crosswalk_url=str(crosswalk_url) if crosswalk_url else None,
        )

    raise InputFileError(f"Input file {path} must contain a list or a mapping")


def load_items(path: Path, default_frameworks: Optional[list[str]] = None) -> list[EvaluationInput]:
    return load_batch_file(path, default_frameworks).items
