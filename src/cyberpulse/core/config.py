"""3-layer configuration system for CyberPulse.

Loads and merges configuration from:
1. Default settings (built-in)
2. Project config (.cyberpulse/config.yaml)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional

import yaml

from ..compliance.crosswalk import FRAMEWORKS, select_frameworks

CONFIG_DIR = ".cyberpulse"
CONFIG_FILE = "config.yaml"

DEFAULT_CONFIG: dict = {
    "project": {
        "name": "",
    },
    "crosswalk": {
        "url": "",
        "timeout_seconds": 30,
    },
    "frameworks": {
        "default": list(FRAMEWORKS),
    },
    "evaluation": {
        "continue_on_fail": False,
        "strict": False,
    },
    "output": {
        "format": "json",
        "dir": "cyberpulse-output",
    },
    "ci": {
        "exit_codes": {"compliant": 0, "partial": 2, "non_compliant": 1},
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Arrays are replaced, not merged."""
    result = {}
    for key in base:
        result[key] = base[key]
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def get_config_path(project_path: Path) -> Path:
    return project_path / CONFIG_DIR / CONFIG_FILE


def load_project_config(project_path: Path) -> dict:
    """Load project configuration from .cyberpulse/config.yaml."""
    config_path = get_config_path(project_path)
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def get_effective_frameworks(
    config: dict,
    selected: Optional[list[str]] = None,
) -> list[str]:
    """Frameworks to map against: the explicit selection, else the configured default.

    Names are kept as written; slugs resolve to built-in names only at lookup."""
    if selected:
        return select_frameworks(selected)
    frameworks_config = config.get("frameworks") or {}
    return select_frameworks(frameworks_config.get("default") or [])


def get_effective_config(
    project_path: Path,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration for an evaluation run."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    project_config = load_project_config(project_path)
    if project_config:
        config = deep_merge(config, project_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    config["_project_path"] = str(project_path)

    return config
