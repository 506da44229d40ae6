"""Shared fixtures for CyberPulse tests."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from cyberpulse.compliance.crosswalk import FRAMEWORKS

MFA_AES_TEXT = "We require MFA and AES-256 encryption for all admin access"


@pytest.fixture
def all_frameworks() -> list[str]:
    return list(FRAMEWORKS)


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create an empty project directory."""
    project = tmp_path / "test-project"
    project.mkdir()
    return project


@pytest.fixture
def initialized_project(tmp_project: Path) -> Path:
    """Create a project with .cyberpulse initialized."""
    cp_dir = tmp_project / ".cyberpulse"
    cp_dir.mkdir()
    (cp_dir / "config.yaml").write_text(
        'project:\n  name: "test-project"\n\n'
        "frameworks:\n  default:\n    - iso27001\n    - SOC 2\n",
        encoding="utf-8",
    )
    return tmp_project


@pytest.fixture
def custom_crosswalk_document() -> dict:
    """A crosswalk using a framework the built-in table does not know."""
    return {
        "mfa": {
            "CMMC": [
                {"framework": "CMMC", "clause": "IA.L2-3.5.3", "title": "Multifactor authentication"},
            ],
        },
        "logging": {
            "CMMC": [
                {"framework": "CMMC", "clause": "AU.L2-3.3.1", "title": "System auditing"},
            ],
        },
    }


@pytest.fixture
def sample_batch_file(tmp_path: Path) -> Path:
    path = tmp_path / "controls.yaml"
    path.write_text(
        "items:\n"
        f'  - control_text: "{MFA_AES_TEXT}"\n'
        "    evidence_urls:\n"
        '      - "https://portal.example.com/mfa.pdf"\n'
        "    frameworks: [iso27001, gdpr]\n"
        '  - controlText: "Nightly backups with quarterly restore tests"\n'
        "    evidenceUrls: []\n"
        '  - ""\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def make_client():
    """Build an httpx client whose requests are answered by a handler."""

    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
