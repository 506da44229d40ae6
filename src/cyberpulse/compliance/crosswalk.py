"""Crosswalk table and requirement mapping.

The crosswalk maps a control category to the clauses it satisfies in each
regulatory framework: ``category -> framework -> [Clause, ...]``.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from ..models.compliance import Clause, Crosswalk

FRAMEWORKS: tuple[str, ...] = (
    "ISO 27001",
    "SOC 2",
    "NIST CSF",
    "PCI DSS",
    "Essential Eight",
    "GDPR",
)

FRAMEWORK_SLUGS: dict[str, str] = {
    "iso27001": "ISO 27001",
    "soc2": "SOC 2",
    "nistcsf": "NIST CSF",
    "pcidss": "PCI DSS",
    "essential8": "Essential Eight",
    "gdpr": "GDPR",
}

# Built-in minimal crosswalk (short labels only)
_DEFAULT_ROWS: dict[str, dict[str, tuple[str, str]]] = {
    "mfa": {
        "ISO 27001": ("A.5.17", "Authentication information"),
        "SOC 2": ("CC6.1", "Logical access controls"),
        "NIST CSF": ("PR.AC-1", "Identities managed"),
        "PCI DSS": ("8.4", "Multi-factor authentication"),
        "Essential Eight": ("AC", "Access control (maturity)"),
        "GDPR": ("Art. 32", "Security of processing (access control)"),
    },
    "encryption": {
        "ISO 27001": ("A.8.24", "Cryptography"),
        "SOC 2": ("CC6.7", "Encryption protections"),
        "NIST CSF": ("PR.DS-1", "Data-at-rest protected"),
        "PCI DSS": ("3.5", "Protect stored account data"),
        "Essential Eight": ("DM", "Data protection (maturity)"),
        "GDPR": ("Art. 32", "Security of processing (encryption)"),
    },
    "logging": {
        "ISO 27001": ("A.8.15", "Logging"),
        "SOC 2": ("CC7.2", "Monitor and detect"),
        "NIST CSF": ("DE.CM-1", "Monitoring for anomalies"),
        "PCI DSS": ("10.2", "Log and monitor all access"),
        "Essential Eight": ("LM", "Logging & monitoring (maturity)"),
        "GDPR": ("Art. 5(1)(f)", "Integrity and confidentiality"),
    },
    "backups": {
        "ISO 27001": ("A.8.13", "Backup"),
        "SOC 2": ("CC7.3", "Resilience and recovery"),
        "NIST CSF": ("PR.IP-4", "Backups maintained and tested"),
        "PCI DSS": ("12.10.4", "Incident response incl. recovery"),
        "Essential Eight": ("DR", "Backups & recovery (maturity)"),
        "GDPR": ("Art. 32", "Availability and resilience"),
    },
    "patching": {
        "ISO 27001": ("A.8.8", "Technical vulnerabilities"),
        "SOC 2": ("CC7.1", "Identify & mitigate vulnerabilities"),
        "NIST CSF": ("PR.IP-12", "Vulnerability management"),
        "PCI DSS": ("6.3", "Security patches"),
        "Essential Eight": ("PA", "Patch apps/OS (maturity)"),
        "GDPR": ("Art. 25", "Data protection by design/default"),
    },
    "access_reviews": {
        "ISO 27001": ("A.5.18", "Access rights"),
        "SOC 2": ("CC6.3", "Provisioning and reviews"),
        "NIST CSF": ("PR.AC-4", "Permissions managed"),
        "PCI DSS": ("7.2", "Access by business need"),
        "Essential Eight": ("AC", "Least privilege (maturity)"),
        "GDPR": ("Art. 5(1)(c)", "Data minimisation"),
    },
}


def _freeze(rows: dict[str, dict[str, tuple[str, str]]]) -> Crosswalk:
    return MappingProxyType({
        category: MappingProxyType({
            framework: (Clause(framework=framework, clause=clause, title=title),)
            for framework, (clause, title) in by_framework.items()
        })
        for category, by_framework in rows.items()
    })


DEFAULT_CROSSWALK: Crosswalk = _freeze(_DEFAULT_ROWS)

_CROSSWALK_ADAPTER = TypeAdapter(dict[str, dict[str, list[Clause]]])


class CrosswalkError(Exception):
    """A crosswalk document could not be acquired."""


class CrosswalkFormatError(CrosswalkError):
    """A crosswalk document does not have the category -> framework -> clauses shape."""


def parse_crosswalk(document: Any) -> Crosswalk:
    """Validate a decoded JSON/YAML document as a crosswalk.

    An empty mapping is a valid crosswalk that maps nothing.
    """
    if document is None:
        raise CrosswalkFormatError("Crosswalk document is empty")
    try:
        return _CROSSWALK_ADAPTER.validate_python(document)
    except ValidationError as e:
        raise CrosswalkFormatError(
            f"Invalid crosswalk document: {e.error_count()} validation error(s)"
        ) from e


def _framework_key(name: str) -> str:
    return re.sub(r"[\s_\-]", "", name.lower())


_FRAMEWORK_LOOKUP: dict[str, str] = {
    **{_framework_key(name): name for name in FRAMEWORKS},
    **FRAMEWORK_SLUGS,
}


def normalize_framework(name: str) -> str:
    """Resolve a slug or loosely written framework name to its display name.

    Names that are not built-in frameworks are returned stripped but otherwise
    unchanged.
    """
    name = name.strip()
    return _FRAMEWORK_LOOKUP.get(_framework_key(name), name)


def select_frameworks(names: Optional[Iterable[str]]) -> list[str]:
    """Framework selection without blanks or repeated names, in order."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names or []:
        if not name or not name.strip() or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


def _clauses_for(by_framework: Mapping[str, Sequence[Clause]], framework: str) -> Sequence[Clause]:
    # The caller's own name wins; slugs and loose spellings reach the built-in names
    if framework in by_framework:
        return by_framework[framework]
    return by_framework.get(normalize_framework(framework)) or ()


def map_requirements(
    categories: Iterable[str],
    frameworks: Iterable[str],
    crosswalk: Crosswalk,
) -> list[Clause]:
    """Collect the clauses for each category under each selected framework.

    Order is category order, then framework selection order, then the order
    of the crosswalk list. A clause shared by two categories appears twice.
    """
    frameworks = list(frameworks)
    mapped: list[Clause] = []

    for category in categories:
        by_framework = crosswalk.get(category) or {}
        for framework in frameworks:
            mapped.extend(_clauses_for(by_framework, framework))

    return mapped


def crosswalk_to_dict(crosswalk: Crosswalk) -> dict[str, dict[str, list[dict]]]:
    """Plain-dict copy of a crosswalk, suitable for JSON/YAML output."""
    return {
        category: {
            framework: [c.model_dump() for c in clauses]
            for framework, clauses in by_framework.items()
        }
        for category, by_framework in crosswalk.items()
    }
