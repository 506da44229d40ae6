"""Keyword classification of control statements into control categories."""

from __future__ import annotations

import re
from typing import Optional

CATEGORY_KEYS: tuple[str, ...] = (
    "mfa",
    "encryption",
    "logging",
    "backups",
    "patching",
    "access_reviews",
)

FALLBACK_CATEGORY = "logging"

# Evaluated in this order; the order of the result follows it.
CATEGORY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("mfa", re.compile(r"(mfa|2fa|two[-\s]?factor|multi[-\s]?factor)")),
    ("encryption", re.compile(r"(encrypt|aes|rsa|kms|tls|https|at rest|at-rest)")),
    ("logging", re.compile(r"(log|logging|siem|monitor|edr|xdr|soc)")),
    (
        "backups",
        re.compile(r"(backup|back[-\s]?up|snapshots?|restore|rpo|rto|dr test|disaster recovery)"),
    ),
    ("patching", re.compile(r"(patch|update|vulnerability|cve|scan|remediate)")),
    (
        "access_reviews",
        re.compile(r"(access review|recertif|least privilege|privilege review|entitlement)"),
    ),
)


def classify_categories(text: Optional[str]) -> list[str]:
    """Classify control text into categories.

    Every pattern is tested independently against the lower-cased text, so a
    statement can land in several categories. Text that matches nothing is
    treated as a logging control.
    """
    normalized = (text or "").lower()
    hits: list[str] = []

    for category, pattern in CATEGORY_PATTERNS:
        if category not in hits and pattern.search(normalized):
            hits.append(category)

    if not hits:
        hits.append(FALLBACK_CATEGORY)

    return hits
