"""Error message sanitization to prevent credential leakage."""

from __future__ import annotations

import os
import re


def sanitize_error(message: str) -> str:
    """Sanitize error messages before they reach result records or the console.

    Crosswalk URLs and evidence links can carry credentials, so userinfo and
    token-like query parameters are redacted along with header values.
    """
    if not message:
        return message

    sanitized = message
    # Credentials embedded in URLs
    sanitized = re.sub(r"(https?://)[^/\s:@]+:[^/\s@]+@", r"\1[REDACTED]@", sanitized)
    sanitized = re.sub(
        r"([?&](?:token|access_token|api_key|apikey|key|sig|signature)=)[^&\s'\"]+",
        r"\1[REDACTED]",
        sanitized,
        flags=re.IGNORECASE,
    )
    sanitized = re.sub(r"Bearer\s+\S+", "Bearer [REDACTED]", sanitized)
    sanitized = re.sub(r"api-key:\s*\S+", "api-key: [REDACTED]", sanitized)
    sanitized = re.sub(r"x-api-key:\s*\S+", "x-api-key: [REDACTED]", sanitized)
    sanitized = re.sub(r"Authorization:\s*\S+", "Authorization: [REDACTED]", sanitized)

    # Redact user home paths
    home = os.environ.get("USERPROFILE") or os.environ.get("HOME") or ""
    if home and home != os.sep:
        sanitized = sanitized.replace(home, "[USER_HOME]")

    return sanitized
