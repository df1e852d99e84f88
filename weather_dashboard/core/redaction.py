"""Helpers for keeping API keys out of log output."""

from __future__ import annotations

import re
from typing import Any

REDACTED = "[REDACTED]"

_SENSITIVE_KEY_RE = re.compile(
    r"(appid|api[_-]?key|authorization|token|secret|password|csrf)",
    re.IGNORECASE,
)
_KEY_VALUE_SECRET_RE = re.compile(
    r"""(?ix)
    \b
    (
      appid|
      api[_-]?key|
      authorization|
      token|
      secret|
      password
    )
    (\s*[:=]\s*)
    ([^\s,;&"']+)
    """
)


def sanitize_text(text: str) -> str:
    """Redact ``appid=...`` style secrets embedded in URLs and messages."""
    return _KEY_VALUE_SECRET_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", text)


def sanitize_for_logging(value: Any) -> Any:
    """Recursively redact sensitive values in nested structures."""
    if isinstance(value, dict):
        sanitized: dict[Any, Any] = {}
        for key, child in value.items():
            if _SENSITIVE_KEY_RE.search(str(key)):
                sanitized[key] = REDACTED
            else:
                sanitized[key] = sanitize_for_logging(child)
        return sanitized
    if isinstance(value, (list, tuple)):
        return [sanitize_for_logging(item) for item in value]
    if isinstance(value, str):
        return sanitize_text(value)
    return value
