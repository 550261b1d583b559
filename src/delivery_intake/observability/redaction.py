"""Redaction helpers for safe logging. Message content must pass through these."""

import re
from typing import Any

# Phone numbers, including masked ones ("6xx345678") and spaced ones
_PHONE_PATTERN = re.compile(r"\+?\d[\dxX\s\-.()]{6,}\d")
# WhatsApp JIDs ("237699000000@c.us")
_JID_PATTERN = re.compile(r"[\w.\-]+@(?:c\.us|g\.us|s\.whatsapp\.net)")

_REDACTED = "[REDACTED]"


def redact_string(value: str) -> str:
    """Redact phone and JID patterns from a string."""
    result = _JID_PATTERN.sub(_REDACTED, value)
    result = _PHONE_PATTERN.sub(_REDACTED, result)
    return result


def redact_value(value: Any) -> str:
    """Redact any value for safe logging. Returns string representation."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, dict):
        # Structure only, never values
        return f"dict(keys={list(value.keys())})"
    if isinstance(value, (list, tuple)):
        return f"list(len={len(value)})"
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    """Build a context dict safe for logging. All values are redacted."""
    return {k: redact_value(v) for k, v in kwargs.items()}
