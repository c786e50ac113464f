"""
Logging helpers with sensitive data masking.

PSP credentials pass through this package as plaintext once the settings
store has decrypted them. Anything that may end up in a log record goes
through these helpers first.

Usage:
    import logging
    from sardis_multisafepay.logging import mask_sensitive_data, mask_value

    logger = logging.getLogger(__name__)
    logger.info("Resolved settings: %s", mask_sensitive_data({"api_key": key}))
"""
from __future__ import annotations

import re
from typing import Any, Final, Optional, Sequence

MASK_PATTERN: Final[str] = "***"
MAX_LOG_MESSAGE_LENGTH: Final[int] = 10000

SENSITIVE_FIELDS: Final[frozenset[str]] = frozenset({
    "api_key",
    "apikey",
    "api_key_live",
    "api_key_test",
    "password",
    "secret",
    "token",
    "authorization",
    "credential",
    "credentials",
})

_INLINE_PATTERNS = [
    (r'("api_key"\s*:\s*)"[^"]*"', r'\1"***"'),
    (r'\b(api_key[=:])\s*["\']?([^"\'\s]+)["\']?', r'\1***'),
    (r'(Bearer\s+)[a-zA-Z0-9._-]+', r'\1***'),
    (r'(https?://)[^:/\s]+:[^@/\s]+@', r'\1***:***@'),
]


def mask_value(value: str, show_chars: int = 4) -> str:
    """Mask a sensitive value, showing only its first/last characters.

    Args:
        value: The value to mask
        show_chars: Number of characters to show at start and end

    Returns:
        Masked string
    """
    if not value or len(value) <= show_chars * 2:
        return MASK_PATTERN

    return f"{value[:show_chars]}...{value[-show_chars:]}"


def is_sensitive_key(key: str) -> bool:
    """Check if a key name indicates sensitive data."""
    key_lower = key.lower().replace("-", "_")
    return key_lower in SENSITIVE_FIELDS or any(
        sensitive in key_lower
        for sensitive in ("secret", "password", "token", "apikey", "api_key", "credential")
    )


def mask_sensitive_data(
    data: Any,
    additional_fields: Optional[Sequence[str]] = None,
    _depth: int = 0,
    _max_depth: int = 10,
) -> Any:
    """Recursively mask sensitive data in a data structure.

    Args:
        data: The data structure to mask (dict, list, or scalar)
        additional_fields: Additional field names to mask

    Returns:
        Copy of data with sensitive values masked
    """
    if _depth > _max_depth:
        return data

    if isinstance(data, dict):
        result = {}
        for key, value in data.items():
            if is_sensitive_key(str(key)) or (additional_fields and key in additional_fields):
                result[key] = MASK_PATTERN
            else:
                result[key] = mask_sensitive_data(value, additional_fields, _depth + 1, _max_depth)
        return result

    if isinstance(data, (list, tuple)):
        return type(data)(
            mask_sensitive_data(item, additional_fields, _depth + 1, _max_depth)
            for item in data
        )

    if isinstance(data, str):
        return mask_inline_patterns(data)

    return data


def mask_inline_patterns(text: str) -> str:
    """Mask credentials embedded in free text such as serialized JSON or urls."""
    if len(text) > MAX_LOG_MESSAGE_LENGTH:
        text = text[:MAX_LOG_MESSAGE_LENGTH] + "...[truncated]"

    for pattern, replacement in _INLINE_PATTERNS:
        text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
    return text
