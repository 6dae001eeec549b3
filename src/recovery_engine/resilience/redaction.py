"""
Context Redaction - Scrub Secrets Before Storage.

Error contexts are supplied by callers and end up in the error history,
logs and the dashboard. Sensitive keys are replaced wholesale and sensitive
patterns inside string values are masked.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = (
    "password",
    "pwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "private_key",
    "encryption_key",
    "account_number",
    "routing_number",
    "ssn",
    "credit_card",
    "card_number",
    "cvv",
    "pin",
    "bank_account",
    "iban",
    "swift",
    "authorization",
    "credential",
)

SENSITIVE_PATTERNS = [
    # Card numbers
    re.compile(r"\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}\b"),
    # Social security numbers
    re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),
    # key=value secrets
    re.compile(
        r"\b(api_key|token|secret|password|pwd)\s*[=:]\s*[\w\-.]+",
        re.IGNORECASE,
    ),
    # Bearer tokens
    re.compile(r"\bbearer\s+[\w\-.=]+", re.IGNORECASE),
]

_MAX_DEPTH = 5


_SENSITIVE_KEY_PATTERN = re.compile(
    "|".join(rf"(?:^|_){key}(?:_|$)" for key in SENSITIVE_KEYS)
)


def is_sensitive_key(key: Any) -> bool:
    # apiKey / api-key / API_KEY all normalize to api_key
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", str(key))
    snake = re.sub(r"[^a-z0-9]+", "_", snake.lower())
    return _SENSITIVE_KEY_PATTERN.search(snake) is not None


def redact_text(text: str) -> str:
    """Mask sensitive patterns inside a string."""
    for pattern in SENSITIVE_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


def redact(value: Any, _depth: int = 0) -> Any:
    """
    Return a redacted copy of an arbitrary value.

    Mappings and sequences are copied recursively; other objects are kept
    as-is except strings, which are pattern-masked.
    """
    if _depth > _MAX_DEPTH:
        return REDACTED
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, Mapping):
        return {
            key: REDACTED if is_sensitive_key(key) else redact(item, _depth + 1)
            for key, item in value.items()
        }
    # Subclasses (namedtuple, custom lists) come back as plain list / tuple
    if isinstance(value, list):
        return [redact(item, _depth + 1) for item in value]
    if isinstance(value, tuple):
        return tuple(redact(item, _depth + 1) for item in value)
    return value


def redact_context(context: Any) -> dict:
    """Redacted copy of an error context; non-mappings become an empty dict."""
    if not isinstance(context, Mapping):
        return {}
    return redact(context)
