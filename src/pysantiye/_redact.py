"""Helpers for safe debug logging.

pysantiye sends API keys and user JWTs with every request and realtime
join. This module redacts them from headers, wire frames and row dumps
before they reach DEBUG logs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "apikey",
        "api_key",
        "access_token",
        "refresh_token",
        "token",
        "authorization",
        "cookie",
        "password",
    }
)

# Supabase anon/service keys and user sessions are all JWTs.
_JWT_RE = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")

_REDACTED = "<redacted>"
_MAX_DEPTH = 20


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a redacted copy of a JSON-shaped *value* suitable for debug logs."""
    return _redact(value, max_string, 0)


def _redact(value: Any, max_string: int, depth: int) -> Any:
    if depth > _MAX_DEPTH:
        return "<max-depth>"
    if isinstance(value, str):
        value = _JWT_RE.sub(_REDACTED, value)
        return f"{value[:max_string]}…<truncated>" if len(value) > max_string else value
    if isinstance(value, Mapping):
        return {
            str(key): _REDACTED if str(key).lower() in _SENSITIVE_KEYS else _redact(item, max_string, depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(item, max_string, depth + 1) for item in value]
    return value
