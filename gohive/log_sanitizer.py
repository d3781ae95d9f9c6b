from __future__ import annotations

import json
from collections.abc import Mapping

REDACTED = "***REDACTED***"


_SENSITIVE_HEADER_NAMES = {
    "authorization",
    "proxy-authorization",
    "x-api-key",
    "cookie",
    "set-cookie",
}

_SENSITIVE_FIELD_HINTS = ("password", "token", "secret", "key", "auth", "cookie", "session")

MAX_LOGGED_BODY_CHARS = 2000


def sanitize_headers_for_log(
    headers: Mapping[str, str], *, mask_token: str = REDACTED
) -> dict[str, str]:
    """
    Return a copy of the headers that is safe to write to the log.

    Well-known credential headers are masked, as is any header whose name
    contains a sensitive hint (key/token/secret/auth/cookie/session).
    """
    sanitized: dict[str, str] = {}
    for name, value in headers.items():
        lower_name = name.lower()
        if lower_name in _SENSITIVE_HEADER_NAMES or any(
            hint in lower_name for hint in _SENSITIVE_FIELD_HINTS
        ):
            sanitized[name] = mask_token
            continue
        sanitized[name] = value
    return sanitized


def sanitize_payload_for_log(payload: object, *, mask_token: str = REDACTED) -> object:
    """
    Mask password/token-like fields in a decoded JSON payload, recursively.
    """
    if isinstance(payload, Mapping):
        return {
            key: (
                mask_token
                if isinstance(key, str)
                and any(hint in key.lower() for hint in _SENSITIVE_FIELD_HINTS)
                else sanitize_payload_for_log(value, mask_token=mask_token)
            )
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [sanitize_payload_for_log(item, mask_token=mask_token) for item in payload]
    return payload


def truncate_for_log(text: str, limit: int = MAX_LOGGED_BODY_CHARS) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...(truncated {len(text) - limit} chars)"


def describe_body_for_log(body: bytes, *, limit: int = MAX_LOGGED_BODY_CHARS) -> str:
    """
    Render a request body for the log: JSON bodies with sensitive fields
    masked, anything else as truncated text.
    """
    text = body.decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
    except ValueError:
        return truncate_for_log(text, limit)
    masked = sanitize_payload_for_log(payload)
    return truncate_for_log(json.dumps(masked, ensure_ascii=False), limit)


__all__ = [
    "MAX_LOGGED_BODY_CHARS",
    "REDACTED",
    "describe_body_for_log",
    "sanitize_headers_for_log",
    "sanitize_payload_for_log",
    "truncate_for_log",
]
