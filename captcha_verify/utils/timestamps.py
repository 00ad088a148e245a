from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from captcha_verify.core.errors import ParseError

# RFC 3339 section 5.6 date-time; an explicit offset is mandatory.
_RFC3339_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)


def parse_timestamp(value: Any) -> datetime:
    """Convert a ``challenge_ts`` string into a timezone-aware datetime."""

    if not isinstance(value, str):
        raise ParseError(f"Unsupported timestamp type: {type(value)!r}")

    if not _RFC3339_PATTERN.fullmatch(value):
        raise ParseError(f"Invalid RFC 3339 timestamp: {value!r}")

    text = value.upper()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ParseError(f"Invalid RFC 3339 timestamp: {value!r}") from exc
