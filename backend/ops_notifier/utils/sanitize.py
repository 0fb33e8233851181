"""
Input sanitizing and validation helpers.

Chat message text is not HTML, so portal text is never entity-escaped.
Sanitizing only removes control characters that would garble a message.
"""
import re
from typing import Any
from urllib.parse import urlparse


# C0/C1 control characters except tab and newline
_CONTROL_PATTERN = re.compile("[\x00-\x08\x0b-\x1f\x7f-\x9f]")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def sanitize_input(value: str) -> str:
    """Strip control characters, keeping tabs and newlines."""
    if not value:
        return ""
    return _CONTROL_PATTERN.sub("", value)


def sanitize_payload(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with every top-level string value sanitized."""
    return {
        key: sanitize_input(value) if isinstance(value, str) else value
        for key, value in data.items()
    }


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def is_valid_url(url: str) -> bool:
    """Accept absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
