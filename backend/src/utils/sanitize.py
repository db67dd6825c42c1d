"""Text cleanup for stored fields and HTML email bodies."""

import re
from typing import Any

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# Order matters: "&" must be replaced before the entities that contain it.
_HTML_REPLACEMENTS = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
    ("\n", "<br>"),
    ("\r", ""),
    ("\\", "&#92;"),
)


def sanitize(text: Any) -> str:
    """Strip angle brackets and trim whitespace.

    This is a minimal filter for stored data, not output encoding. Anything
    that is not a string becomes an empty string. Brackets go first so that
    whitespace they enclose is trimmed too, which keeps the result stable
    under repeated application.
    """
    if not isinstance(text, str):
        return ""
    return text.replace("<", "").replace(">", "").strip()


def escape_html(text: Any) -> str:
    """Escape text for embedding in the HTML email body.

    Newlines become ``<br>`` and carriage returns are dropped.
    """
    if not text:
        return ""
    escaped = str(text)
    for old, new in _HTML_REPLACEMENTS:
        escaped = escaped.replace(old, new)
    return escaped


def is_valid_email(value: Any) -> bool:
    """Check an address against the simple ``local@domain.tld`` pattern."""
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None
