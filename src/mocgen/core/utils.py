"""Utility functions for mocgen."""

import re
from typing import Any, Iterable

_MD_SPECIAL = re.compile(r"([\\`*_\[\]{}()#+\-.!])")

UNKNOWN_DATE = "Unknown"
UNKNOWN_DAY = "Unknown Day"


def escape_markdown(text: str) -> str:
    """
    Backslash-escape markdown punctuation.

    Examples:
        >>> escape_markdown("a.b")
        'a\\\\.b'
        >>> escape_markdown("[x](y)")
        '\\\\[x\\\\]\\\\(y\\\\)'
    """
    return _MD_SPECIAL.sub(r"\\\1", text)


def safe_list(value: Any) -> list[Any]:
    """Normalize a frontmatter value to a list: falsy -> [], scalar -> [v]."""
    if not value:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, (tuple, set)):
        return list(value)
    return [value]


def unique(items: Iterable[Any]) -> list[Any]:
    """Drop duplicates, keeping first-seen order."""
    seen: list[Any] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def date_parts(ctime: str | None) -> tuple[str, str, str]:
    """Split an ISO timestamp into (year, month, day) prefixes."""
    if not ctime:
        return UNKNOWN_DATE, UNKNOWN_DATE, UNKNOWN_DAY
    return ctime[:4], ctime[:7], ctime[:10]
