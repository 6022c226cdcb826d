"""
Format checks and duplicate detection shared by the normalizer and validator.
"""

import re
from collections.abc import Iterable
from typing import Any

# Lowercase ASCII letters, digits, hyphens and underscores only
SLUG_PATTERN = re.compile(r'^[a-z0-9_-]+$')

# #RGB or #RRGGBB
COLOR_PATTERN = re.compile(r'^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$')


def is_valid_slug(slug: Any) -> bool:
    """Return True if slug is a URL-safe string (e.g. 'step_1-a')."""
    if not isinstance(slug, str):
        return False
    return SLUG_PATTERN.fullmatch(slug) is not None


def is_valid_color(color: Any) -> bool:
    """Return True if color is a '#'-prefixed 3- or 6-digit hex string."""
    if not isinstance(color, str):
        return False
    return COLOR_PATTERN.fullmatch(color) is not None


def find_duplicates(values: Iterable[Any]) -> list[Any]:
    """
    Find values that occur more than once.

    Each duplicate is reported once, in the order its second occurrence
    was seen. Unhashable values are compared by their repr.

    Args:
        values: Values to scan

    Returns:
        List of duplicated values
    """
    seen: set[Any] = set()
    duplicates: list[Any] = []
    reported: set[Any] = set()

    for value in values:
        key = _hash_key(value)
        if key in seen:
            if key not in reported:
                reported.add(key)
                duplicates.append(value)
        else:
            seen.add(key)

    return duplicates


def _hash_key(value: Any) -> Any:
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value
