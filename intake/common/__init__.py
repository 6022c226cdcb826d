"""
Common utilities shared across the intake packages.

Pure, dependency-free helpers reused by both the normalizer and the
validator (alias resolution, slug/color format checks, duplicate detection).
"""

from .aliases import FIELD_ALIASES, has_field, resolve_field
from .formats import find_duplicates, is_valid_color, is_valid_slug

__all__ = [
    "FIELD_ALIASES",
    "find_duplicates",
    "has_field",
    "is_valid_color",
    "is_valid_slug",
    "resolve_field",
]
