"""
Field Alias Resolution

The quiz document has been written by several generations of tooling, so a
number of fields appear under more than one name (camelCase vs snake_case,
current vs legacy key). This module is the single place where those names
are declared.

Resolution order for every logical field:
1. The canonical key (first entry of the alias tuple)
2. Each alias, in declaration order
3. The caller-supplied default

A key whose value is None counts as absent, so an explicit null falls
through to the next alias.
"""

from collections.abc import Mapping
from typing import Any

# Logical field name -> (canonical key, *aliases)
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    # Questions
    'required': ('required', 'is_required'),
    'display_question': ('displayQuestion', 'display_question'),
    'api_type': ('apiType', 'api_type'),
    'question_order': ('question_order', 'order'),
    'display_as_row': ('displayAsRow', 'display_as_row'),
    'option_images': ('optionImages', 'option_images'),
    'display_statistics': ('displayStatistics', 'display_statistics'),
    'before_image': ('beforeImage', 'before_image'),
    'after_image': ('afterImage', 'after_image'),
    # Options
    'option_order': ('option_order', 'order'),
    # Progress steps and form steps
    'step_order': ('order', 'step_order'),
    'render_condition': ('renderCondition', 'render_condition'),
}


def resolve_field(raw: Any, field_name: str, default: Any = None) -> Any:
    """
    Resolve a logical field from a raw document entity.

    Args:
        raw: Raw entity (any mapping; non-mappings resolve to the default)
        field_name: Logical field name, a key of FIELD_ALIASES
        default: Value returned when no alias is present

    Returns:
        The first non-None value found, or the default

    Raises:
        KeyError: If field_name is not declared in FIELD_ALIASES

    Example:
        >>> resolve_field({'is_required': True}, 'required', False)
        True
    """
    keys = FIELD_ALIASES[field_name]
    if not isinstance(raw, Mapping):
        return default

    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value

    return default


def has_field(raw: Any, field_name: str) -> bool:
    """Return True if any alias of field_name carries a non-None value."""
    return resolve_field(raw, field_name) is not None
