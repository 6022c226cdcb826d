"""
Display Value Compilation

A form step may declare a derived value (e.g. BMI) that is shown to the
patient once the answers it depends on are available. The document declares
it as JSON:

    "displayValue": {
        "condition": [{"field": "weight", "operator": "notEquals", "value": ""}],
        "calculate": {"type": "bmi", "fields": ["feet", "inches", "weight"]},
        "template": "Your BMI is {{value}}"
    }

This module compiles that declaration into a DisplayValue holding two pure
functions over the form answers. The functions close over private copies of
the declaration, so later changes to the raw document do not affect them.
"""

import copy
import logging
import math
from collections.abc import Callable, Mapping
from typing import Any, Optional, Union

from .models import DisplayValue, FormAnswers

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = '{{value}}'

INCHES_PER_FOOT = 12
METERS_PER_INCH = 0.0254
KG_PER_POUND = 0.453592

# Returned whenever a value cannot (or is not yet able to) be calculated
EMPTY_RESULT = ''

_MISSING = object()


def build_display_value(raw_display_value: Any) -> Optional[DisplayValue]:
    """
    Compile a raw displayValue declaration.

    Args:
        raw_display_value: The step's `displayValue` entry (may be None)

    Returns:
        DisplayValue, or None when the step declares no display value
    """
    if not isinstance(raw_display_value, Mapping):
        return None

    clauses = raw_display_value.get('condition')
    calculation = raw_display_value.get('calculate')
    template = raw_display_value.get('template') or DEFAULT_TEMPLATE

    return DisplayValue(
        condition=build_condition(clauses),
        calculate=build_calculation(calculation),
        template=template,
    )


def build_condition(clauses: Any) -> Callable[[FormAnswers], bool]:
    """
    Build the display condition from a list of comparison clauses.

    All clauses must hold; an empty or missing list is always satisfied.
    Clause semantics:
    - equals: strict equality
    - notEquals: answer present, non-empty and different from the value
    - greaterThan / lessThan: numeric comparison after coercion
    - any other operator: the clause passes
    """
    frozen_clauses = tuple(
        (clause.get('field'), clause.get('operator'), copy.deepcopy(clause.get('value')))
        for clause in (clauses or ())
        if isinstance(clause, Mapping)
    )

    def condition(answers: FormAnswers) -> bool:
        return all(
            _clause_holds(answers.get(field_name, _MISSING), operator, value)
            for field_name, operator, value in frozen_clauses
        )

    return condition


def build_calculation(calculation: Any) -> Callable[[FormAnswers], Union[str, float]]:
    """
    Build the calculate function for a `calculate` declaration.

    Supported types:
    - bmi: fields are (feet, inches, weight in pounds); returns BMI as text
      with two decimals
    - weeksToGoal, custom: declared extension points, always return ''
    """
    if not isinstance(calculation, Mapping):
        return _empty_calculation

    calc_type = calculation.get('type')
    field_names = tuple(calculation.get('fields') or ())

    if calc_type == 'bmi' and len(field_names) >= 3:
        feet_field, inches_field, weight_field = field_names[:3]

        def calculate_bmi(answers: FormAnswers) -> str:
            return calculate_bmi_value(
                answers.get(feet_field),
                answers.get(inches_field),
                answers.get(weight_field),
            )

        return calculate_bmi

    if calc_type not in ('bmi', 'weeksToGoal', 'custom'):
        logger.warning(
            "Unsupported display value calculation type",
            extra={'calc_type': calc_type}
        )

    return _empty_calculation


def calculate_bmi_value(feet: Any, inches: Any, weight_lbs: Any) -> str:
    """
    Calculate BMI from imperial height and weight.

    Args:
        feet: Height, feet component
        inches: Height, inches component
        weight_lbs: Weight in pounds

    Returns:
        BMI formatted to two decimals, or '' when an input is missing,
        non-numeric, or the height is zero

    Example:
        >>> calculate_bmi_value(5, 10, 180)
        '25.83'
    """
    if feet is None or inches is None or weight_lbs is None:
        return EMPTY_RESULT

    feet_value = _coerce_number(feet)
    inches_value = _coerce_number(inches)
    weight_value = _coerce_number(weight_lbs)
    if any(math.isnan(v) for v in (feet_value, inches_value, weight_value)):
        return EMPTY_RESULT

    height_m = (feet_value * INCHES_PER_FOOT + inches_value) * METERS_PER_INCH
    if height_m == 0:
        return EMPTY_RESULT

    weight_kg = weight_value * KG_PER_POUND
    bmi = weight_kg / (height_m * height_m)
    return f"{bmi:.2f}"


def _empty_calculation(answers: FormAnswers) -> str:
    return EMPTY_RESULT


def _clause_holds(answer: Any, operator: Any, value: Any) -> bool:
    if operator == 'equals':
        return _strict_equals(answer, value)
    if operator == 'notEquals':
        return (
            answer is not _MISSING
            and answer is not None
            and answer != ''
            and not _strict_equals(answer, value)
        )
    if operator == 'greaterThan':
        return _coerce_number(answer) > _coerce_number(value)
    if operator == 'lessThan':
        return _coerce_number(answer) < _coerce_number(value)
    # Unrecognized operators pass; the validator reports them as errors
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _strict_equals(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return left == right
    return type(left) is type(right) and left == right


def _coerce_number(value: Any) -> float:
    """
    Coerce an answer to a number.

    null and blank strings count as 0; missing answers and non-numeric values
    become NaN, which fails every comparison.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0.0
        try:
            return float(stripped)
        except ValueError:
            return math.nan
    return math.nan
