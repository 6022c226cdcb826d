"""
Unit Tests for Display Values and Render Conditions

Display values are compiled from declarative JSON into pure functions over
the form answers; render conditions are evaluated by the renderer through
RenderCondition.evaluate. Both are tested against literal answer maps.
"""

import pytest

from intake.normalizer.display_value import (
    DEFAULT_TEMPLATE,
    build_calculation,
    build_condition,
    build_display_value,
    calculate_bmi_value,
)
from intake.normalizer.models import Condition, RenderCondition


# ============================================================================
# Display Value Condition Tests
# ============================================================================

class TestDisplayCondition:
    """Tests for the conjunctive display condition"""

    @pytest.mark.parametrize("clauses", [None, []])
    def test_no_clauses_always_true(self, clauses):
        """Without clauses the value is always displayed"""
        assert build_condition(clauses)({}) is True

    def test_equals_is_strict(self):
        """equals does not coerce between strings and numbers"""
        condition = build_condition([{"field": "age", "operator": "equals", "value": 30}])

        assert condition({"age": 30}) is True
        assert condition({"age": "30"}) is False

    @pytest.mark.parametrize("answers,expected", [
        ({}, False),                 # absent
        ({"weight": None}, False),   # null
        ({"weight": ""}, False),     # empty
        ({"weight": "x"}, False),    # equal to the compared value
        ({"weight": 180}, True),
    ])
    def test_not_equals_requires_present_non_empty_value(self, answers, expected):
        """notEquals only holds for a present, non-empty, different answer"""
        condition = build_condition([{"field": "weight", "operator": "notEquals", "value": "x"}])

        assert condition(answers) is expected

    def test_numeric_comparators_coerce_strings(self):
        """greaterThan and lessThan compare numerically"""
        greater = build_condition([{"field": "age", "operator": "greaterThan", "value": "17"}])
        less = build_condition([{"field": "age", "operator": "lessThan", "value": 65}])

        assert greater({"age": "18"}) is True
        assert greater({"age": 17}) is False
        assert less({"age": "64.5"}) is True
        assert less({"age": "abc"}) is False

    def test_null_answer_compares_as_zero(self):
        """A null answer counts as 0 for the numeric comparators"""
        less = build_condition([{"field": "age", "operator": "lessThan", "value": 5}])
        greater = build_condition([{"field": "age", "operator": "greaterThan", "value": -1}])

        assert less({"age": None}) is True
        assert greater({"age": None}) is True

    def test_missing_answer_fails_numeric_comparators(self):
        """An unanswered field never satisfies greaterThan or lessThan"""
        less = build_condition([{"field": "age", "operator": "lessThan", "value": 5}])
        greater = build_condition([{"field": "age", "operator": "greaterThan", "value": -1}])

        assert less({}) is False
        assert greater({}) is False

    def test_all_clauses_must_hold(self):
        """Clauses combine with AND only"""
        condition = build_condition([
            {"field": "a", "operator": "equals", "value": 1},
            {"field": "b", "operator": "equals", "value": 2},
        ])

        assert condition({"a": 1, "b": 2}) is True
        assert condition({"a": 1, "b": 3}) is False

    def test_unknown_operator_passes_vacuously(self):
        """Unrecognized operators do not block the display value"""
        condition = build_condition([{"field": "name", "operator": "contains", "value": "x"}])

        assert condition({}) is True
        assert condition({"name": "y"}) is True

    def test_condition_unaffected_by_later_document_changes(self):
        """The compiled condition keeps its own copy of the clauses"""
        clauses = [{"field": "a", "operator": "equals", "value": [1]}]
        condition = build_condition(clauses)

        clauses[0]["value"].append(2)
        clauses.append({"field": "b", "operator": "equals", "value": 1})

        assert condition({"a": [1]}) is True


# ============================================================================
# Calculation Tests
# ============================================================================

class TestCalculation:
    """Tests for the calculate functions"""

    def test_bmi_reference_value(self):
        """5 ft 10 in, 180 lb gives a BMI of 25.83"""
        assert calculate_bmi_value(5, 10, 180) == "25.83"

    def test_bmi_accepts_string_answers(self):
        """Form answers usually arrive as strings"""
        assert calculate_bmi_value("5", "10", "180") == "25.83"

    @pytest.mark.parametrize("feet,inches,weight", [
        (None, 10, 180),
        (5, None, 180),
        (5, 10, None),
        ("five", 10, 180),
        (0, 0, 180),
    ])
    def test_bmi_incomplete_inputs_return_empty_string(self, feet, inches, weight):
        """Missing, non-numeric or zero-height inputs give ''"""
        assert calculate_bmi_value(feet, inches, weight) == ""

    def test_bmi_reads_fields_positionally(self):
        """Fields are (feet, inches, weight) in declaration order"""
        calculate = build_calculation({"type": "bmi", "fields": ["ft", "in", "lbs"]})

        assert calculate({"ft": 5, "in": 10, "lbs": 180}) == "25.83"
        assert calculate({"ft": 5, "in": 10}) == ""

    def test_bmi_needs_three_fields(self):
        """A bmi declaration with fewer than three fields yields ''"""
        calculate = build_calculation({"type": "bmi", "fields": ["ft", "in"]})

        assert calculate({"ft": 5, "in": 10}) == ""

    @pytest.mark.parametrize("calculation", [
        {"type": "weeksToGoal", "fields": ["current", "goal"]},
        {"type": "custom", "formula": "a + b"},
        None,
    ])
    def test_extension_points_return_empty_string(self, calculation):
        """weeksToGoal and custom are declared but not calculated yet"""
        calculate = build_calculation(calculation)

        assert calculate({"current": 200, "goal": 180, "a": 1, "b": 2}) == ""


# ============================================================================
# Display Value Tests
# ============================================================================

class TestBuildDisplayValue:
    """Tests for the compiled DisplayValue"""

    @pytest.mark.parametrize("raw", [None, "bmi", ["bmi"]])
    def test_absent_declaration_returns_none(self, raw):
        """Steps without a displayValue get None"""
        assert build_display_value(raw) is None

    def test_empty_declaration_still_builds_display_value(self):
        """An empty displayValue object yields an always-shown, empty value"""
        display_value = build_display_value({})

        assert display_value is not None
        assert display_value.condition({}) is True
        assert display_value.calculate({"feet": 5}) == ""
        assert display_value.template == "{{value}}"
        assert display_value.render({}) == ""

    def test_template_defaults_to_placeholder(self):
        """The template defaults to the bare value placeholder"""
        display_value = build_display_value({"calculate": {"type": "custom"}})

        assert display_value.template == DEFAULT_TEMPLATE == "{{value}}"

    def test_render_fills_template(self):
        """render() substitutes the calculated value when the condition holds"""
        display_value = build_display_value({
            "condition": [{"field": "weight", "operator": "notEquals", "value": ""}],
            "calculate": {"type": "bmi", "fields": ["feet", "inches", "weight"]},
            "template": "BMI: {{value}}",
        })

        assert display_value.render({"feet": 5, "inches": 10, "weight": 180}) == "BMI: 25.83"
        assert display_value.render({"feet": 5, "inches": 10}) is None


# ============================================================================
# Render Condition Tests
# ============================================================================

class TestRenderConditionEvaluation:
    """Tests for RenderCondition.evaluate"""

    def test_and_requires_all(self):
        """AND holds only when every comparison holds"""
        condition = RenderCondition(
            conditions=(
                Condition(field="goal", operator="equals", value="lose"),
                Condition(field="age", operator="greaterThan", value=17),
            ),
            logical_operator="AND",
        )

        assert condition.evaluate({"goal": "lose", "age": "30"}) is True
        assert condition.evaluate({"goal": "lose", "age": "16"}) is False

    def test_or_requires_any(self):
        """OR holds when at least one comparison holds"""
        condition = RenderCondition(
            conditions=(
                Condition(field="goal", operator="equals", value="lose"),
                Condition(field="goal", operator="equals", value="maintain"),
            ),
            logical_operator="OR",
        )

        assert condition.evaluate({"goal": "maintain"}) is True
        assert condition.evaluate({"goal": "gain"}) is False

    def test_not_equals(self):
        """notEquals compares the answer with the value"""
        condition = Condition(field="goal", operator="notEquals", value="lose")

        assert condition.is_satisfied({"goal": "gain"}) is True
        assert condition.is_satisfied({"goal": "lose"}) is False

    def test_numeric_comparator_with_non_numeric_answer_not_satisfied(self):
        """Non-numeric answers never satisfy greaterThan or lessThan"""
        condition = Condition(field="age", operator="lessThan", value=65)

        assert condition.is_satisfied({"age": "unknown"}) is False
        assert condition.is_satisfied({}) is False

    def test_unknown_operator_never_satisfied(self):
        """Unknown operators are not silently true at render time"""
        condition = RenderCondition(
            conditions=(Condition(field="name", operator="contains", value="a"),),
            logical_operator="AND",
        )

        assert condition.evaluate({"name": "a"}) is False
