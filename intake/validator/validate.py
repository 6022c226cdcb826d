"""
Quiz Document Validation

This module checks a raw quiz from the quiz JSON document before it is
trusted. Every check runs and accumulates its findings:

- errors: structural violations (missing identity, broken references,
  duplicate slugs, malformed questions); any error makes the quiz invalid
- warnings: advisory findings (missing metadata, unknown question types)
  that never affect validity

Findings are plain strings that name the offending entity by slug, or by
its index when the slug is missing. The validator never raises for bad
input and never calls the normalizer.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from intake.common import find_duplicates, has_field, is_valid_color, is_valid_slug, resolve_field
from intake.normalizer.models import CONDITION_OPERATORS, LOGICAL_OPERATORS, OPTION_TYPES, QuestionType

logger = logging.getLogger(__name__)

CALCULATION_TYPES = frozenset({'bmi', 'weeksToGoal', 'custom'})
METADATA_FIELDS = ('category', 'estimatedTime', 'targetAudience')


@dataclass
class ValidationResult:
    """Outcome of validating one quiz."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True iff there are no errors; warnings never affect validity."""
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            'isValid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }


def validate_quiz(raw_quiz: Any) -> ValidationResult:
    """
    Validate a raw quiz.

    Args:
        raw_quiz: One entry of the document's `quizzes` array

    Returns:
        ValidationResult with every error and warning found

    Example:
        >>> result = validate_quiz({'id': 'q1', 'slug': 'Bad Slug'})
        >>> result.is_valid
        False
    """
    result = ValidationResult()

    if not isinstance(raw_quiz, Mapping):
        result.errors.append('Quiz must be an object')
        return result

    slug = raw_quiz.get('slug')
    if not slug or not raw_quiz.get('id'):
        result.errors.append('Quiz must have both id and slug')
    if slug and not is_valid_slug(slug):
        result.errors.append(f'Quiz slug "{slug}" is not URL-safe')

    progress_steps = raw_quiz.get('progressSteps')
    result.errors.extend(validate_progress_steps(progress_steps))

    progress_step_slugs = {
        step.get('slug')
        for step in _entries(progress_steps)
        if isinstance(step, Mapping) and isinstance(step.get('slug'), str)
    }
    form_errors, form_warnings = validate_form_steps(raw_quiz.get('formSteps'), progress_step_slugs)
    result.errors.extend(form_errors)
    result.warnings.extend(form_warnings)

    result.warnings.extend(_validate_metadata(raw_quiz.get('metadata')))

    logger.debug(
        "Validated quiz",
        extra={
            'quiz_slug': slug,
            'errors': len(result.errors),
            'warnings': len(result.warnings),
        }
    )
    return result


def validate_document(raw_document: Any) -> dict[str, ValidationResult]:
    """
    Validate every quiz of a raw document.

    Returns:
        Results keyed by quiz slug, or by 'quiz at index N' when the slug is
        missing (or repeated)
    """
    raw_quizzes = raw_document.get('quizzes') if isinstance(raw_document, Mapping) else None
    results: dict[str, ValidationResult] = {}

    for index, raw_quiz in enumerate(_entries(raw_quizzes)):
        slug = raw_quiz.get('slug') if isinstance(raw_quiz, Mapping) else None
        key = slug if isinstance(slug, str) and slug and slug not in results else f'quiz at index {index}'
        results[key] = validate_quiz(raw_quiz)

    return results


def validate_progress_steps(steps: Any) -> list[str]:
    """
    Validate the progress steps of a quiz.

    Besides per-step checks, the resolved orders must form the sequence
    1..N; only the first break in the sequence is reported.
    """
    errors: list[str] = []
    entries = _entries(steps)

    if not entries:
        errors.append('Quiz must have at least one progress step')
        return errors

    step_maps = [step for step in entries if isinstance(step, Mapping)]

    duplicates = find_duplicates(s.get('slug') for s in step_maps if s.get('slug') is not None)
    if duplicates:
        errors.append(f'Duplicate progress step slugs: {_join(duplicates)}')

    duplicate_ids = find_duplicates(s.get('id') for s in step_maps if s.get('id') is not None)
    if duplicate_ids:
        errors.append(f'Duplicate progress step IDs: {_join(duplicate_ids)}')

    orders: list[float] = []
    for index, step in enumerate(entries):
        if not isinstance(step, Mapping):
            errors.append(f'Progress step at index {index} is not an object')
            orders.append(0)
            continue

        label = _describe('Progress step', step.get('slug'), index)
        errors.extend(_slug_errors('Progress step', step.get('slug'), index))

        if not step.get('name'):
            errors.append(f'{label} is missing name')

        if not is_valid_color(step.get('color')):
            errors.append(f'{label} has invalid color')

        if not has_field(step, 'step_order'):
            errors.append(f'{label} is missing order')
            orders.append(0)
        else:
            order = resolve_field(step, 'step_order')
            if not _is_number(order):
                errors.append(f'{label} has non-numeric order "{order}"')
                orders.append(0)
            else:
                orders.append(order)

    for position, order in enumerate(sorted(orders), start=1):
        if order != position:
            errors.append(
                f'Progress step order sequence is not sequential '
                f'(expected {position}, found {_format_number(order)})'
            )
            break

    return errors


def validate_form_steps(steps: Any, progress_step_slugs: set[str]) -> tuple[list[str], list[str]]:
    """
    Validate the form steps of a quiz and their questions.

    Returns:
        (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []
    entries = _entries(steps)

    if not entries:
        errors.append('Quiz must have at least one form step')
        return errors, warnings

    duplicates = find_duplicates(
        s.get('slug') for s in entries if isinstance(s, Mapping) and s.get('slug') is not None
    )
    if duplicates:
        errors.append(f'Duplicate form step slugs: {_join(duplicates)}')

    for index, step in enumerate(entries):
        if not isinstance(step, Mapping):
            errors.append(f'Form step at index {index} is not an object')
            continue

        label = _describe('Form step', step.get('slug'), index)
        errors.extend(_slug_errors('Form step', step.get('slug'), index))

        progress_step_id = step.get('progressStepId')
        if not progress_step_id:
            errors.append(f'{label} is missing progressStepId')
        elif not isinstance(progress_step_id, str) or progress_step_id not in progress_step_slugs:
            errors.append(f'{label} references invalid progress step "{progress_step_id}"')

        if not has_field(step, 'step_order'):
            errors.append(f'{label} is missing order')

        errors.extend(_render_condition_errors(label, resolve_field(step, 'render_condition')))
        display_errors, display_warnings = _display_value_findings(label, step.get('displayValue'))
        errors.extend(display_errors)
        warnings.extend(display_warnings)

        questions = _entries(step.get('questions'))
        if not questions:
            errors.append(f'{label} has no questions')
            continue

        duplicate_questions = find_duplicates(
            q.get('slug') for q in questions if isinstance(q, Mapping) and q.get('slug') is not None
        )
        if duplicate_questions:
            errors.append(f'Duplicate question slugs in {label}: {_join(duplicate_questions)}')

        for q_index, question in enumerate(questions):
            slug = question.get('slug') if isinstance(question, Mapping) else None
            prefix = f"{label}, {_describe('question', slug, q_index)}"
            question_errors, question_warnings = validate_question(question)
            errors.extend(f'{prefix}: {message}' for message in question_errors)
            warnings.extend(f'{prefix}: {message}' for message in question_warnings)

    return errors, warnings


def validate_question(question: Any) -> tuple[list[str], list[str]]:
    """
    Validate a single question.

    Returns:
        (errors, warnings); messages are relative to the question, the
        caller prefixes them with the step and question labels
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(question, Mapping):
        errors.append('Question is not an object')
        return errors, warnings

    slug = question.get('slug')
    if not slug:
        errors.append('Question is missing slug')
    elif not is_valid_slug(slug):
        errors.append(f'Question slug "{slug}" is not URL-safe')

    raw_type = question.get('type')
    if not raw_type:
        errors.append('Question is missing type')
        return errors, warnings

    type_tag = str(raw_type).upper()
    question_type = _question_type(type_tag)
    if question_type is None:
        warnings.append(f'Unknown question type "{raw_type}" will be rendered as text')
        return errors, warnings

    if question_type in OPTION_TYPES:
        options = _entries(question.get('options'))
        if not options:
            errors.append(f'Question type "{type_tag}" requires options')
        for opt_index, option in enumerate(options):
            if not isinstance(option, Mapping):
                errors.append(f'Option at index {opt_index} is not an object')
                continue
            if _is_blank(option.get('value')):
                errors.append(f'Option at index {opt_index} is missing value')
            if _is_blank(option.get('label')):
                errors.append(f'Option at index {opt_index} is missing label')

    if question_type is QuestionType.MARKETING and not question.get('image'):
        errors.append('MARKETING question type requires image')

    if question_type is QuestionType.BEFORE_AFTER:
        if not resolve_field(question, 'before_image'):
            errors.append('BEFORE_AFTER question type requires beforeImage')
        if not resolve_field(question, 'after_image'):
            errors.append('BEFORE_AFTER question type requires afterImage')

    return errors, warnings


def _render_condition_errors(label: str, render_condition: Any) -> list[str]:
    if render_condition is None:
        return []
    if not isinstance(render_condition, Mapping):
        return [f'{label} render condition must be an object']

    errors: list[str] = []
    logical_operator = render_condition.get('logicalOperator')
    if logical_operator not in LOGICAL_OPERATORS:
        errors.append(f'{label} render condition has invalid logicalOperator "{logical_operator}"')

    conditions = render_condition.get('conditions')
    if not isinstance(conditions, list):
        errors.append(f'{label} render condition is missing conditions')
        return errors

    errors.extend(_clause_errors(f'{label} render condition', conditions))
    return errors


def _display_value_findings(label: str, display_value: Any) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []
    if not display_value:
        return errors, warnings
    if not isinstance(display_value, Mapping):
        errors.append(f'{label} display value must be an object')
        return errors, warnings

    clauses = display_value.get('condition')
    if clauses is not None:
        if isinstance(clauses, list):
            errors.extend(_clause_errors(f'{label} display value condition', clauses))
        else:
            errors.append(f'{label} display value condition must be a list')

    calculation = display_value.get('calculate')
    if isinstance(calculation, Mapping):
        calc_type = calculation.get('type')
        if calc_type not in CALCULATION_TYPES:
            errors.append(f'{label} display value has unsupported calculation type "{calc_type}"')
        elif calc_type == 'bmi' and len(_entries(calculation.get('fields'))) < 3:
            warnings.append(f'{label} BMI display value needs feet, inches and weight fields')

    return errors, warnings


def _clause_errors(context: str, clauses: list[Any]) -> list[str]:
    errors: list[str] = []
    for index, clause in enumerate(clauses):
        if not isinstance(clause, Mapping):
            errors.append(f'{context} clause at index {index} is not an object')
            continue
        if not clause.get('field'):
            errors.append(f'{context} clause at index {index} is missing field')
        operator = clause.get('operator')
        if operator not in CONDITION_OPERATORS:
            errors.append(f'{context} clause at index {index} has unsupported operator "{operator}"')
    return errors


def _validate_metadata(metadata: Any) -> list[str]:
    if not metadata or not isinstance(metadata, Mapping):
        return ['Quiz is missing metadata']
    return [
        f'Quiz metadata missing {name}'
        for name in METADATA_FIELDS
        if not metadata.get(name)
    ]


def _slug_errors(kind: str, slug: Any, index: int) -> list[str]:
    if not slug:
        return [f'{kind} at index {index} is missing slug']
    if not is_valid_slug(slug):
        return [f'{kind} slug "{slug}" is not URL-safe']
    return []


def _describe(kind: str, slug: Any, index: int) -> str:
    """Name an entity by its slug, or by its index if the slug is unusable."""
    if isinstance(slug, str) and slug:
        return f'{kind} "{slug}"'
    return f'{kind} at index {index}'


def _question_type(type_tag: str) -> Optional[QuestionType]:
    try:
        return QuestionType(type_tag)
    except ValueError:
        return None


def _entries(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _join(values: list[Any]) -> str:
    return ', '.join(str(value) for value in values)
