"""
Quiz Normalization Logic

This module transforms raw quizzes from the quiz JSON document into the
canonical QuizConfig model consumed by the form renderer. It handles field
alias resolution, ordering, type-specific question shapes and the derived
display values.

Key Responsibilities:
- Resolve canonical/legacy field names through the central alias table
- Sort progress steps, form steps, questions and options by their order
- Build the form step -> progress step mapping, dropping broken references
- Dispatch each question to the builder for its type tag

The transform is best effort: missing optional fields get defaults, and
broken cross-references are logged and omitted rather than raised. Callers
that need guarantees should run the validator first.
"""

import copy
import logging
from collections.abc import Callable, Mapping
from typing import Any, Optional

from intake.common import resolve_field

from .display_value import build_display_value
from .models import (
    BeforeAfterQuestion,
    ChoiceQuestion,
    Condition,
    DropdownQuestion,
    FileInputQuestion,
    FormStep,
    MarketingQuestion,
    MedicalReviewQuestion,
    PerfectQuestion,
    ProgressStep,
    Question,
    QuestionType,
    QuizConfig,
    RenderCondition,
    StepProgressMapping,
    TEXT_TYPES,
    TextQuestion,
    WeightSummaryQuestion,
)

logger = logging.getLogger(__name__)

# Design-system color used when a progress step declares none
DEFAULT_PROGRESS_COLOR = '#A75809'


class QuizTransformError(Exception):
    """Raised when a raw quiz cannot be transformed at all."""
    pass


def transform_quiz(raw_quiz: Mapping[str, Any]) -> QuizConfig:
    """
    Transform a raw quiz into the canonical QuizConfig.

    The quiz slug becomes the canonical id, and so do the slugs of every
    step and question; the internal `id` fields of the document are ignored.

    Args:
        raw_quiz: One entry of the document's `quizzes` array

    Returns:
        A newly constructed QuizConfig (the input is not modified)

    Raises:
        QuizTransformError: If the quiz is not a mapping or an unexpected
            error occurs while transforming it

    Example:
        >>> quiz = transform_quiz({'slug': 'acne', 'progressSteps': [], 'formSteps': []})
        >>> quiz.id
        'acne'
    """
    if not isinstance(raw_quiz, Mapping):
        raise QuizTransformError(
            f"Quiz must be a mapping, got {type(raw_quiz).__name__}"
        )

    try:
        raw_progress_steps = _as_entities(raw_quiz.get('progressSteps'), 'progress step')
        raw_form_steps = _as_entities(raw_quiz.get('formSteps'), 'form step')

        progress_steps = tuple(
            transform_progress_step(raw_step)
            for raw_step in _sort_by_order(raw_progress_steps, 'step_order')
        )
        progress_step_ids = {step.id for step in progress_steps}

        form_steps = tuple(
            transform_form_step(raw_step, progress_step_ids)
            for raw_step in _sort_by_order(raw_form_steps, 'step_order')
        )

        mapping = build_step_progress_mapping(form_steps, raw_form_steps, progress_step_ids)

        metadata = raw_quiz.get('metadata')

        quiz = QuizConfig(
            id=raw_quiz.get('slug'),
            name=raw_quiz.get('name'),
            description=raw_quiz.get('description'),
            version=raw_quiz.get('version'),
            progress_steps=progress_steps,
            step_progress_mapping=mapping,
            steps=form_steps,
            metadata=copy.deepcopy(dict(metadata)) if isinstance(metadata, Mapping) else None,
        )

        logger.debug(
            "Successfully transformed quiz",
            extra={
                'quiz_id': quiz.id,
                'progress_steps': len(progress_steps),
                'form_steps': len(form_steps),
                'mapped_steps': len(mapping),
            }
        )

        return quiz

    except QuizTransformError:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error during quiz transform",
            extra={
                'quiz_slug': raw_quiz.get('slug'),
                'error': str(e),
                'error_type': type(e).__name__,
            }
        )
        raise QuizTransformError(f"Unexpected transform error: {e}") from e


def transform_all(raw_document: Any) -> list[QuizConfig]:
    """
    Transform every quiz in a raw document.

    A quiz that fails to transform is logged and left out; the remaining
    quizzes are still returned. This function never raises.

    Args:
        raw_document: Parsed quiz document ({'quizzes': [...], ...})

    Returns:
        Transformed quizzes, in document order
    """
    raw_quizzes = raw_document.get('quizzes') if isinstance(raw_document, Mapping) else None
    if not isinstance(raw_quizzes, list):
        logger.warning("Quiz document does not contain a valid quizzes array")
        return []

    quizzes: list[QuizConfig] = []
    failed = 0

    for index, raw_quiz in enumerate(raw_quizzes):
        try:
            quizzes.append(transform_quiz(raw_quiz))
        except Exception as e:
            failed += 1
            label = None
            if isinstance(raw_quiz, Mapping):
                label = raw_quiz.get('slug') or raw_quiz.get('id')
            logger.error(
                f"Error transforming quiz \"{label if label else index}\"",
                extra={
                    'quiz_index': index,
                    'error': str(e),
                    'error_type': type(e).__name__,
                }
            )

    logger.info(
        "Transformed quiz document",
        extra={'transformed': len(quizzes), 'failed': failed}
    )
    return quizzes


def transform_progress_step(raw_step: Mapping[str, Any]) -> ProgressStep:
    """Transform a raw progress step (slug becomes the id)."""
    return ProgressStep(
        id=raw_step.get('slug'),
        name=raw_step.get('name'),
        description=raw_step.get('description'),
        color=raw_step.get('color') or DEFAULT_PROGRESS_COLOR,
    )


def transform_form_step(
    raw_step: Mapping[str, Any],
    progress_step_ids: Optional[set[str]] = None
) -> FormStep:
    """
    Transform a raw form step and its questions.

    Args:
        raw_step: Raw form step
        progress_step_ids: Known progress step ids; an unknown
            `progressStepId` is logged (the mapping drops it separately)

    Returns:
        FormStep with questions sorted by their order
    """
    slug = raw_step.get('slug')

    render_condition = None
    raw_render_condition = resolve_field(raw_step, 'render_condition')
    if isinstance(raw_render_condition, Mapping):
        render_condition = transform_render_condition(raw_render_condition)

    progress_step_id = raw_step.get('progressStepId')
    if (
        progress_step_ids is not None
        and progress_step_id
        and (not _hashable(progress_step_id) or progress_step_id not in progress_step_ids)
    ):
        logger.warning(
            f"Form step \"{slug}\" references invalid progress step \"{progress_step_id}\"",
            extra={'step_id': slug, 'progress_step_id': progress_step_id}
        )

    raw_questions = _as_entities(raw_step.get('questions'), 'question')
    subtext = raw_step.get('subtext') or None

    return FormStep(
        id=slug,
        title=raw_step.get('title'),
        heading1=raw_step.get('heading1'),
        heading2=raw_step.get('heading2'),
        subtext=subtext,
        question_subtext=subtext,
        render_condition=render_condition,
        show_trust_badges=raw_step.get('showTrustBadges'),
        headings_inline=raw_step.get('headingsInline'),
        dynamic_title=raw_step.get('dynamicTitle'),
        dynamic_heading1=raw_step.get('dynamicHeading1'),
        dynamic_heading2=raw_step.get('dynamicHeading2'),
        dynamic_subtext=raw_step.get('dynamicSubtext'),
        display_value=build_display_value(raw_step.get('displayValue')),
        questions=tuple(
            transform_question(raw_question)
            for raw_question in _sort_by_order(raw_questions, 'question_order')
        ),
    )


def build_step_progress_mapping(
    form_steps: tuple[FormStep, ...],
    raw_form_steps: list[Mapping[str, Any]],
    progress_step_ids: set[str]
) -> tuple[StepProgressMapping, ...]:
    """
    Link each transformed form step to its progress step.

    The progress reference is read from the first raw form step with the
    same slug. Steps without a reference are skipped silently; steps whose
    reference is not a known progress step are skipped with a warning.
    Every returned entry therefore points at an existing progress step.
    """
    raw_by_slug: dict[Any, Mapping[str, Any]] = {}
    for raw_step in raw_form_steps:
        slug = raw_step.get('slug')
        if _hashable(slug):
            raw_by_slug.setdefault(slug, raw_step)

    mapping: list[StepProgressMapping] = []
    for step in form_steps:
        raw_step = raw_by_slug.get(step.id) if _hashable(step.id) else None
        progress_step_id = raw_step.get('progressStepId') if raw_step else None
        if not progress_step_id:
            continue

        if not _hashable(progress_step_id) or progress_step_id not in progress_step_ids:
            logger.warning(
                f"Dropping mapping for form step \"{step.id}\": unknown progress step \"{progress_step_id}\"",
                extra={'step_id': step.id, 'progress_step_id': progress_step_id}
            )
            continue

        mapping.append(StepProgressMapping(step_id=step.id, progress_step_id=progress_step_id))

    return tuple(mapping)


def transform_render_condition(raw_condition: Mapping[str, Any]) -> RenderCondition:
    """Copy a render condition structurally; it is evaluated by the renderer."""
    comparisons = _as_entities(raw_condition.get('conditions'), 'render condition clause')
    return RenderCondition(
        conditions=tuple(
            Condition(
                field=comparison.get('field'),
                operator=comparison.get('operator'),
                value=copy.deepcopy(comparison.get('value')),
            )
            for comparison in comparisons
        ),
        logical_operator=raw_condition.get('logicalOperator'),
    )


def transform_options(raw_question: Mapping[str, Any]) -> tuple[tuple[Any, ...], tuple[str, ...]]:
    """
    Sort a question's options and split them into values and labels.

    Returns:
        (values, labels), index-aligned; a missing label falls back to the
        value as text
    """
    raw_options = _sort_by_order(_as_entities(raw_question.get('options'), 'option'), 'option_order')
    values = tuple(option.get('value') for option in raw_options)
    labels = tuple(_option_label(option) for option in raw_options)
    return values, labels


def transform_question(raw_question: Mapping[str, Any]) -> Question:
    """
    Transform a raw question into the variant for its type.

    The type tag is matched case-insensitively. Unknown tags are logged and
    rendered as text questions.
    """
    type_tag = str(raw_question.get('type') or '').lower()
    validation = raw_question.get('validation')

    base = {
        'id': raw_question.get('slug'),
        'type': type_tag,
        'question': raw_question.get('question'),
        'display_question': resolve_field(raw_question, 'display_question'),
        'required': resolve_field(raw_question, 'required', False),
        'placeholder': raw_question.get('placeholder') or None,
        'api_type': resolve_field(raw_question, 'api_type'),
        'validation': tuple(validation) if isinstance(validation, list) and validation else None,
        'dynamic_text': raw_question.get('dynamicText'),
    }

    try:
        question_type = QuestionType(type_tag.upper())
    except ValueError:
        logger.warning(
            f"Unknown question type \"{type_tag}\", rendering as text",
            extra={'question_id': base['id'], 'type': type_tag}
        )
        return _build_text(raw_question, base)

    return QUESTION_BUILDERS[question_type](raw_question, base)


def _build_choice(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    values, labels = transform_options(raw_question)
    option_images = resolve_field(raw_question, 'option_images')
    return ChoiceQuestion(
        **{**base, 'type': base['type'].upper()},
        options=values,
        option_labels=labels,
        display_as_row=resolve_field(raw_question, 'display_as_row', True),
        image=raw_question.get('image'),
        option_images=tuple(option_images) if isinstance(option_images, list) else None,
    )


def _build_dropdown(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    values, labels = transform_options(raw_question)
    return DropdownQuestion(
        **{**base, 'type': QuestionType.DROPDOWN.value},
        options=values,
        option_labels=labels,
    )


def _build_marketing(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    return MarketingQuestion(
        **{**base, 'type': QuestionType.MARKETING.value},
        image=raw_question.get('image'),
        display_statistics=resolve_field(raw_question, 'display_statistics'),
    )


def _build_before_after(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    return BeforeAfterQuestion(
        **{**base, 'type': QuestionType.BEFORE_AFTER.value},
        before_image=resolve_field(raw_question, 'before_image'),
        after_image=resolve_field(raw_question, 'after_image'),
        quote=raw_question.get('quote'),
    )


def _build_file_input(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    return FileInputQuestion(**{**base, 'type': QuestionType.FILE_INPUT.value, 'api_type': 'FILE'})


def _build_medical_review(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    calculated_values = raw_question.get('calculatedValues')
    return MedicalReviewQuestion(
        **{**base, 'type': QuestionType.MEDICAL_REVIEW.value},
        calculated_values=copy.deepcopy(dict(calculated_values)) if isinstance(calculated_values, Mapping) else None,
        candidate_statement=raw_question.get('candidateStatement') or '',
    )


def _build_perfect(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    return PerfectQuestion(
        **{**base, 'type': QuestionType.PERFECT.value},
        heading1=raw_question.get('heading1'),
        dynamic_subtext=raw_question.get('dynamicSubtext'),
        subtext=raw_question.get('subtext'),
    )


def _build_weight_summary(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    return WeightSummaryQuestion(**{**base, 'type': QuestionType.WEIGHT_SUMMARY.value})


def _build_text(raw_question: Mapping[str, Any], base: dict[str, Any]) -> Question:
    # Text-like questions keep the lower-cased tag ('email', 'tel', ...)
    return TextQuestion(**base, icon=raw_question.get('icon'))


# One builder per QuestionType member; tests assert the table is exhaustive
QUESTION_BUILDERS: dict[QuestionType, Callable[[Mapping[str, Any], dict[str, Any]], Question]] = {
    QuestionType.SINGLESELECT: _build_choice,
    QuestionType.MULTISELECT: _build_choice,
    QuestionType.CHECKBOX: _build_choice,
    QuestionType.DROPDOWN: _build_dropdown,
    QuestionType.MARKETING: _build_marketing,
    QuestionType.BEFORE_AFTER: _build_before_after,
    QuestionType.FILE_INPUT: _build_file_input,
    QuestionType.MEDICAL_REVIEW: _build_medical_review,
    QuestionType.PERFECT: _build_perfect,
    QuestionType.WEIGHT_SUMMARY: _build_weight_summary,
    **{text_type: _build_text for text_type in TEXT_TYPES},
}


def order_value(value: Any) -> float:
    """
    Coerce a resolved order value into a sort key.

    Missing or non-numeric values sort as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    logger.debug("Non-numeric order value, using 0", extra={'value': value})
    return 0.0


def _sort_by_order(items: list[Mapping[str, Any]], field_name: str) -> list[Mapping[str, Any]]:
    # sorted() is stable: equal orders keep their input position
    return sorted(items, key=lambda item: order_value(resolve_field(item, field_name, 0)))


def _as_entities(value: Any, kind: str) -> list[Mapping[str, Any]]:
    """Return the mapping entries of a raw list, skipping anything else."""
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(
            f"Expected a list of {kind} entries, got {type(value).__name__}",
            extra={'kind': kind}
        )
        return []

    entities = [item for item in value if isinstance(item, Mapping)]
    if len(entities) != len(value):
        logger.warning(
            f"Skipping {len(value) - len(entities)} malformed {kind} entries",
            extra={'kind': kind}
        )
    return entities


def _option_label(option: Mapping[str, Any]) -> str:
    label = option.get('label')
    if label:
        return str(label)
    value = option.get('value')
    return '' if value is None else str(value)


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True
