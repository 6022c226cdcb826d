"""
Canonical Quiz Configuration Model

These dataclasses are the trusted output of the normalizer and the input of
the form renderer. All of them are frozen; collections are stored as tuples
so a produced QuizConfig cannot be changed in place.

Questions form a tagged family: every variant carries its upper-case type
tag (QuestionType) and the renderer dispatches on it. Text-like questions
keep the lower-cased tag from the source document (e.g. 'email').
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

FormAnswers = Mapping[str, Any]


class QuestionType(str, Enum):
    """Upper-case question type tags understood by the renderer."""

    SINGLESELECT = 'SINGLESELECT'
    MULTISELECT = 'MULTISELECT'
    CHECKBOX = 'CHECKBOX'
    DROPDOWN = 'DROPDOWN'
    MARKETING = 'MARKETING'
    BEFORE_AFTER = 'BEFORE_AFTER'
    FILE_INPUT = 'FILE_INPUT'
    MEDICAL_REVIEW = 'MEDICAL_REVIEW'
    PERFECT = 'PERFECT'
    WEIGHT_SUMMARY = 'WEIGHT_SUMMARY'
    # Text-like inputs
    TEXT = 'TEXT'
    TEXTAREA = 'TEXTAREA'
    NUMBER = 'NUMBER'
    EMAIL = 'EMAIL'
    TEL = 'TEL'
    DATE = 'DATE'


CHOICE_TYPES = frozenset({QuestionType.SINGLESELECT, QuestionType.MULTISELECT, QuestionType.CHECKBOX})
OPTION_TYPES = CHOICE_TYPES | {QuestionType.DROPDOWN}
TEXT_TYPES = frozenset({
    QuestionType.TEXT,
    QuestionType.TEXTAREA,
    QuestionType.NUMBER,
    QuestionType.EMAIL,
    QuestionType.TEL,
    QuestionType.DATE,
})

# Closed set of comparison operators for render and display conditions
CONDITION_OPERATORS = frozenset({'equals', 'notEquals', 'greaterThan', 'lessThan'})
LOGICAL_OPERATORS = frozenset({'AND', 'OR'})


def _camel_case(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def _serialize(value: Any) -> Any:
    if is_dataclass(value):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _serialize(item) for key, item in value.items()}
    return value


class _Serializable:
    """Mixin producing the camelCase dictionary shape used by the renderer."""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or callable(value):
                continue
            result[_camel_case(f.name)] = _serialize(value)
        return result


@dataclass(frozen=True)
class ProgressStep(_Serializable):
    """A coarse visual stage grouping one or more form steps."""

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    color: str = '#A75809'


@dataclass(frozen=True)
class StepProgressMapping(_Serializable):
    """Links a form step to the progress step it belongs to."""

    step_id: str
    progress_step_id: str


@dataclass(frozen=True)
class Condition(_Serializable):
    """A single field comparison."""

    field: str
    operator: str
    value: Any = None

    def is_satisfied(self, answers: FormAnswers) -> bool:
        """
        Evaluate this comparison against the form answers.

        Numeric comparators are False when either side is not numeric.
        Operators outside CONDITION_OPERATORS are never satisfied.
        """
        answer = answers.get(self.field)

        if self.operator == 'equals':
            return answer == self.value
        if self.operator == 'notEquals':
            return answer != self.value
        if self.operator in ('greaterThan', 'lessThan'):
            left = _to_number(answer)
            right = _to_number(self.value)
            if left is None or right is None:
                return False
            return left > right if self.operator == 'greaterThan' else left < right

        logger.warning(
            "Unknown condition operator, treating as not satisfied",
            extra={'field': self.field, 'operator': self.operator}
        )
        return False


@dataclass(frozen=True)
class RenderCondition(_Serializable):
    """Boolean gate controlling whether a form step is shown."""

    conditions: tuple[Condition, ...] = ()
    logical_operator: str = 'AND'

    def evaluate(self, answers: FormAnswers) -> bool:
        """Combine the comparisons with AND (all) or OR (any)."""
        results = [condition.is_satisfied(answers) for condition in self.conditions]
        if self.logical_operator == 'OR':
            return any(results)
        return all(results)


@dataclass(frozen=True)
class DisplayValue(_Serializable):
    """A value derived from the answers and shown with a text template."""

    condition: Callable[[FormAnswers], bool] = field(compare=False)
    calculate: Callable[[FormAnswers], Union[str, float]] = field(compare=False)
    template: str = '{{value}}'

    def render(self, answers: FormAnswers) -> Optional[str]:
        """Return the filled template, or None when the condition fails."""
        if not self.condition(answers):
            return None
        return self.template.replace('{{value}}', str(self.calculate(answers)))


@dataclass(frozen=True)
class Question(_Serializable):
    """Fields shared by every question variant."""

    id: str
    type: str
    question: Optional[str] = None
    display_question: Optional[str] = None
    required: bool = False
    placeholder: Optional[str] = None
    api_type: Optional[str] = None
    validation: Optional[tuple[str, ...]] = None
    dynamic_text: Optional[str] = None


@dataclass(frozen=True)
class ChoiceQuestion(Question):
    """SINGLESELECT, MULTISELECT and CHECKBOX questions."""

    options: tuple[Any, ...] = ()
    option_labels: tuple[str, ...] = ()
    display_as_row: bool = True
    image: Optional[str] = None
    option_images: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class DropdownQuestion(Question):
    options: tuple[Any, ...] = ()
    option_labels: tuple[str, ...] = ()


@dataclass(frozen=True)
class MarketingQuestion(Question):
    image: Optional[str] = None
    display_statistics: Optional[bool] = None


@dataclass(frozen=True)
class BeforeAfterQuestion(Question):
    before_image: Optional[str] = None
    after_image: Optional[str] = None
    quote: Optional[str] = None


@dataclass(frozen=True)
class FileInputQuestion(Question):
    api_type: Optional[str] = 'FILE'


@dataclass(frozen=True)
class MedicalReviewQuestion(Question):
    calculated_values: Optional[dict[str, Any]] = None
    candidate_statement: str = ''


@dataclass(frozen=True)
class PerfectQuestion(Question):
    heading1: Optional[str] = None
    dynamic_subtext: Optional[str] = None
    subtext: Optional[str] = None


@dataclass(frozen=True)
class WeightSummaryQuestion(Question):
    pass


@dataclass(frozen=True)
class TextQuestion(Question):
    """Text-like inputs (text, textarea, number, email, tel, date)."""

    icon: Optional[str] = None


@dataclass(frozen=True)
class FormStep(_Serializable):
    """One page of the quiz."""

    id: str
    title: Optional[str] = None
    heading1: Optional[str] = None
    heading2: Optional[str] = None
    subtext: Optional[str] = None
    question_subtext: Optional[str] = None
    render_condition: Optional[RenderCondition] = None
    show_trust_badges: Optional[bool] = None
    headings_inline: Optional[bool] = None
    dynamic_title: Optional[str] = None
    dynamic_heading1: Optional[str] = None
    dynamic_heading2: Optional[str] = None
    dynamic_subtext: Optional[str] = None
    display_value: Optional[DisplayValue] = None
    questions: tuple[Question, ...] = ()


@dataclass(frozen=True)
class QuizConfig(_Serializable):
    """A fully normalized quiz, identified by its slug."""

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    progress_steps: tuple[ProgressStep, ...] = ()
    step_progress_mapping: tuple[StepProgressMapping, ...] = ()
    steps: tuple[FormStep, ...] = ()
    metadata: Optional[dict[str, Any]] = None


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
