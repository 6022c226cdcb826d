"""
Normalizer

Transforms raw quizzes from the quiz JSON document into the canonical
QuizConfig model consumed by the form renderer.

Key responsibilities:
- Resolve canonical and legacy field names
- Order progress steps, form steps, questions and options
- Build the step -> progress step mapping
- Compile declarative display values into pure functions
"""

from .display_value import build_display_value, calculate_bmi_value
from .models import QuestionType, QuizConfig
from .transform import QuizTransformError, transform_all, transform_quiz

__all__ = [
    "QuestionType",
    "QuizConfig",
    "QuizTransformError",
    "build_display_value",
    "calculate_bmi_value",
    "transform_all",
    "transform_quiz",
]
