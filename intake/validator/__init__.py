"""
Validator

Checks raw quizzes against structural and domain rules and reports
errors (block ingestion) and warnings (advisory) as plain data.
"""

from .validate import (
    ValidationResult,
    validate_document,
    validate_form_steps,
    validate_progress_steps,
    validate_question,
    validate_quiz,
)

__all__ = [
    "ValidationResult",
    "validate_document",
    "validate_form_steps",
    "validate_progress_steps",
    "validate_question",
    "validate_quiz",
]
