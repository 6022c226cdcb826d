"""
Quiz Loader

Loads the quiz JSON document, transforms it through the normalizer and keeps
the resulting quizzes in an explicit cache merged with hand-authored
fallback quizzes.
"""

from .config_loader import IntakeConfig, load_intake_config
from .document import QuizDocumentError, file_document_provider, load_quiz_document
from .repository import QuizRepository

__all__ = [
    "IntakeConfig",
    "QuizDocumentError",
    "QuizRepository",
    "file_document_provider",
    "load_intake_config",
    "load_quiz_document",
]
