"""
Quiz Repository

Owns the cache of quizzes built from the quiz JSON document and merges them
with hand-authored fallback quizzes:

1. Quizzes transformed from the JSON document (loaded once, then cached)
2. Hand-authored quizzes whose id does not appear in the document

Lookups never raise: a missing or unreadable document leaves only the
fallback quizzes available.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional

from intake.normalizer import QuizConfig, transform_all
from intake.validator import validate_quiz

from .config_loader import IntakeConfig
from .document import QuizDocumentError, file_document_provider

logger = logging.getLogger(__name__)

DocumentProvider = Callable[[], Optional[Mapping[str, Any]]]


class QuizRepository:
    """
    Cached access to every available quiz.

    Args:
        document_provider: Zero-argument callable returning the parsed quiz
            document, or None when there is none
        fallback_quizzes: Hand-authored quizzes used when the document does
            not define a quiz with the same id
        strict_validation: Validate each raw quiz first and skip any quiz
            with validation errors
        log_validation_warnings: Log validation warnings in strict mode

    Example:
        >>> repository = QuizRepository(lambda: {'quizzes': []})
        >>> repository.list_ids()
        []
    """

    def __init__(
        self,
        document_provider: DocumentProvider,
        fallback_quizzes: Iterable[QuizConfig] = (),
        strict_validation: bool = False,
        log_validation_warnings: bool = True,
    ):
        self._document_provider = document_provider
        self._fallback_quizzes = list(fallback_quizzes)
        self.strict_validation = strict_validation
        self.log_validation_warnings = log_validation_warnings
        self._json_quizzes: Optional[list[QuizConfig]] = None

    @classmethod
    def from_config(
        cls,
        config: IntakeConfig,
        fallback_quizzes: Iterable[QuizConfig] = ()
    ) -> "QuizRepository":
        """Create a repository reading the document named in the configuration."""
        return cls(
            document_provider=file_document_provider(config.resolved_document_path()),
            fallback_quizzes=fallback_quizzes,
            strict_validation=config.strict_validation,
            log_validation_warnings=config.log_validation_warnings,
        )

    @property
    def is_loaded(self) -> bool:
        return self._json_quizzes is not None

    def load(self) -> list[QuizConfig]:
        """
        Return all quizzes, JSON quizzes first.

        The document is read and transformed on the first call only.
        """
        if self._json_quizzes is None:
            self._json_quizzes = self._load_json_quizzes()

        json_ids = {quiz.id for quiz in self._json_quizzes}
        merged = list(self._json_quizzes)
        merged.extend(quiz for quiz in self._fallback_quizzes if quiz.id not in json_ids)
        return merged

    def get(self, quiz_id: str) -> Optional[QuizConfig]:
        """Look up a quiz by id; JSON quizzes take precedence."""
        for quiz in self.load():
            if quiz.id == quiz_id:
                return quiz
        return None

    def list_ids(self) -> list[str]:
        """Return the ids of all available quizzes."""
        return [quiz.id for quiz in self.load()]

    def clear(self) -> None:
        """Drop the cached JSON quizzes; the next access reloads the document."""
        self._json_quizzes = None
        logger.debug("Quiz cache cleared")

    def _load_json_quizzes(self) -> list[QuizConfig]:
        try:
            document = self._document_provider()
        except (QuizDocumentError, OSError) as e:
            logger.warning(
                "Failed to load quizzes from JSON, using fallback quizzes",
                extra={'error': str(e), 'error_type': type(e).__name__}
            )
            return []

        if not document:
            return []

        if self.strict_validation:
            document = self._drop_invalid_quizzes(document)

        return transform_all(document)

    def _drop_invalid_quizzes(self, document: Mapping[str, Any]) -> dict[str, Any]:
        raw_quizzes = document.get('quizzes')
        if not isinstance(raw_quizzes, list):
            return dict(document)

        valid_quizzes = []
        for index, raw_quiz in enumerate(raw_quizzes):
            result = validate_quiz(raw_quiz)
            slug = raw_quiz.get('slug') if isinstance(raw_quiz, Mapping) else None
            label = slug if slug else f'at index {index}'

            if self.log_validation_warnings:
                for warning in result.warnings:
                    logger.warning(f"Quiz {label}: {warning}")

            if not result.is_valid:
                logger.error(
                    f"Skipping invalid quiz {label}",
                    extra={'quiz_index': index, 'errors': result.errors}
                )
                continue

            valid_quizzes.append(raw_quiz)

        return {**document, 'quizzes': valid_quizzes}


__all__ = ["DocumentProvider", "QuizRepository"]
