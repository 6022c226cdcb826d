"""
Quiz document provider.

Reads the quiz JSON document from disk. Parsing happens here only; the
normalizer and validator work on the parsed, in-memory document.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class QuizDocumentError(Exception):
    """Raised when the quiz document exists but cannot be used."""
    pass


def load_quiz_document(path: str | Path) -> dict[str, Any] | None:
    """
    Read and parse the quiz document.

    Args:
        path: Location of the JSON document

    Returns:
        The parsed document, or None when the file does not exist

    Raises:
        QuizDocumentError: If the file cannot be read, is not valid JSON, or
            its top level is not an object
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Quiz document not found: %s", path)
        return None

    try:
        with path.open("r", encoding="utf-8") as handle:
            document = json.load(handle)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse quiz document: %s", exc)
        raise QuizDocumentError(f"Invalid JSON in quiz document {path}: {exc}") from exc
    except OSError as exc:
        logger.error("Failed to read quiz document: %s", exc)
        raise QuizDocumentError(f"Cannot read quiz document {path}: {exc}") from exc

    if not isinstance(document, dict):
        raise QuizDocumentError(f"Quiz document {path} must contain a JSON object")

    logger.info(
        "Loaded quiz document",
        extra={
            "path": str(path),
            "quizzes_count": _count(document.get("quizzes")),
            "templates_count": _count(document.get("templates")),
        },
    )
    return document


def _count(value: Any) -> int:
    return len(value) if isinstance(value, list) else 0


def file_document_provider(path: str | Path) -> Callable[[], dict[str, Any] | None]:
    """Return a zero-argument provider reading the document at path."""

    def provide() -> dict[str, Any] | None:
        return load_quiz_document(path)

    return provide


__all__ = ["QuizDocumentError", "file_document_provider", "load_quiz_document"]
