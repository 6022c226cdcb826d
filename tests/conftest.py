"""
Pytest configuration and shared fixtures

This file contains test fixtures that can be used across all tests.
Fixtures are reusable components that set up test preconditions.

Learn more: https://docs.pytest.org/en/stable/fixture.html
"""

from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Root directory of the repository (holds config/ and data/)."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture(scope="function")
def sample_raw_quiz() -> dict:
    """
    Provide a valid raw quiz for testing.

    The collections are deliberately out of order so tests can check that
    the normalizer sorts them. The quiz passes validation with no errors
    and no warnings.

    Scope: function (created fresh for each test)

    Returns:
        dict: Raw quiz as found in the quiz JSON document
    """
    return {
        "id": "quiz-001",
        "slug": "weight-loss",
        "name": "Weight Loss",
        "description": "Weight loss intake",
        "version": "1.0.0",
        "metadata": {
            "category": "weight-management",
            "estimatedTime": "5 minutes",
            "targetAudience": "adults",
            "compliance": ["HIPAA"],
        },
        "progressSteps": [
            {
                "id": "ps-2",
                "slug": "health",
                "name": "Health",
                "description": "Health history",
                "color": "#3B7A57",
                "order": 2,
            },
            {
                "id": "ps-1",
                "slug": "about-you",
                "name": "About you",
                "description": "Basic information",
                "color": "#A75809",
                "order": 1,
            },
        ],
        "formSteps": [
            {
                "id": "fs-2",
                "slug": "measurements",
                "title": "Measurements",
                "progressStepId": "about-you",
                "order": 2,
                "displayValue": {
                    "condition": [{"field": "weight", "operator": "notEquals", "value": ""}],
                    "calculate": {"type": "bmi", "fields": ["feet", "inches", "weight"]},
                    "template": "Your BMI is {{value}}",
                },
                "questions": [
                    {"id": "q-3", "slug": "weight", "type": "number", "required": True, "question_order": 3},
                    {"id": "q-1", "slug": "feet", "type": "number", "required": True, "question_order": 1},
                    {"id": "q-2", "slug": "inches", "type": "number", "required": True, "question_order": 2},
                ],
            },
            {
                "id": "fs-1",
                "slug": "goals",
                "title": "Goals",
                "subtext": "Pick one",
                "progressStepId": "about-you",
                "order": 1,
                "questions": [
                    {
                        "id": "q-4",
                        "slug": "goal",
                        "type": "singleselect",
                        "question": "What is your goal?",
                        "required": True,
                        "question_order": 1,
                        "options": [
                            {"id": "o-2", "value": "b", "label": "B", "order": 2},
                            {"id": "o-1", "value": "a", "label": "A", "order": 1},
                        ],
                    }
                ],
            },
            {
                "id": "fs-3",
                "slug": "history",
                "title": "History",
                "progressStepId": "health",
                "order": 3,
                "renderCondition": {
                    "conditions": [{"field": "goal", "operator": "equals", "value": "a"}],
                    "logicalOperator": "AND",
                },
                "questions": [
                    {
                        "id": "q-5",
                        "slug": "promo",
                        "type": "MARKETING",
                        "image": "/images/promo.png",
                        "question_order": 1,
                    },
                    {
                        "id": "q-6",
                        "slug": "results",
                        "type": "before_after",
                        "beforeImage": "/images/before.png",
                        "afterImage": "/images/after.png",
                        "quote": "It worked",
                        "question_order": 2,
                    },
                ],
            },
        ],
    }


@pytest.fixture(scope="function")
def sample_document(sample_raw_quiz: dict) -> dict:
    """
    Provide a raw quiz document holding the sample quiz.

    Scope: function (created fresh for each test)

    Returns:
        dict: Parsed quiz document
    """
    return {
        "metadata": {"version": "1.0.0", "lastUpdated": "2026-10-01"},
        "quizzes": [sample_raw_quiz],
        "templates": [],
    }


# Mark tests based on their type for selective running
def pytest_configure(config):
    """
    Register custom pytest markers.

    This allows us to run specific test categories:
    - pytest -m unit        (run only unit tests)
    - pytest -m integration (run only integration tests)
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (isolated, fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (reads bundled files)"
    )
