"""
Unit Tests for the configuration loader and the document provider.

Files are written to pytest's tmp_path.
"""

import json

import pytest

from intake.quiz_loader import (
    IntakeConfig,
    QuizDocumentError,
    file_document_provider,
    load_intake_config,
    load_quiz_document,
)


class TestLoadIntakeConfig:
    """Tests for config/intake.yml loading"""

    def test_load_values(self, tmp_path):
        config_file = tmp_path / "intake.yml"
        config_file.write_text(
            "document:\n"
            "  path: /srv/quiz.json\n"
            "loader:\n"
            "  strict_validation: false\n"
            "  log_validation_warnings: false\n"
        )

        config = load_intake_config(str(config_file))

        assert config.document_path == "/srv/quiz.json"
        assert config.strict_validation is False
        assert config.log_validation_warnings is False
        assert str(config.resolved_document_path()) == "/srv/quiz.json"

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "intake.yml"
        config_file.write_text("")

        config = load_intake_config(str(config_file))

        assert config == IntakeConfig()
        assert config.resolved_document_path().name == "quiz.json"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_intake_config(str(tmp_path / "missing.yml"))

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "intake.yml"
        config_file.write_text("document: [unclosed\n")

        with pytest.raises(ValueError):
            load_intake_config(str(config_file))

    def test_invalid_document_path(self, tmp_path):
        config_file = tmp_path / "intake.yml"
        config_file.write_text("document:\n  path: 42\n")

        with pytest.raises(ValueError, match="document.path"):
            load_intake_config(str(config_file))

    def test_default_location(self, project_root):
        """Without a path the bundled config/intake.yml is read"""
        config = load_intake_config()

        assert config.resolved_document_path() == project_root / "data" / "quiz.json"


class TestLoadQuizDocument:
    """Tests for reading the quiz JSON document"""

    def test_reads_document(self, tmp_path, sample_document):
        path = tmp_path / "quiz.json"
        path.write_text(json.dumps(sample_document))

        assert load_quiz_document(path) == sample_document

    def test_missing_file_returns_none(self, tmp_path):
        assert load_quiz_document(tmp_path / "missing.json") is None

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "quiz.json"
        path.write_text("{not json")

        with pytest.raises(QuizDocumentError):
            load_quiz_document(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "quiz.json"
        path.write_text("[]")

        with pytest.raises(QuizDocumentError):
            load_quiz_document(path)

    def test_file_document_provider(self, tmp_path, sample_document):
        path = tmp_path / "quiz.json"
        path.write_text(json.dumps(sample_document))

        provide = file_document_provider(path)

        assert provide() == sample_document
