"""
Configuration Loader for the Quiz Loader

This module loads and validates the loader settings from config/intake.yml.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


def _project_root() -> Path:
    """Return the project root path based on this file's location."""
    return Path(__file__).resolve().parent.parent.parent


@dataclass
class IntakeConfig:
    """Settings for loading the quiz document."""

    document_path: str = 'data/quiz.json'
    strict_validation: bool = True
    log_validation_warnings: bool = True

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "IntakeConfig":
        """Create IntakeConfig from dictionary."""
        document_dict = config_dict.get("document") or {}
        loader_dict = config_dict.get("loader") or {}

        document_path = document_dict.get("path", "data/quiz.json")
        if not isinstance(document_path, str) or not document_path.strip():
            raise ValueError("`document.path` must be a non-empty string")

        return cls(
            document_path=document_path,
            strict_validation=bool(loader_dict.get("strict_validation", True)),
            log_validation_warnings=bool(loader_dict.get("log_validation_warnings", True)),
        )

    def resolved_document_path(self) -> Path:
        """Return the document path, relative paths taken from the project root."""
        path = Path(self.document_path)
        return path if path.is_absolute() else _project_root() / path


def load_intake_config(config_path: Optional[str] = None) -> IntakeConfig:
    """
    Load the loader configuration from a YAML file.

    Args:
        config_path: Path to intake.yml. If None, uses config/intake.yml
            relative to the project root.

    Returns:
        IntakeConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid

    Example:
        >>> config = load_intake_config('config/intake.yml')
        >>> config.strict_validation
        True
    """
    if config_path is None:
        config_path = str(_project_root() / "config" / "intake.yml")

    logger.info("Loading intake configuration", extra={'config_path': config_path})

    try:
        with open(config_path, encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if not config_dict:
            logger.warning("Empty configuration file, using defaults")
            config_dict = {}

        if not isinstance(config_dict, dict):
            raise ValueError("Configuration root must be a mapping")

        config = IntakeConfig.from_dict(config_dict)

        logger.info(
            "Intake configuration loaded successfully",
            extra={
                'document_path': config.document_path,
                'strict_validation': config.strict_validation,
            }
        )

        return config

    except FileNotFoundError:
        logger.error(f"Configuration file not found: {config_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except ValueError:
        raise
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise ValueError(f"Failed to load configuration: {e}") from e


__all__ = ["IntakeConfig", "load_intake_config"]
