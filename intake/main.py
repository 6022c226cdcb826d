"""
Intake Quiz Tool - Main Entry Point

Command-line interface for checking and previewing the quiz JSON document.

Usage:
    python -m intake.main validate [OPTIONS]
    python -m intake.main transform [OPTIONS]

Options:
    --config TEXT         Path to intake.yml configuration file
    --document TEXT       Path to the quiz JSON document (overrides config)
    --quiz TEXT           Only handle the quiz with this slug
    --verbose             Enable debug logging
    --help                Show this message and exit

Environment:
    INTAKE_CONFIG_PATH    Default for --config
    QUIZ_DOCUMENT_PATH    Default for --document

Examples:
    # Validate every quiz in the configured document:
    python -m intake.main validate

    # Print the canonical configuration of one quiz:
    python -m intake.main transform --quiz weight-loss

Exit Codes:
    0: Success
    1: Validation errors found (or requested quiz not found)
    2: Fatal error (missing document, invalid configuration, etc.)
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from intake.normalizer import transform_all
from intake.quiz_loader import (
    IntakeConfig,
    QuizDocumentError,
    QuizRepository,
    load_intake_config,
    load_quiz_document,
)
from intake.validator import validate_document

# Load environment variables
load_dotenv()

# Configure logging (stderr, so command output on stdout stays valid JSON)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Validate and transform the intake quiz JSON document',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        'command',
        choices=['validate', 'transform'],
        help='validate: report errors and warnings; transform: print canonical quizzes'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=os.getenv('INTAKE_CONFIG_PATH'),
        help='Path to intake.yml configuration file (default: config/intake.yml)'
    )

    parser.add_argument(
        '--document',
        type=str,
        default=os.getenv('QUIZ_DOCUMENT_PATH'),
        help='Path to the quiz JSON document (default: document.path from config)'
    )

    parser.add_argument(
        '--quiz',
        type=str,
        default=None,
        help='Only handle the quiz with this slug'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def run_validate(config: IntakeConfig, quiz_slug: Optional[str] = None) -> int:
    """
    Validate the document and print the results as JSON.

    Returns:
        Exit code (0 = all valid, 1 = errors found, 2 = no document)
    """
    document = load_quiz_document(config.resolved_document_path())
    if document is None:
        logger.error("No quiz document available")
        return 2

    results = validate_document(document)
    if quiz_slug is not None:
        results = {key: result for key, result in results.items() if key == quiz_slug}
        if not results:
            logger.error(f"Quiz not found in document: {quiz_slug}")
            return 1

    invalid = [key for key, result in results.items() if not result.is_valid]
    warnings_count = sum(len(result.warnings) for result in results.values())

    print(json.dumps({key: result.to_dict() for key, result in results.items()}, indent=2))

    logger.info(
        "Validation completed",
        extra={
            'quizzes': len(results),
            'invalid': len(invalid),
            'warnings': warnings_count,
        }
    )

    if invalid:
        logger.warning(f"Invalid quizzes: {', '.join(invalid)}")
        return 1
    return 0


def run_transform(config: IntakeConfig, quiz_slug: Optional[str] = None) -> int:
    """
    Transform the document and print the canonical quizzes as JSON.

    Returns:
        Exit code (0 = success, 1 = requested quiz not found)
    """
    if config.strict_validation:
        repository = QuizRepository.from_config(config)
        quizzes = repository.load()
    else:
        document = load_quiz_document(config.resolved_document_path())
        quizzes = transform_all(document) if document else []

    if quiz_slug is not None:
        quizzes = [quiz for quiz in quizzes if quiz.id == quiz_slug]
        if not quizzes:
            logger.error(f"Quiz not found: {quiz_slug}")
            return 1

    print(json.dumps([quiz.to_dict() for quiz in quizzes], indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the intake quiz tool.

    Returns:
        Exit code (0 = success, 1 = validation failure, 2 = fatal error)
    """
    args = parse_args(argv)

    # Set logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    try:
        config = load_intake_config(args.config)
        if args.document:
            # Command-line and environment paths are relative to the working directory
            config.document_path = str(Path(args.document).resolve())

        if args.command == 'validate':
            return run_validate(config, args.quiz)
        return run_transform(config, args.quiz)

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    except QuizDocumentError as e:
        logger.error(f"Quiz document error: {e}")
        return 2

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # Standard Unix exit code for SIGINT

    except Exception as e:
        logger.error(
            "Unexpected fatal error",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
            },
            exc_info=True
        )
        return 2


if __name__ == '__main__':
    sys.exit(main())
