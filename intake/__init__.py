"""Intake Quiz Configuration Package.

This package turns the quiz JSON document behind the medical intake forms
into the configuration model consumed by the form renderer:
- common: shared helpers (alias resolution, slug/color checks, duplicates)
- normalizer: transforms raw quizzes into canonical QuizConfig objects
- validator: reports structural errors and advisory warnings
- quiz_loader: document loading, configuration and the quiz cache
"""

__version__ = "0.1.0"
