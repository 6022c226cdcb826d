"""Intake Quiz Configuration Test Suite.

Test Structure:
- unit/: Unit tests for the normalizer, validator and quiz loader
- integration/: End-to-end tests over the bundled quiz document
"""

__version__ = "0.1.0"
