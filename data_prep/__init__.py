"""
Data preparation: building baseline states from plain mappings, validation.
"""

from .state_builder import (
    build_adjustment,
    build_baseline_state,
    build_income_stream,
    build_settings,
    build_transaction,
    normalize_nth,
    normalize_steps,
    normalize_weekdays,
)
from .validators import ValidationResult, validate_change, validate_state

__all__ = [
    "build_adjustment",
    "build_baseline_state",
    "build_income_stream",
    "build_settings",
    "build_transaction",
    "normalize_nth",
    "normalize_steps",
    "normalize_weekdays",
    "ValidationResult",
    "validate_change",
    "validate_state",
]
