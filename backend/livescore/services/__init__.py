"""Internal services (pure helpers, no I/O)."""

from .validation import (
    ValidationError,
    validate_period_scores,
    validate_roster_for_sport,
)

__all__ = [
    "ValidationError",
    "validate_period_scores",
    "validate_roster_for_sport",
]
