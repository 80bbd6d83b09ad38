"""
Error taxonomy for the projection and scenario engine.

Every error carries an optional ``change_id`` so that batch application can
report failures per scenario change instead of aborting the whole scenario.
"""

from __future__ import annotations

from typing import Optional


class ProjectionError(Exception):
    """Base class for engine errors."""

    def __init__(self, message: str, *, change_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.change_id = change_id


class ValidationError(ProjectionError, ValueError):
    """Malformed dates, non-finite amounts, inverted ranges, bad payloads."""


class UnresolvedTargetError(ValidationError):
    """A change references a transaction id that does not exist in the state."""

    def __init__(self, target_id: str, *, change_id: Optional[str] = None):
        super().__init__(f"Transaction with ID {target_id} not found.", change_id=change_id)
        self.target_id = target_id


class UnsupportedOperationError(ProjectionError):
    """The requested edit cannot be expressed without approximating it."""


class RangeTooLargeError(ProjectionError, ValueError):
    """Projection window exceeds the configured iteration cap."""

    def __init__(self, days: int, max_days: int):
        super().__init__(
            f"Projection window of {days} days exceeds the limit of {max_days} days."
        )
        self.days = days
        self.max_days = max_days
