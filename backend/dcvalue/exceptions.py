"""Custom exception hierarchy for the dcvalue engine."""

from __future__ import annotations


class DcValueError(Exception):
    """Base exception for all dcvalue errors."""


class ValidationError(DcValueError, ValueError):
    """Raised for malformed input, e.g. an allocation exceeding capacity.

    No partial mutation is applied when this is raised.
    """


class LastPeriodError(DcValueError):
    """Raised when deleting a building's only remaining use period."""


class NotFoundError(DcValueError):
    """Raised for an unknown building or use-period identifier."""
