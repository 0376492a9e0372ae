"""
Domain-specific exception hierarchy for the therapyslots package.
"""


class TherapySlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidRequestError(TherapySlotsError, ValueError):
    """Raised when request input is missing or malformed; fixable by the caller."""


class NoQualifyingTherapistError(TherapySlotsError):
    """Raised when a booking needs an assignee but no therapist qualifies."""


class SourceNotFoundError(TherapySlotsError):
    """Raised when a copy or recurrence source date has no slots to copy."""


class TherapistNotFoundError(TherapySlotsError):
    """Raised when a therapist id does not resolve to a record."""


class BookingNotFoundError(TherapySlotsError):
    """Raised when a booking id does not resolve to a record."""


class ConflictError(TherapySlotsError):
    """Raised when a write would duplicate an existing profile or booking."""


class InvalidTransitionError(TherapySlotsError):
    """Raised when a booking status change is not allowed."""


class StoreError(TherapySlotsError):
    """Raised when the record store cannot be reached or rejects an operation."""
