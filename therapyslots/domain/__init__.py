"""
Domain layer - Pure business logic without external dependencies.
"""

from .assignment import AssignmentPolicy
from .matching import AvailabilityMatcher
from .models import (
    AnnotatedWindow,
    Booking,
    BookingStatus,
    CatalogEntry,
    Mode,
    Therapist,
    TimeWindow,
    covers,
)
from .recurrence import WEEKDAY_NAMES, RecurrenceExpander

__all__ = [
    "AnnotatedWindow",
    "AssignmentPolicy",
    "AvailabilityMatcher",
    "Booking",
    "BookingStatus",
    "CatalogEntry",
    "Mode",
    "RecurrenceExpander",
    "Therapist",
    "TimeWindow",
    "WEEKDAY_NAMES",
    "covers",
]
