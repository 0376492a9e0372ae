"""
Explicit request structures for availability queries and bookings.

Each field is named with a documented default; validation happens on
construction so a bad request never reaches the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..domain.exceptions import InvalidRequestError
from ..domain.models import Mode, TimeWindow, validate_date


def clean_names(names: Optional[Sequence[str]]) -> Tuple[str, ...]:
    """Strip names and drop blank ones."""
    if isinstance(names, str):
        names = [names]
    return tuple(name.strip() for name in names or () if name and name.strip())


@dataclass(frozen=True)
class AvailabilityQuery:
    """
    Availability lookup for one date.

    Attributes:
        date: YYYY-MM-DD, required
        mode: delivery mode; None lists the catalog without annotation
        therapy_names: requested therapies by display name; empty lists the
            catalog without annotation
    """
    date: str
    mode: Optional[Mode] = None
    therapy_names: Tuple[str, ...] = ()

    def __post_init__(self):
        validate_date(self.date)
        if self.mode is not None:
            object.__setattr__(self, "mode", Mode.parse(self.mode))
        object.__setattr__(self, "therapy_names", clean_names(self.therapy_names))

    @property
    def browse_only(self) -> bool:
        """True when the catalog is listed without expert annotation."""
        return self.mode is None or not self.therapy_names


@dataclass(frozen=True)
class BookingRequest:
    """
    Everything needed to create a booking and assign a therapist.

    ``therapies`` are therapy ids kept on the booking; ``therapy_names`` are
    the matching keys compared against therapist expertise.
    """
    user_id: str
    profile_id: str
    date: str
    timeslot: TimeWindow
    mode: Mode
    therapy_names: Tuple[str, ...]
    therapies: List[str] = field(default_factory=list)
    amount: float = 0

    def __post_init__(self):
        if not self.user_id or not self.profile_id:
            raise InvalidRequestError("User and profile are required")
        validate_date(self.date)
        if not self.timeslot.is_valid():
            raise InvalidRequestError(f"Timeslot {self.timeslot} is not a valid HH:mm window")
        object.__setattr__(self, "mode", Mode.parse(self.mode))
        names = clean_names(self.therapy_names)
        if not names:
            raise InvalidRequestError("At least one therapy is required")
        object.__setattr__(self, "therapy_names", names)
