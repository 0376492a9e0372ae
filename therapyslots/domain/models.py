"""
Domain models for time windows, schedules, therapists and bookings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import pendulum
from pendulum import DateTime

from .exceptions import InvalidRequestError, InvalidTransitionError

DATE_FORMAT = "YYYY-MM-DD"
TIME_FORMAT = "HH:mm"

# Any fixed day works for comparing two times of the same day.
_ANCHOR_DATE = "2000-01-03"


def parse_instant(date: str, time_of_day: str) -> DateTime:
    """
    Combine a calendar date and a wall-clock time into one comparable instant.

    Raises:
        ValueError: If either part does not parse
    """
    try:
        return pendulum.from_format(
            f"{date} {time_of_day}", f"{DATE_FORMAT} {TIME_FORMAT}", tz="UTC"
        )
    except TypeError as exc:
        raise ValueError(f"Could not parse '{date} {time_of_day}': {exc}") from exc


def validate_date(value: str) -> str:
    """Ensure a date string is YYYY-MM-DD, returning it unchanged."""
    if not value:
        raise InvalidRequestError("Date is required")
    try:
        pendulum.from_format(value, DATE_FORMAT)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f"Date must be YYYY-MM-DD, got '{value}'") from exc
    return value


class Mode(str, Enum):
    """Delivery channel for a session."""
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"

    @classmethod
    def parse(cls, value: "str | Mode") -> "Mode":
        """Parse a mode case-insensitively."""
        if isinstance(value, Mode):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise InvalidRequestError(
                f"Mode must be one of ONLINE, OFFLINE; got '{value}'"
            ) from exc


@dataclass(frozen=True)
class TimeWindow:
    """
    A wall-clock window within one day, kept as the authored HH:mm strings.

    Unlike a validated range, a window may hold malformed values read back
    from storage; ``is_valid`` tells them apart and ``covers`` fails closed.
    """
    start: str
    end: str

    def is_valid(self) -> bool:
        """Both ends parse as HH:mm and the window is not empty."""
        try:
            return parse_instant(_ANCHOR_DATE, self.start) < parse_instant(_ANCHOR_DATE, self.end)
        except ValueError:
            return False

    def covers(self, other: "TimeWindow", date: str) -> bool:
        """Check if this window fully contains another on the given date."""
        return covers(self, other, date)

    def key(self) -> str:
        return f"{self.start}-{self.end}"

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


def covers(outer: TimeWindow, inner: TimeWindow, date: str) -> bool:
    """
    Full containment: outer starts no later and ends no earlier than inner.

    Returns False instead of raising when any of the four times is unparsable.
    """
    try:
        outer_start = parse_instant(date, outer.start)
        outer_end = parse_instant(date, outer.end)
        inner_start = parse_instant(date, inner.start)
        inner_end = parse_instant(date, inner.end)
    except ValueError:
        return False

    return outer_start <= inner_start and outer_end >= inner_end


@dataclass
class CatalogEntry:
    """Admin-curated bookable windows for one date."""
    date: str
    slots: List[TimeWindow] = field(default_factory=list)


@dataclass
class AnnotatedWindow:
    """
    A catalog window with its expert annotation.

    ``has_expert`` is None when the window was listed without a mode or
    therapy filter.
    """
    window: TimeWindow
    has_expert: Optional[bool] = None


@dataclass
class Therapist:
    """
    A therapist with static attributes and per-date availability.

    Availability is keyed by date string; insertion order follows the
    persisted array.
    """
    id: str
    name: str = ""
    about: str = ""
    photo: str = ""
    expertise: List[str] = field(default_factory=list)
    supported_modes: List[Mode] = field(default_factory=lambda: [Mode.ONLINE])
    availability: Dict[str, List[TimeWindow]] = field(default_factory=dict)

    def supports(self, mode: Mode) -> bool:
        return mode in self.supported_modes

    def has_expertise(self, therapy_names: Iterable[str]) -> bool:
        """Match on therapy display names, not ids."""
        return not set(self.expertise).isdisjoint(therapy_names)

    def slots_for(self, date: str) -> List[TimeWindow]:
        return list(self.availability.get(date, []))

    def has_entry_for(self, date: str) -> bool:
        return date in self.availability

    def set_slots(self, date: str, slots: Sequence[TimeWindow]) -> None:
        """Replace (or create) the slot list for a date."""
        self.availability[date] = list(slots)


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    REFUNDED = "REFUNDED"


ALLOWED_TRANSITIONS: Dict[BookingStatus, frozenset] = {
    BookingStatus.PENDING: frozenset({BookingStatus.PAID, BookingStatus.FAILED}),
    BookingStatus.PAID: frozenset({BookingStatus.CANCELED, BookingStatus.REFUNDED}),
    BookingStatus.FAILED: frozenset(),
    BookingStatus.CANCELED: frozenset(),
    BookingStatus.REFUNDED: frozenset(),
}

# Bookings in these states no longer hold their timeslot.
RELEASED_STATUSES = frozenset(
    {BookingStatus.FAILED, BookingStatus.CANCELED, BookingStatus.REFUNDED}
)


@dataclass
class Booking:
    """
    A booked session. Therapist id and name are copied in at creation time
    and never re-derived from the therapist record.
    """
    id: str
    user_id: str
    profile_id: str
    date: str
    timeslot: TimeWindow
    mode: Mode
    therapies: List[str]
    therapy_names: List[str]
    therapist_id: str
    therapist_name: str
    status: BookingStatus = BookingStatus.PENDING
    amount_paid: float = 0

    def holds_slot(self) -> bool:
        return self.status not in RELEASED_STATUSES

    def transition_to(self, status: BookingStatus) -> None:
        """
        Move to a new status.

        Raises:
            InvalidTransitionError: If the status machine forbids the move
        """
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Booking {self.id} cannot move from {self.status.value} to {status.value}"
            )
        self.status = status
