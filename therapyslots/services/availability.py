"""
Application service answering availability questions.

The service loads catalog and therapist records through the record store and
delegates the actual matching to the domain-level ``AvailabilityMatcher``.
Every call reads the store afresh; nothing is cached between requests.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..domain.exceptions import InvalidRequestError
from ..domain.matching import AvailabilityMatcher
from ..domain.models import AnnotatedWindow, Mode, Therapist, TimeWindow, validate_date
from .requests import AvailabilityQuery, clean_names
from .store import RecordStoreProtocol

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Resolves bookable catalog windows and the therapists who can take them.
    """

    def __init__(
        self,
        store: RecordStoreProtocol,
        matcher: Optional[AvailabilityMatcher] = None,
    ) -> None:
        self._store = store
        self._matcher = matcher or AvailabilityMatcher()

    def list_catalog_windows(self, date: str) -> List[TimeWindow]:
        """Catalog windows for a date; a date with no entry has no windows."""
        validate_date(date)
        entry = self._store.find_catalog_entry(date)
        return list(entry.slots) if entry else []

    def annotate_availability(self, query: AvailabilityQuery) -> List[AnnotatedWindow]:
        """
        Annotate each catalog window with whether a qualifying expert exists.

        Without a mode or therapy filter the windows are returned as-is with
        ``has_expert=None``.
        """
        windows = self.list_catalog_windows(query.date)

        if query.browse_only:
            return [AnnotatedWindow(window=window) for window in windows]

        if not windows:
            return []

        therapists = self._store.list_therapists()
        logger.debug(
            "Annotating %d window(s) on %s against %d therapist(s)",
            len(windows), query.date, len(therapists),
        )

        return self._matcher.annotate(
            windows,
            therapists,
            date=query.date,
            mode=query.mode,
            therapy_names=query.therapy_names,
        )

    def find_qualifying_therapists(
        self,
        *,
        date: str,
        mode: "str | Mode",
        window: TimeWindow,
        therapy_names: Sequence[str],
    ) -> List[Therapist]:
        """
        Every therapist who qualifies for the window.

        An empty result is not an error here; booking turns it into one.

        Raises:
            InvalidRequestError: If the date, mode, window or therapy names
                are missing or malformed
        """
        validate_date(date)
        mode = Mode.parse(mode)
        if not window.is_valid():
            raise InvalidRequestError(f"Timeslot {window} is not a valid HH:mm window")
        names = clean_names(therapy_names)
        if not names:
            raise InvalidRequestError("At least one therapy is required")

        candidates = self._matcher.find_qualifying(
            self._store.list_therapists(),
            date=date,
            mode=mode,
            window=window,
            therapy_names=names,
        )
        logger.debug("%d therapist(s) qualify for %s %s", len(candidates), date, window)
        return candidates

    def annotate_for_therapist(self, date: str, therapist_id: str) -> List[AnnotatedWindow]:
        """
        Catalog windows annotated against one therapist, as used when an
        admin books or reschedules with a chosen therapist.

        Windows the therapist already has a live booking for are reported
        unavailable.
        """
        windows = self.list_catalog_windows(date)
        therapist = self._store.get_therapist(therapist_id)

        held: List[TimeWindow] = []
        if therapist is not None:
            held = [
                booking.timeslot
                for booking in self._store.find_bookings(date, therapist_id=therapist_id)
                if booking.holds_slot()
            ]
        else:
            logger.info("Therapist %s not found; no window is available", therapist_id)

        return self._matcher.annotate_for_therapist(
            windows, therapist, date=date, held=held,
        )

    def therapist_slots(self, therapist_id: str, date: str) -> List[TimeWindow]:
        """A therapist's own windows for a date; unknown therapist has none."""
        validate_date(date)
        therapist = self._store.get_therapist(therapist_id)
        return therapist.slots_for(date) if therapist else []

    def therapist_month(
        self,
        therapist_id: str,
        year: int,
        month: int,
    ) -> Dict[str, List[TimeWindow]]:
        """A therapist's availability for every authored date in one month."""
        if not 1 <= month <= 12:
            raise InvalidRequestError(f"Month must be between 1 and 12, got {month}")

        therapist = self._store.get_therapist(therapist_id)
        if therapist is None:
            return {}

        prefix = f"{year:04d}-{month:02d}-"
        return {
            date: list(slots)
            for date, slots in therapist.availability.items()
            if date.startswith(prefix)
        }
