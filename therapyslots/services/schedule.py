"""
Application service for editing schedules.

Admins edit the universal catalog and experts edit their own availability.
Both go through the same save, copy and recurring operations; only the
target collection differs. Every write replaces a date's whole slot list.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from pendulum import Date

from ..domain.exceptions import InvalidRequestError, SourceNotFoundError, TherapistNotFoundError
from ..domain.models import CatalogEntry, Therapist, TimeWindow, validate_date
from ..domain.recurrence import RecurrenceExpander, today_in
from .store import RecordStoreProtocol

logger = logging.getLogger(__name__)


def clean_slots(slots: Sequence[TimeWindow], *, require_any: bool) -> List[TimeWindow]:
    """
    Drop entries with a missing end and reject malformed windows.

    Raises:
        InvalidRequestError: If a window is malformed, or nothing is left
            when ``require_any`` is set
    """
    if slots is None:
        raise InvalidRequestError("Date and slots are required")

    kept = [slot for slot in slots if slot and slot.start and slot.end]
    if require_any and not kept:
        raise InvalidRequestError("No valid timeslot entries provided")

    invalid = [str(slot) for slot in kept if not slot.is_valid()]
    if invalid:
        raise InvalidRequestError(f"Invalid timeslot(s): {', '.join(invalid)}")

    return kept


class ScheduleService:
    """
    Writes catalog and therapist availability.

    Failure handling differs by target:
    - Catalog dates are separate documents, written one by one; a failure
      stops the batch and leaves earlier dates written.
    - A therapist's dates live in one document, so a batch is applied in
      memory and saved once.
    """

    def __init__(
        self,
        store: RecordStoreProtocol,
        *,
        expander: Optional[RecurrenceExpander] = None,
        timezone: str = "UTC",
        today: Optional[Callable[[], Date]] = None,
    ) -> None:
        self._store = store
        self._expander = expander or RecurrenceExpander()
        self._today = today or (lambda: today_in(timezone))

    # Universal catalog

    def save_catalog_slots(self, date: str, slots: Sequence[TimeWindow]) -> None:
        validate_date(date)
        entry = CatalogEntry(date=date, slots=clean_slots(slots, require_any=False))
        self._store.save_catalog_entry(entry)
        logger.info("Saved %d catalog slot(s) for %s", len(entry.slots), date)

    def copy_catalog(self, source_date: str, target_dates: Sequence[str]) -> List[str]:
        """Give each target date the source date's catalog slots."""
        targets = self._expander.copy_targets(source_date, target_dates)
        source = self._catalog_source(source_date)
        return self._write_catalog(source, targets)

    def apply_catalog_recurring(
        self,
        source_date: str,
        weekday_names: Sequence[str],
    ) -> List[str]:
        """Give every matching weekday within the next year the source slots."""
        validate_date(source_date)
        targets = self._expander.recurring_targets(weekday_names, self._today())
        source = self._catalog_source(source_date)
        return self._write_catalog(source, targets)

    def _catalog_source(self, source_date: str) -> CatalogEntry:
        source = self._store.find_catalog_entry(source_date)
        if source is None:
            raise SourceNotFoundError(f"No timeslots found for source date {source_date}")
        return source

    def _write_catalog(self, source: CatalogEntry, targets: List[str]) -> List[str]:
        for target in targets:
            self._store.save_catalog_entry(
                CatalogEntry(date=target, slots=list(source.slots))
            )
        logger.info(
            "Copied %d catalog slot(s) from %s to %d date(s)",
            len(source.slots), source.date, len(targets),
        )
        return targets

    # Therapist availability

    def save_therapist_slots(
        self,
        therapist_id: str,
        date: str,
        slots: Sequence[TimeWindow],
    ) -> None:
        validate_date(date)
        cleaned = clean_slots(slots, require_any=True)
        therapist = self._therapist(therapist_id)
        therapist.set_slots(date, cleaned)
        self._store.save_therapist(therapist)
        logger.info("Saved %d slot(s) for therapist %s on %s", len(cleaned), therapist_id, date)

    def copy_therapist_slots(
        self,
        therapist_id: str,
        source_date: str,
        target_dates: Sequence[str],
    ) -> List[str]:
        targets = self._expander.copy_targets(source_date, target_dates)
        therapist = self._therapist(therapist_id)
        return self._write_therapist(therapist, source_date, targets)

    def apply_therapist_recurring(
        self,
        therapist_id: str,
        source_date: str,
        weekday_names: Sequence[str],
    ) -> List[str]:
        validate_date(source_date)
        targets = self._expander.recurring_targets(weekday_names, self._today())
        therapist = self._therapist(therapist_id)
        return self._write_therapist(therapist, source_date, targets)

    def _therapist(self, therapist_id: str) -> Therapist:
        therapist = self._store.get_therapist(therapist_id)
        if therapist is None:
            raise TherapistNotFoundError(f"Expert profile {therapist_id} not found")
        return therapist

    def _write_therapist(
        self,
        therapist: Therapist,
        source_date: str,
        targets: List[str],
    ) -> List[str]:
        if not therapist.has_entry_for(source_date):
            raise SourceNotFoundError(f"No availability found for source date {source_date}")

        source_slots = therapist.slots_for(source_date)
        for target in targets:
            therapist.set_slots(target, list(source_slots))

        self._store.save_therapist(therapist)
        logger.info(
            "Copied %d slot(s) for therapist %s from %s to %d date(s)",
            len(source_slots), therapist.id, source_date, len(targets),
        )
        return targets
