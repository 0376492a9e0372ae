"""
Core business logic for matching therapists to catalog windows.

Pure domain logic: callers load the catalog and therapist records and pass
them in, nothing here touches the store.
"""

import logging
from typing import Iterable, List, Sequence

from .models import AnnotatedWindow, Mode, Therapist, TimeWindow

logger = logging.getLogger(__name__)


class AvailabilityMatcher:
    """
    Decides which therapists qualify for a requested window.

    A therapist qualifies only if all four conditions hold:
    1. It supports the requested mode
    2. It has an availability entry for the date
    3. One of that entry's windows covers the requested window
    4. Its expertise shares at least one therapy name with the request
    """

    def qualifies(
        self,
        therapist: Therapist,
        *,
        date: str,
        mode: Mode,
        window: TimeWindow,
        therapy_names: Iterable[str],
    ) -> bool:
        if not therapist.supports(mode):
            return False

        if not therapist.has_entry_for(date):
            return False

        if not any(offered.covers(window, date) for offered in therapist.slots_for(date)):
            return False

        return therapist.has_expertise(therapy_names)

    def find_qualifying(
        self,
        therapists: Iterable[Therapist],
        *,
        date: str,
        mode: Mode,
        window: TimeWindow,
        therapy_names: Sequence[str],
    ) -> List[Therapist]:
        """Return every qualifying therapist, in input order. May be empty."""
        return [
            therapist for therapist in therapists
            if self.qualifies(
                therapist,
                date=date,
                mode=mode,
                window=window,
                therapy_names=therapy_names,
            )
        ]

    def annotate(
        self,
        windows: Sequence[TimeWindow],
        therapists: Sequence[Therapist],
        *,
        date: str,
        mode: Mode,
        therapy_names: Sequence[str],
    ) -> List[AnnotatedWindow]:
        """
        Mark each catalog window with whether any therapist qualifies.

        Order and count follow ``windows``. A malformed window stays in the
        output with ``has_expert=False``.
        """
        annotated: List[AnnotatedWindow] = []

        for window in windows:
            if not window.is_valid():
                logger.warning("Catalog window %s on %s is malformed", window, date)
                annotated.append(AnnotatedWindow(window=window, has_expert=False))
                continue

            has_expert = any(
                self.qualifies(
                    therapist,
                    date=date,
                    mode=mode,
                    window=window,
                    therapy_names=therapy_names,
                )
                for therapist in therapists
            )
            annotated.append(AnnotatedWindow(window=window, has_expert=has_expert))

        return annotated

    def annotate_for_therapist(
        self,
        windows: Sequence[TimeWindow],
        therapist: "Therapist | None",
        *,
        date: str,
        held: Iterable[TimeWindow] = (),
    ) -> List[AnnotatedWindow]:
        """
        Mark catalog windows covered by one therapist's availability.

        Windows in ``held`` (already booked with this therapist) are kept but
        reported as unavailable.
        """
        offered = therapist.slots_for(date) if therapist else []
        held_keys = {window.key() for window in held}

        return [
            AnnotatedWindow(
                window=window,
                has_expert=(
                    window.key() not in held_keys
                    and any(slot.covers(window, date) for slot in offered)
                ),
            )
            for window in windows
        ]
