"""
Date expansion for copy and recurring schedule edits.
"""

from typing import Iterable, List, Sequence

import pendulum
from pendulum import Date

from .exceptions import InvalidRequestError
from .models import DATE_FORMAT, validate_date

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def weekday_name(date: Date) -> str:
    """English weekday name, independent of the active pendulum locale."""
    return date.format("dddd", locale="en")


class RecurrenceExpander:
    """
    Projects one date's slot list onto other dates.

    Recurring edits cover today through the same day ``horizon_years`` later,
    both ends included.
    """

    def __init__(self, horizon_years: int = 1):
        self.horizon_years = horizon_years

    def copy_targets(self, source_date: str, target_dates: Iterable[str]) -> List[str]:
        """
        Validate explicit target dates, dropping duplicates and the source itself.

        Raises:
            InvalidRequestError: If no target is given or a date is malformed
        """
        validate_date(source_date)
        if not target_dates:
            raise InvalidRequestError("Source date and target dates are required")

        targets: List[str] = []
        for target in target_dates:
            validate_date(target)
            if target != source_date and target not in targets:
                targets.append(target)
        return targets

    def recurring_targets(
        self,
        weekday_names: Sequence[str],
        today: Date,
    ) -> List[str]:
        """
        Every date in the horizon whose weekday is one of ``weekday_names``.

        Raises:
            InvalidRequestError: If no weekday is given or a name is not canonical
        """
        wanted = self.validate_weekdays(weekday_names)

        dates: List[str] = []
        current = today
        end = today.add(years=self.horizon_years)

        while current <= end:
            if weekday_name(current) in wanted:
                dates.append(current.format(DATE_FORMAT))
            current = current.add(days=1)

        return dates

    @staticmethod
    def validate_weekdays(weekday_names: Sequence[str]) -> frozenset:
        if not weekday_names:
            raise InvalidRequestError("Source date and recurring days are required")

        unknown = [name for name in weekday_names if name not in WEEKDAY_NAMES]
        if unknown:
            raise InvalidRequestError(
                f"Unknown weekday name(s): {', '.join(unknown)}. "
                f"Use one of {', '.join(WEEKDAY_NAMES)}."
            )
        return frozenset(weekday_names)


def today_in(timezone: str) -> Date:
    """Current calendar date in the configured timezone."""
    return pendulum.now(timezone).date()
