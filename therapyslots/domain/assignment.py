"""
Assignment policy: pick the therapist for a booking.
"""

import random
from typing import Optional, Sequence

from .exceptions import NoQualifyingTherapistError
from .models import Therapist


class AssignmentPolicy:
    """
    Uniform random choice among qualifying therapists.

    Candidates are not weighted by load. Every candidate has the same chance
    on every booking, and two concurrent bookings may land on the same
    therapist.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def choose(self, candidates: Sequence[Therapist]) -> Therapist:
        """
        Pick one candidate.

        Raises:
            NoQualifyingTherapistError: If there are no candidates
        """
        if not candidates:
            raise NoQualifyingTherapistError("No experts available for the selected timeslot")
        return self._rng.choice(list(candidates))
