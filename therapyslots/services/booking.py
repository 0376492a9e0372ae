"""
Application service for creating bookings and moving them through their
status machine.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from ..domain.assignment import AssignmentPolicy
from ..domain.exceptions import (
    BookingNotFoundError,
    ConflictError,
    NoQualifyingTherapistError,
    TherapistNotFoundError,
)
from ..domain.models import Booking, BookingStatus, Therapist
from .availability import AvailabilityService
from .requests import BookingRequest
from .store import RecordStoreProtocol

logger = logging.getLogger(__name__)


class BookingService:
    """
    Assigns a therapist to a booking and persists it.

    The candidate set is computed from availability at the moment of the
    request and the chosen therapist is not re-checked at commit time, nor is
    their availability narrowed afterwards. Two concurrent requests for the
    same window can therefore be assigned the same therapist.
    """

    def __init__(
        self,
        store: RecordStoreProtocol,
        availability: Optional[AvailabilityService] = None,
        policy: Optional[AssignmentPolicy] = None,
    ) -> None:
        self._store = store
        self._availability = availability or AvailabilityService(store)
        self._policy = policy or AssignmentPolicy()

    def create_booking(self, request: BookingRequest) -> Booking:
        """
        Resolve candidates, pick one and store a PENDING booking.

        Raises:
            NoQualifyingTherapistError: If nobody qualifies for the request
        """
        candidates = self._availability.find_qualifying_therapists(
            date=request.date,
            mode=request.mode,
            window=request.timeslot,
            therapy_names=request.therapy_names,
        )
        if not candidates:
            raise NoQualifyingTherapistError(
                f"No experts available on {request.date} at {request.timeslot} "
                f"({request.mode.value}) for {', '.join(request.therapy_names)}"
            )

        therapist = self._policy.choose(candidates)

        booking = self._new_booking(request, therapist)
        self._store.save_booking(booking)

        logger.info(
            "Booking %s on %s %s assigned to therapist %s out of %d candidate(s)",
            booking.id, booking.date, booking.timeslot, therapist.id, len(candidates),
        )
        return booking

    def create_booking_for_therapist(self, request: BookingRequest, therapist_id: str) -> Booking:
        """
        Store an admin booking with a chosen therapist, already PAID.

        The therapist's availability is not consulted, only their existing
        bookings for the same date and window.

        Raises:
            TherapistNotFoundError: If the therapist does not exist
            ConflictError: If the therapist already holds a live booking for
                the window
        """
        therapist = self._store.get_therapist(therapist_id)
        if therapist is None:
            raise TherapistNotFoundError(f"Expert profile {therapist_id} not found")

        for existing in self._store.find_bookings(request.date, therapist_id=therapist_id):
            if existing.holds_slot() and existing.timeslot.key() == request.timeslot.key():
                raise ConflictError(
                    f"Timeslot {request.timeslot} on {request.date} is already booked "
                    f"for therapist {therapist_id}"
                )

        booking = self._new_booking(request, therapist, status=BookingStatus.PAID)
        self._store.save_booking(booking)

        logger.info(
            "Admin booking %s on %s %s for therapist %s",
            booking.id, booking.date, booking.timeslot, therapist.id,
        )
        return booking

    def _new_booking(
        self,
        request: BookingRequest,
        therapist: Therapist,
        status: BookingStatus = BookingStatus.PENDING,
    ) -> Booking:
        return Booking(
            id=uuid.uuid4().hex,
            user_id=request.user_id,
            profile_id=request.profile_id,
            date=request.date,
            timeslot=request.timeslot,
            mode=request.mode,
            therapies=list(request.therapies),
            therapy_names=list(request.therapy_names),
            therapist_id=therapist.id,
            therapist_name=therapist.name,
            status=status,
            amount_paid=request.amount,
        )

    def get_booking(self, booking_id: str) -> Booking:
        booking = self._store.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking

    def mark_paid(self, booking_id: str) -> Booking:
        return self._transition(booking_id, BookingStatus.PAID)

    def mark_failed(self, booking_id: str) -> Booking:
        return self._transition(booking_id, BookingStatus.FAILED)

    def cancel(self, booking_id: str) -> Booking:
        return self._transition(booking_id, BookingStatus.CANCELED)

    def refund(self, booking_id: str) -> Booking:
        return self._transition(booking_id, BookingStatus.REFUNDED)

    def _transition(self, booking_id: str, status: BookingStatus) -> Booking:
        booking = self.get_booking(booking_id)
        previous = booking.status
        booking.transition_to(status)
        self._store.save_booking(booking)
        logger.info("Booking %s moved from %s to %s", booking_id, previous.value, status.value)
        return booking
