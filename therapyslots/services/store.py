"""
The record store contract consumed by the services.

Stores are constructed explicitly and handed to each service, so tests can
pass the in-memory adapter and production code the MongoDB one.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from ..domain.models import Booking, CatalogEntry, Therapist


class RecordStoreProtocol(Protocol):
    """Point lookups by date or id, full therapist scans and whole-document upserts."""

    def connect(self) -> None:
        """Open the underlying connection."""

    def close(self) -> None:
        """Release the underlying connection."""

    def find_catalog_entry(self, date: str) -> Optional[CatalogEntry]:
        """Return the catalog entry for a date, or None."""

    def save_catalog_entry(self, entry: CatalogEntry) -> None:
        """Replace or create the catalog entry for ``entry.date``."""

    def list_therapists(self) -> List[Therapist]:
        """Return every therapist with embedded availability."""

    def get_therapist(self, therapist_id: str) -> Optional[Therapist]:
        """Return one therapist, or None."""

    def save_therapist(self, therapist: Therapist) -> None:
        """Replace or create a therapist document."""

    def save_booking(self, booking: Booking) -> None:
        """Replace or create a booking document."""

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        """Return one booking, or None."""

    def find_bookings(self, date: str, therapist_id: Optional[str] = None) -> List[Booking]:
        """Return bookings for a date, optionally for one therapist."""
