"""
In-memory record store, optionally seeded from a YAML file.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..domain.exceptions import StoreError
from ..domain.models import Booking, CatalogEntry, Therapist
from . import documents

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    Store that keeps documents in dictionaries.

    Records are encoded on write and decoded on every read, so callers never
    share mutable state with the store, the same as with a real database.

    Seed file layout:

        timeslots:
          - date: "2025-06-10"
            slots: [{from: "09:00", to: "10:00"}]
        therapists:
          - _id: "t1"
            name: "Asha"
            expertise: ["Speech Therapy"]
            supportedModes: ["ONLINE"]
            availability: [{date: "2025-06-10", slots: [{from: "09:00", to: "11:00"}]}]
        bookings: []
    """

    def __init__(self, seed_file: Optional[Path] = None):
        self.seed_file = seed_file
        self._timeslots: Dict[str, Dict[str, Any]] = {}
        self._therapists: Dict[str, Dict[str, Any]] = {}
        self._bookings: Dict[str, Dict[str, Any]] = {}
        self._connected = False

    def connect(self) -> None:
        if self._connected:
            return
        if self.seed_file is not None:
            self._load_seed(self.seed_file)
        self._connected = True

    def close(self) -> None:
        self._connected = False

    def __enter__(self) -> "MemoryStore":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _load_seed(self, seed_file: Path) -> None:
        """Load documents from the YAML seed file."""
        if not seed_file.exists():
            raise StoreError(f"Seed file not found: {seed_file}")

        try:
            with open(seed_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise StoreError(f"Invalid YAML in {seed_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise StoreError("Seed file must contain a mapping at the root level.")

        for doc in data.get("timeslots", []):
            self._timeslots[documents.date_string(doc["date"])] = copy.deepcopy(doc)
        for doc in data.get("therapists", []):
            self._therapists[str(doc["_id"])] = copy.deepcopy(doc)
        for doc in data.get("bookings", []):
            self._bookings[str(doc["_id"])] = copy.deepcopy(doc)

        logger.info(
            "Seeded %d catalog date(s), %d therapist(s), %d booking(s) from %s",
            len(self._timeslots), len(self._therapists), len(self._bookings), seed_file,
        )

    # Catalog

    def find_catalog_entry(self, date: str) -> Optional[CatalogEntry]:
        doc = self._timeslots.get(date)
        return documents.catalog_from_document(doc) if doc else None

    def save_catalog_entry(self, entry: CatalogEntry) -> None:
        self._timeslots[entry.date] = documents.catalog_to_document(entry)

    # Therapists

    def list_therapists(self) -> List[Therapist]:
        return [documents.therapist_from_document(doc) for doc in self._therapists.values()]

    def get_therapist(self, therapist_id: str) -> Optional[Therapist]:
        doc = self._therapists.get(therapist_id)
        return documents.therapist_from_document(doc) if doc else None

    def save_therapist(self, therapist: Therapist) -> None:
        self._therapists[therapist.id] = documents.therapist_to_document(therapist)

    # Bookings

    def save_booking(self, booking: Booking) -> None:
        self._bookings[booking.id] = documents.booking_to_document(booking)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        doc = self._bookings.get(booking_id)
        return documents.booking_from_document(doc) if doc else None

    def find_bookings(self, date: str, therapist_id: Optional[str] = None) -> List[Booking]:
        return [
            documents.booking_from_document(doc)
            for doc in self._bookings.values()
            if documents.date_string(doc["date"]) == date
            and (therapist_id is None or str(doc.get("therapistId")) == therapist_id)
        ]
