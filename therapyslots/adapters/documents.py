"""
Mapping between domain records and stored documents.

Document shape:
    timeslots:  {"date": "2025-06-10", "slots": [{"from": "09:00", "to": "10:00"}]}
    therapists: {"_id": "...", "name": "...", "expertise": [...],
                 "supportedModes": ["ONLINE"],
                 "availability": [{"date": "...", "slots": [...]}]}
    bookings:   {"_id": "...", "date": "...", "timeslot": {"from": ..., "to": ...},
                 "therapistId": "...", "therapistName": "...", "status": "PENDING", ...}
"""

import logging
from typing import Any, Dict, List

from ..domain.models import (
    Booking,
    BookingStatus,
    CatalogEntry,
    Mode,
    RELEASED_STATUSES,
    Therapist,
    TimeWindow,
)

logger = logging.getLogger(__name__)


def date_string(value: Any) -> str:
    """YAML seeds may hold real date objects; the store keys on strings."""
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def window_from_document(doc: Dict[str, Any]) -> TimeWindow:
    """Keep whatever was stored; malformed values are judged later."""
    return TimeWindow(
        start=str(doc.get("from") or ""),
        end=str(doc.get("to") or ""),
    )


def window_to_document(window: TimeWindow) -> Dict[str, str]:
    return {"from": window.start, "to": window.end}


def slots_from_documents(docs: List[Dict[str, Any]]) -> List[TimeWindow]:
    return [window_from_document(doc) for doc in docs or []]


def slots_to_documents(slots: List[TimeWindow]) -> List[Dict[str, str]]:
    return [window_to_document(slot) for slot in slots]


def catalog_from_document(doc: Dict[str, Any]) -> CatalogEntry:
    return CatalogEntry(date=date_string(doc["date"]), slots=slots_from_documents(doc.get("slots")))


def catalog_to_document(entry: CatalogEntry) -> Dict[str, Any]:
    return {"date": entry.date, "slots": slots_to_documents(entry.slots)}


def therapist_from_document(doc: Dict[str, Any]) -> Therapist:
    """
    Build a therapist from its document.

    The availability array becomes a date-keyed mapping; if a date appears
    more than once the first entry wins. Unknown modes are skipped.
    """
    therapist_id = str(doc["_id"])

    modes: List[Mode] = []
    for value in doc.get("supportedModes", [Mode.ONLINE.value]):
        try:
            modes.append(Mode(value))
        except ValueError:
            logger.warning("Skipping unknown mode %r on therapist %s", value, therapist_id)

    availability: Dict[str, List[TimeWindow]] = {}
    for entry in doc.get("availability", []):
        date = date_string(entry.get("date") or "")
        if not date:
            continue
        if date in availability:
            logger.warning("Duplicate availability for %s on therapist %s", date, therapist_id)
            continue
        availability[date] = slots_from_documents(entry.get("slots"))

    return Therapist(
        id=therapist_id,
        name=doc.get("name", ""),
        about=doc.get("about", ""),
        photo=doc.get("photo", ""),
        expertise=list(doc.get("expertise", [])),
        supported_modes=modes,
        availability=availability,
    )


def therapist_to_document(therapist: Therapist) -> Dict[str, Any]:
    return {
        "_id": therapist.id,
        "name": therapist.name,
        "about": therapist.about,
        "photo": therapist.photo,
        "expertise": list(therapist.expertise),
        "supportedModes": [mode.value for mode in therapist.supported_modes],
        "availability": [
            {"date": date, "slots": slots_to_documents(slots)}
            for date, slots in therapist.availability.items()
        ],
    }


def booking_from_document(doc: Dict[str, Any]) -> Booking:
    """
    Build a booking from its document.

    Admin cancellation may set ``isCanceled`` and leave ``status`` alone;
    such a booking is read back as CANCELED.
    """
    status = BookingStatus(doc.get("status", BookingStatus.PENDING.value))
    if doc.get("isCanceled") and status not in RELEASED_STATUSES:
        status = BookingStatus.CANCELED

    return Booking(
        id=str(doc["_id"]),
        user_id=str(doc.get("userId", "")),
        profile_id=str(doc.get("profileId", "")),
        date=date_string(doc["date"]),
        timeslot=window_from_document(doc.get("timeslot", {})),
        mode=Mode(doc.get("mode", Mode.ONLINE.value)),
        therapies=[str(therapy) for therapy in doc.get("therapies", [])],
        therapy_names=list(doc.get("therapyNames", [])),
        therapist_id=str(doc.get("therapistId", "")),
        therapist_name=doc.get("therapistName", ""),
        status=status,
        amount_paid=doc.get("amountPaid", 0),
    )


def booking_to_document(booking: Booking) -> Dict[str, Any]:
    return {
        "_id": booking.id,
        "userId": booking.user_id,
        "profileId": booking.profile_id,
        "date": booking.date,
        "timeslot": window_to_document(booking.timeslot),
        "mode": booking.mode.value,
        "therapies": list(booking.therapies),
        "therapyNames": list(booking.therapy_names),
        "therapistId": booking.therapist_id,
        "therapistName": booking.therapist_name,
        "status": booking.status.value,
        "isCanceled": booking.status is BookingStatus.CANCELED,
        "amountPaid": booking.amount_paid,
    }
