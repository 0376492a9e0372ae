"""
Service layer helpers that orchestrate the record store and domain logic.
"""

from .availability import AvailabilityService
from .booking import BookingService
from .requests import AvailabilityQuery, BookingRequest
from .schedule import ScheduleService
from .store import RecordStoreProtocol
from .therapists import TherapistService

__all__ = [
    "AvailabilityQuery",
    "AvailabilityService",
    "BookingRequest",
    "BookingService",
    "RecordStoreProtocol",
    "ScheduleService",
    "TherapistService",
]
