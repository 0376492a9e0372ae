"""
Application service for therapist profiles.

Profiles carry the static half of qualification (expertise and supported
modes); availability is edited through ``ScheduleService``.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Sequence

from ..domain.exceptions import ConflictError, InvalidRequestError, TherapistNotFoundError
from ..domain.models import Mode, Therapist
from .requests import clean_names
from .store import RecordStoreProtocol

logger = logging.getLogger(__name__)


def _expertise(values: Sequence[str]) -> List[str]:
    if isinstance(values, str) or values is None:
        raise InvalidRequestError("Expertise must be a list of therapy names")
    return list(dict.fromkeys(clean_names(values)))


def _modes(values: Sequence["str | Mode"]) -> List[Mode]:
    if isinstance(values, str):
        values = [values]
    modes = list(dict.fromkeys(Mode.parse(value) for value in values or ()))
    if not modes:
        raise InvalidRequestError("At least one supported mode is required")
    return modes


class TherapistService:
    """
    Creates and edits therapist profiles.

    Updates are partial: a field left as None keeps its stored value.
    Availability is never touched here.
    """

    def __init__(self, store: RecordStoreProtocol) -> None:
        self._store = store

    def get_therapist(self, therapist_id: str) -> Therapist:
        therapist = self._store.get_therapist(therapist_id)
        if therapist is None:
            raise TherapistNotFoundError(f"Expert profile {therapist_id} not found")
        return therapist

    def create_therapist(
        self,
        *,
        name: str,
        expertise: Sequence[str],
        about: str = "",
        photo: str = "",
        supported_modes: Optional[Sequence["str | Mode"]] = None,
        therapist_id: Optional[str] = None,
    ) -> Therapist:
        """
        Store a new profile with no availability.

        Raises:
            InvalidRequestError: If the name is blank, expertise is not a
                list or a mode is unknown
            ConflictError: If ``therapist_id`` is already taken
        """
        if not name or not name.strip():
            raise InvalidRequestError("Therapist name is required")

        therapist_id = therapist_id or uuid.uuid4().hex
        if self._store.get_therapist(therapist_id) is not None:
            raise ConflictError(f"Expert profile {therapist_id} already exists")

        therapist = Therapist(
            id=therapist_id,
            name=name.strip(),
            about=about or "",
            photo=photo or "",
            expertise=_expertise(expertise),
            supported_modes=_modes(supported_modes or [Mode.ONLINE]),
        )
        self._store.save_therapist(therapist)
        logger.info("Created therapist %s (%s)", therapist.id, therapist.name)
        return therapist

    def update_therapist(
        self,
        therapist_id: str,
        *,
        name: Optional[str] = None,
        expertise: Optional[Sequence[str]] = None,
        about: Optional[str] = None,
        photo: Optional[str] = None,
        supported_modes: Optional[Sequence["str | Mode"]] = None,
    ) -> Therapist:
        """
        Change profile fields, keeping existing availability.

        Raises:
            TherapistNotFoundError: If the therapist does not exist
            InvalidRequestError: If a given field is invalid
        """
        therapist = self.get_therapist(therapist_id)

        if name is not None:
            if not name.strip():
                raise InvalidRequestError("Therapist name cannot be blank")
            therapist.name = name.strip()
        if expertise is not None:
            therapist.expertise = _expertise(expertise)
        if about is not None:
            therapist.about = about
        if photo is not None:
            therapist.photo = photo
        if supported_modes is not None:
            therapist.supported_modes = _modes(supported_modes)

        self._store.save_therapist(therapist)
        logger.info("Updated therapist %s", therapist.id)
        return therapist
