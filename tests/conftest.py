"""
Shared fixtures: an in-memory store with the June 10th catalog.
"""

from typing import List, Sequence

import pytest

from therapyslots.adapters.memory_store import MemoryStore
from therapyslots.domain.models import CatalogEntry, Mode, Therapist, TimeWindow

DATE = "2025-06-10"


def window(start: str, end: str) -> TimeWindow:
    return TimeWindow(start=start, end=end)


def make_therapist(
    therapist_id: str,
    *,
    modes: Sequence[Mode] = (Mode.ONLINE,),
    expertise: Sequence[str] = ("Speech Therapy",),
    slots: List[TimeWindow] = None,
    date: str = DATE,
    name: str = "",
) -> Therapist:
    therapist = Therapist(
        id=therapist_id,
        name=name or f"Therapist {therapist_id}",
        expertise=list(expertise),
        supported_modes=list(modes),
    )
    if slots is not None:
        therapist.set_slots(date, slots)
    return therapist


@pytest.fixture
def store() -> MemoryStore:
    memory_store = MemoryStore()
    memory_store.connect()
    yield memory_store
    memory_store.close()


@pytest.fixture
def catalog_store(store: MemoryStore) -> MemoryStore:
    """Catalog 09-10 and 10-11 on June 10th, therapist X online 09-11."""
    store.save_catalog_entry(
        CatalogEntry(date=DATE, slots=[window("09:00", "10:00"), window("10:00", "11:00")])
    )
    store.save_therapist(
        make_therapist("x", name="Therapist X", slots=[window("09:00", "11:00")])
    )
    return store
