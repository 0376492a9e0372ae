"""
Tests for the AvailabilityService orchestration layer.
"""

from unittest.mock import MagicMock

import pytest

from therapyslots.adapters.memory_store import MemoryStore
from therapyslots.domain.exceptions import InvalidRequestError
from therapyslots.domain.models import (
    Booking,
    BookingStatus,
    CatalogEntry,
    Mode,
)
from therapyslots.services.availability import AvailabilityService
from therapyslots.services.requests import AvailabilityQuery

from conftest import DATE, make_therapist, window


def _booking(booking_id, slot, status=BookingStatus.PAID, therapist_id="x"):
    return Booking(
        id=booking_id,
        user_id="u1",
        profile_id="p1",
        date=DATE,
        timeslot=slot,
        mode=Mode.ONLINE,
        therapies=[],
        therapy_names=["Speech Therapy"],
        therapist_id=therapist_id,
        therapist_name="Therapist X",
        status=status,
    )


class TestCatalogListing:
    def test_missing_date_is_empty(self, store):
        assert AvailabilityService(store).list_catalog_windows("2030-01-01") == []

    def test_lists_stored_windows(self, catalog_store):
        windows = AvailabilityService(catalog_store).list_catalog_windows(DATE)

        assert windows == [window("09:00", "10:00"), window("10:00", "11:00")]

    def test_missing_date_is_rejected_before_lookup(self, store):
        with pytest.raises(InvalidRequestError, match="Date is required"):
            AvailabilityService(store).list_catalog_windows("")


class TestAnnotateAvailability:
    def test_scenario_matching_online_speech_therapy(self, catalog_store):
        annotated = AvailabilityService(catalog_store).annotate_availability(
            AvailabilityQuery(date=DATE, mode=Mode.ONLINE, therapy_names=("Speech Therapy",))
        )

        assert [(str(a.window), a.has_expert) for a in annotated] == [
            ("09:00 - 10:00", True),
            ("10:00 - 11:00", True),
        ]

    def test_scenario_offline_request_has_no_expert(self, catalog_store):
        annotated = AvailabilityService(catalog_store).annotate_availability(
            AvailabilityQuery(date=DATE, mode="OFFLINE", therapy_names=("Speech Therapy",))
        )

        assert [a.has_expert for a in annotated] == [False, False]

    def test_browse_only_without_filters(self, catalog_store):
        annotated = AvailabilityService(catalog_store).annotate_availability(
            AvailabilityQuery(date=DATE)
        )

        assert len(annotated) == 2
        assert all(a.has_expert is None for a in annotated)

    def test_browse_only_when_therapies_missing(self, catalog_store):
        annotated = AvailabilityService(catalog_store).annotate_availability(
            AvailabilityQuery(date=DATE, mode=Mode.ONLINE)
        )

        assert all(a.has_expert is None for a in annotated)

    def test_missing_catalog_is_empty(self, catalog_store):
        annotated = AvailabilityService(catalog_store).annotate_availability(
            AvailabilityQuery(date="2025-06-11", mode=Mode.ONLINE, therapy_names=("Speech Therapy",))
        )

        assert annotated == []

    def test_bookings_do_not_narrow_availability(self, catalog_store):
        catalog_store.save_booking(_booking("b1", window("09:00", "10:00")))

        annotated = AvailabilityService(catalog_store).annotate_availability(
            AvailabilityQuery(date=DATE, mode=Mode.ONLINE, therapy_names=("Speech Therapy",))
        )

        assert [a.has_expert for a in annotated] == [True, True]

    def test_malformed_stored_window_is_annotated_false(self, store):
        store.save_catalog_entry(
            CatalogEntry(date=DATE, slots=[window("09:00", "10:00"), window("bad", "10:00")])
        )
        store.save_therapist(make_therapist("x", slots=[window("00:00", "23:59")]))

        annotated = AvailabilityService(store).annotate_availability(
            AvailabilityQuery(date=DATE, mode=Mode.ONLINE, therapy_names=("Speech Therapy",))
        )

        assert [a.has_expert for a in annotated] == [True, False]

    def test_bad_mode_is_rejected(self):
        with pytest.raises(InvalidRequestError):
            AvailabilityQuery(date=DATE, mode="PHONE", therapy_names=("Speech Therapy",))


class TestFindQualifyingTherapists:
    def test_scenario_short_window_is_excluded(self, catalog_store):
        catalog_store.save_therapist(make_therapist("y", slots=[window("09:00", "09:30")]))

        candidates = AvailabilityService(catalog_store).find_qualifying_therapists(
            date=DATE,
            mode=Mode.ONLINE,
            window=window("09:00", "10:00"),
            therapy_names=["Speech Therapy"],
        )

        assert [t.id for t in candidates] == ["x"]

    def test_none_qualify_is_empty_not_error(self, catalog_store):
        candidates = AvailabilityService(catalog_store).find_qualifying_therapists(
            date=DATE,
            mode=Mode.ONLINE,
            window=window("16:00", "17:00"),
            therapy_names=["Speech Therapy"],
        )

        assert candidates == []


class TestTherapistViews:
    def test_annotate_for_therapist_masks_live_bookings(self, catalog_store):
        catalog_store.save_booking(_booking("b1", window("09:00", "10:00")))
        catalog_store.save_booking(
            _booking("b2", window("10:00", "11:00"), status=BookingStatus.CANCELED)
        )

        annotated = AvailabilityService(catalog_store).annotate_for_therapist(DATE, "x")

        assert [a.has_expert for a in annotated] == [False, True]

    def test_annotate_for_therapist_ignores_other_therapists_bookings(self, catalog_store):
        catalog_store.save_booking(_booking("b1", window("09:00", "10:00"), therapist_id="z"))

        annotated = AvailabilityService(catalog_store).annotate_for_therapist(DATE, "x")

        assert [a.has_expert for a in annotated] == [True, True]

    def test_annotate_for_unknown_therapist(self, catalog_store):
        annotated = AvailabilityService(catalog_store).annotate_for_therapist(DATE, "nobody")

        assert [a.has_expert for a in annotated] == [False, False]

    def test_therapist_slots(self, catalog_store):
        service = AvailabilityService(catalog_store)

        assert service.therapist_slots("x", DATE) == [window("09:00", "11:00")]
        assert service.therapist_slots("x", "2025-06-11") == []
        assert service.therapist_slots("nobody", DATE) == []

    def test_therapist_month(self, store):
        therapist = make_therapist("x", slots=[window("09:00", "10:00")])
        therapist.set_slots("2025-06-30", [window("10:00", "11:00")])
        therapist.set_slots("2025-07-01", [window("11:00", "12:00")])
        store.save_therapist(therapist)

        month = AvailabilityService(store).therapist_month("x", 2025, 6)

        assert month == {
            DATE: [window("09:00", "10:00")],
            "2025-06-30": [window("10:00", "11:00")],
        }

    def test_therapist_month_unknown_therapist(self, store):
        assert AvailabilityService(store).therapist_month("nobody", 2025, 6) == {}

    def test_therapist_month_rejects_bad_month(self, store):
        with pytest.raises(InvalidRequestError, match="Month"):
            AvailabilityService(store).therapist_month("x", 2025, 13)


class TestResolverInputValidation:
    @pytest.mark.parametrize(
        "slot",
        [window("10:00", "09:00"), window("09:00", "09:00"), window("9am", "10:00")],
    )
    def test_invalid_window_is_rejected(self, catalog_store, slot):
        with pytest.raises(InvalidRequestError, match="not a valid HH:mm window"):
            AvailabilityService(catalog_store).find_qualifying_therapists(
                date=DATE,
                mode="ONLINE",
                window=slot,
                therapy_names=["Speech Therapy"],
            )

    @pytest.mark.parametrize("names", [[], ["", "  "], None])
    def test_missing_therapies_are_rejected(self, catalog_store, names):
        with pytest.raises(InvalidRequestError, match="At least one therapy"):
            AvailabilityService(catalog_store).find_qualifying_therapists(
                date=DATE,
                mode=Mode.ONLINE,
                window=window("09:00", "10:00"),
                therapy_names=names,
            )

    def test_rejected_before_any_lookup(self):
        store = MagicMock()

        with pytest.raises(InvalidRequestError):
            AvailabilityService(store).find_qualifying_therapists(
                date=DATE,
                mode=Mode.ONLINE,
                window=window("10:00", "09:00"),
                therapy_names=["Speech Therapy"],
            )
        store.list_therapists.assert_not_called()

    def test_mode_string_is_accepted(self, catalog_store):
        candidates = AvailabilityService(catalog_store).find_qualifying_therapists(
            date=DATE,
            mode="online",
            window=window("09:00", "10:00"),
            therapy_names=["Speech Therapy"],
        )

        assert [t.id for t in candidates] == ["x"]


def test_admin_canceled_booking_releases_slot(tmp_path):
    seed = tmp_path / "seed.yaml"
    seed.write_text(
        """
timeslots:
  - date: "2025-06-10"
    slots:
      - {from: "09:00", to: "10:00"}
      - {from: "10:00", to: "11:00"}
therapists:
  - _id: x
    name: Therapist X
    expertise: [Speech Therapy]
    availability:
      - date: "2025-06-10"
        slots: [{from: "09:00", to: "11:00"}]
bookings:
  - _id: b1
    date: "2025-06-10"
    timeslot: {from: "09:00", to: "10:00"}
    therapistId: x
    status: PAID
    isCanceled: true
""",
        encoding="utf-8",
    )

    with MemoryStore(seed_file=seed) as store:
        annotated = AvailabilityService(store).annotate_for_therapist(DATE, "x")

    assert [a.has_expert for a in annotated] == [True, True]


@pytest.mark.parametrize(
    "status, expected",
    [
        (BookingStatus.PENDING, [False, True]),
        (BookingStatus.PAID, [False, True]),
        (BookingStatus.FAILED, [True, True]),
        (BookingStatus.REFUNDED, [True, True]),
    ],
)
def test_released_statuses_free_the_slot(catalog_store, status, expected):
    catalog_store.save_booking(_booking("b1", window("09:00", "10:00"), status=status))

    annotated = AvailabilityService(catalog_store).annotate_for_therapist(DATE, "x")

    assert [a.has_expert for a in annotated] == expected
