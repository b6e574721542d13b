from datetime import date, datetime

import pytest

from medappointments.functional import (
    compose,
    filter_by_date_range,
    filter_by_doctor,
    filter_by_status,
    format_date,
    format_datetime,
    format_time,
    is_slot_available,
    pipe,
    search,
    sort_by_date,
    stats,
    today,
    unique_doctors,
    unique_specialties,
    upcoming,
)
from medappointments.models import AppointmentStatus as S
from tests.conftest import make_record

NOW = datetime(2024, 1, 1, 9, 0)


@pytest.fixture
def items():
    return [
        make_record(1, datetime(2024, 1, 3, 10, 0), doctor="Smith", status=S.PENDING, patient="Ann Lee"),
        make_record(2, datetime(2024, 1, 1, 14, 0), doctor="Brown", status=S.CONFIRMED, specialty="Dermatology"),
        make_record(3, datetime(2023, 12, 30, 9, 0), doctor="Smith", status=S.COMPLETED),
        make_record(4, datetime(2024, 1, 1, 8, 0), doctor="Wilson", status=S.CANCELLED, specialty="Neurology"),
        make_record(5, datetime(2024, 1, 5, 11, 0), doctor="Brown", status=S.CANCELLED, specialty="Dermatology"),
    ]


def ids(seq):
    return [a.id for a in seq]


class TestFilters:
    def test_status_all_is_identity(self, items):
        result = filter_by_status(items, "all")
        assert result == items
        assert result is not items

    def test_status(self, items):
        assert ids(filter_by_status(items, "cancelled")) == [4, 5]
        assert ids(filter_by_status(items, S.PENDING)) == [1]

    def test_doctor(self, items):
        assert filter_by_doctor(items, "all") == items
        assert ids(filter_by_doctor(items, "Brown")) == [2, 5]
        assert filter_by_doctor(items, "Nobody") == []

    def test_date_range_is_inclusive_by_day(self, items):
        result = filter_by_date_range(items, date(2024, 1, 1), date(2024, 1, 3))
        assert ids(result) == [1, 2, 4]

    def test_date_range_open_bounds(self, items):
        assert ids(filter_by_date_range(items, None, date(2023, 12, 31))) == [3]
        assert ids(filter_by_date_range(items, date(2024, 1, 4), None)) == [5]
        assert filter_by_date_range(items, None, None) == items

    def test_date_range_uses_start_and_end_of_day(self, items):
        # datetime a metà giornata: conta solo il giorno
        result = filter_by_date_range(items, datetime(2024, 1, 1, 23, 0), datetime(2024, 1, 1, 0, 30))
        assert ids(result) == [2, 4]

    def test_search(self, items):
        assert ids(search(items, "ann")) == [1]
        assert ids(search(items, "DERMA")) == [2, 5]
        assert search(items, "") == items

    def test_input_not_mutated(self, items):
        before = list(items)
        filter_by_status(items, "pending")
        sort_by_date(items, "desc")
        upcoming(items, now=NOW)
        assert items == before


class TestSort:
    def test_ascending_and_descending(self, items):
        assert ids(sort_by_date(items)) == [3, 4, 2, 1, 5]
        assert ids(sort_by_date(items, "desc")) == [5, 1, 2, 4, 3]

    def test_idempotent(self, items):
        once = sort_by_date(items)
        assert sort_by_date(once) == once

    def test_stable_for_equal_dates(self):
        when = datetime(2024, 1, 1, 10, 0)
        same = [make_record(i, when) for i in (3, 1, 2)]
        assert ids(sort_by_date(same)) == [3, 1, 2]
        assert ids(sort_by_date(same, "desc")) == [3, 1, 2]

    def test_invalid_order(self, items):
        with pytest.raises(ValueError):
            sort_by_date(items, "sideways")


class TestDerived:
    def test_today(self, items):
        assert ids(today(items, now=NOW)) == [2, 4]

    def test_upcoming_excludes_closed_and_sorts(self, items):
        # 4 è annullato, 5 annullato, 3 passato
        assert ids(upcoming(items, now=NOW)) == [2, 1]

    def test_upcoming_is_strictly_after_now(self):
        exactly_now = make_record(1, NOW)
        assert upcoming([exactly_now], now=NOW) == []

    def test_stats(self, items):
        assert stats(items, now=NOW) == {
            "total": 5,
            "today": 2,
            "pending": 1,
            "confirmed": 1,
            "completed": 1,
            "cancelled": 2,
        }

    def test_stats_empty(self):
        assert stats([], now=NOW)["total"] == 0

    def test_unique_values_keep_first_appearance(self, items):
        assert unique_doctors(items) == ["Smith", "Brown", "Wilson"]
        assert unique_specialties(items) == ["Cardiology", "Dermatology", "Neurology"]


class TestSlotAvailability:
    @pytest.fixture
    def booked(self):
        return [make_record(1, datetime(2024, 1, 1, 10, 0), doctor="X")]

    def test_overlapping_slot_is_taken(self, booked):
        assert not is_slot_available(booked, datetime(2024, 1, 1, 10, 30), "X", 1)

    def test_later_slot_is_free(self, booked):
        assert is_slot_available(booked, datetime(2024, 1, 1, 12, 0), "X", 1)

    def test_other_doctor_is_free(self, booked):
        assert is_slot_available(booked, datetime(2024, 1, 1, 10, 0), "Y", 1)

    def test_same_start_is_taken(self, booked):
        assert not is_slot_available(booked, datetime(2024, 1, 1, 10, 0), "X")

    def test_slot_ending_inside_existing_is_taken(self, booked):
        assert not is_slot_available(booked, datetime(2024, 1, 1, 9, 30), "X")

    def test_slot_containing_existing_is_taken(self, booked):
        assert not is_slot_available(booked, datetime(2024, 1, 1, 9, 0), "X", 3)

    def test_touching_slots_do_not_conflict(self, booked):
        assert is_slot_available(booked, datetime(2024, 1, 1, 11, 0), "X")
        assert is_slot_available(booked, datetime(2024, 1, 1, 9, 0), "X")

    def test_same_hour_with_short_slots_is_free(self):
        booked = [make_record(1, datetime(2024, 1, 1, 10, 0), doctor="X")]
        assert is_slot_available(booked, datetime(2024, 1, 1, 10, 45), "X", 0.25)

    def test_cancelled_appointments_free_the_slot(self):
        booked = [make_record(1, datetime(2024, 1, 1, 10, 0), doctor="X", status=S.CANCELLED)]
        assert is_slot_available(booked, datetime(2024, 1, 1, 10, 0), "X")

    def test_non_positive_duration_rejected(self, booked):
        with pytest.raises(ValueError):
            is_slot_available(booked, datetime(2024, 1, 1, 10, 0), "X", 0)


def test_works_on_api_dicts():
    rows = [
        {"id": 1, "patientName": "A", "doctorName": "Smith", "specialty": "Cardiology",
         "appointmentDate": "2024-01-01T10:00:00", "status": "pending", "notes": None},
        {"id": 2, "patientName": "B", "doctorName": "Brown", "specialty": "Dermatology",
         "appointmentDate": "2023-12-01T10:00:00", "status": "completed", "notes": None},
    ]
    assert [r["id"] for r in sort_by_date(rows)] == [2, 1]
    assert [r["id"] for r in filter_by_status(rows, "pending")] == [1]
    assert not is_slot_available(rows, datetime(2024, 1, 1, 10, 30), "Smith")
    assert unique_doctors(rows) == ["Smith", "Brown"]


def test_pipe_and_compose():
    add1 = lambda x: x + 1  # noqa: E731
    double = lambda x: x * 2  # noqa: E731
    assert pipe(add1, double)(3) == 8
    assert compose(add1, double)(3) == 7
    assert pipe()(3) == 3


def test_formatting():
    when = datetime(2026, 1, 5, 9, 30)
    assert format_date(when) == "Jan 5, 2026"
    assert format_time(when) == "9:30 AM"
    assert format_time(datetime(2026, 1, 5, 0, 15)) == "12:15 AM"
    assert format_time("2026-01-05T13:05:00") == "1:05 PM"
    assert format_datetime(when) == "Jan 5, 2026 at 9:30 AM"
