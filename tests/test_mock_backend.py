"""Tests for the mock scheduling backend rules."""

from __future__ import annotations

import pytest

from scheduling_agent.backend import mock
from scheduling_agent.errors import BackendValidationError


class TestValidation:
    @pytest.mark.parametrize("value", ["2024-01-15", "2024-02-29"])
    def test_valid_dates(self, value):
        assert mock.is_valid_date(value)

    @pytest.mark.parametrize("value", ["2023-02-29", "2024-1-15", "15/01/2024", "2024-13-01", ""])
    def test_invalid_dates(self, value):
        assert not mock.is_valid_date(value)

    @pytest.mark.parametrize(("value", "ok"), [("09:00", True), ("23:59", True), ("9:00", False), ("24:00", False)])
    def test_times(self, value, ok):
        assert mock.is_valid_time(value) is ok


class TestGenerateSlots:
    @pytest.mark.parametrize(
        ("appointment_type", "count", "last_end"),
        [
            ("followup", 32, "17:00"),
            ("consultation", 16, "17:00"),
            ("physical", 10, "16:30"),
            ("specialist", 8, "17:00"),
        ],
    )
    def test_slots_fill_working_day(self, appointment_type, count, last_end):
        slots = mock.generate_slots("2024-01-15", appointment_type)
        assert len(slots) == count
        assert slots[0]["start_time"] == "09:00"
        assert slots[-1]["end_time"] == last_end

    def test_slots_are_contiguous(self):
        slots = mock.generate_slots("2024-01-15", "consultation")
        for prev, nxt in zip(slots, slots[1:]):
            assert prev["end_time"] == nxt["start_time"]

    def test_availability_is_deterministic(self):
        assert mock.generate_slots("2024-03-01", "physical") == mock.generate_slots("2024-03-01", "physical")

    def test_availability_pattern_matches_hash(self):
        slots = mock.generate_slots("2024-01-15", "followup")
        expected = [mock._slot_hash(f"2024-01-15-followup-{i}") % 3 != 0 for i in range(len(slots))]
        assert [s["available"] for s in slots] == expected


class TestOperations:
    def test_book(self):
        result = mock.book("physical", "2024-01-15", "09:00", {"name": "J", "email": "e", "phone": "p"})
        assert result["booking_id"] == "APPT-20240115-0900"
        assert result["status"] == "confirmed"
        assert len(result["confirmation_code"]) == len("CONF-") + 6

    def test_book_rejects_unknown_type(self):
        with pytest.raises(BackendValidationError, match="Invalid appointment_type"):
            mock.book("xray", "2024-01-15", "09:00", {"name": "J", "email": "e", "phone": "p"})

    def test_reschedule_requires_booking_id(self):
        with pytest.raises(BackendValidationError, match="booking_id"):
            mock.reschedule("", "2024-01-16", "10:30")

    def test_cancel_echoes_reason(self):
        assert mock.cancel("APPT-1", "moved away") == {
            "booking_id": "APPT-1",
            "status": "cancelled",
            "reason": "moved away",
        }
