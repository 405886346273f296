"""Tests for intent classification and the slot extractors."""

from __future__ import annotations

from datetime import date

import pytest
from stubs import make_slot

from scheduling_agent.models import Intent
from scheduling_agent.nlu.extractors import (
    extract_appointment_type,
    extract_date,
    extract_slot_selection,
    extract_time,
)
from scheduling_agent.nlu.intent import classify_intent

# ── TestClassifyIntent ─────────────────────────────────────────


class TestClassifyIntent:
    @pytest.mark.parametrize(
        "text",
        [
            "I need to reschedule",
            "RESCHEDULE my appointment please",
            "can we Rescheduling this?",
            "I want to reschedule, not cancel",
        ],
    )
    def test_reschedule_token_wins_regardless_of_case(self, text):
        assert classify_intent(text) is Intent.RESCHEDULE

    @pytest.mark.parametrize("text", ["cancel my appointment", "Please CANCEL", "cancellation"])
    def test_cancel(self, text):
        assert classify_intent(text) is Intent.CANCEL

    @pytest.mark.parametrize("text", ["book a physical exam", "hello", "", "   "])
    def test_everything_else_is_book(self, text):
        assert classify_intent(text) is Intent.BOOK

    def test_is_idempotent(self):
        text = "Could you reschedule my follow-up?"
        assert classify_intent(text) == classify_intent(text)


# ── TestExtractAppointmentType ─────────────────────────────────────────


class TestExtractAppointmentType:
    @pytest.mark.parametrize(
        ("text", "key"),
        [
            ("book a physical exam", "physical"),
            ("I need a follow-up", "followup"),
            ("see a specialist", "specialist"),
            ("general consultation please", "consultation"),
            ("a quick check-up", "consultation"),
            ("annual checkup", "consultation"),
        ],
    )
    def test_known_synonyms(self, text, key):
        assert extract_appointment_type(text).key == key

    def test_follow_up_beats_consultation(self):
        assert extract_appointment_type("follow-up consultation").key == "followup"

    def test_unknown_returns_none(self):
        assert extract_appointment_type("book an appointment") is None

    def test_returns_catalog_entry(self):
        physical = extract_appointment_type("PHYSICAL")
        assert physical.label == "Physical Exam"
        assert physical.duration_minutes == 45


# ── TestExtractDate ─────────────────────────────────────────


class TestExtractDate:
    def test_iso_literal_round_trips(self):
        assert extract_date("2024-01-15") == "2024-01-15"

    def test_iso_literal_inside_sentence(self):
        assert extract_date("how about 2025-03-09 then?") == "2025-03-09"

    def test_today(self):
        assert extract_date("Today works", today=date(2024, 1, 14)) == "2024-01-14"

    def test_tomorrow(self):
        assert extract_date("tomorrow", today=date(2024, 1, 14)) == "2024-01-15"

    def test_tomorrow_crosses_month_and_year(self):
        assert extract_date("tomorrow", today=date(2024, 12, 31)) == "2025-01-01"

    def test_tomorrow_defaults_to_current_date(self):
        expected = date.fromordinal(date.today().toordinal() + 1).isoformat()
        assert extract_date("tomorrow please") == expected

    @pytest.mark.parametrize("text", ["next tuesday", "15/01/2024", "soon", ""])
    def test_unrecognised_returns_none(self, text):
        assert extract_date(text, today=date(2024, 1, 14)) is None


# ── TestExtractTime ─────────────────────────────────────────


class TestExtractTime:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("10:30", "10:30"),
            ("9:05", "09:05"),
            ("at 0:00 please", "00:00"),
            ("23:59", "23:59"),
        ],
    )
    def test_valid_times_are_zero_padded(self, text, expected):
        assert extract_time(text) == expected

    @pytest.mark.parametrize("text", ["24:00", "10:60", "ten thirty", "1030"])
    def test_invalid_returns_none(self, text):
        assert extract_time(text) is None


# ── TestExtractSlotSelection ─────────────────────────────────────────


class TestExtractSlotSelection:
    SLOTS = [
        make_slot("09:00", "09:30"),
        make_slot("09:30", "10:00", available=False),
        make_slot("10:00", "10:30"),
    ]

    @pytest.mark.parametrize("n", [1, 2, 3])
    def test_ordinal_in_range(self, n):
        assert extract_slot_selection(str(n), self.SLOTS) == self.SLOTS[n - 1]

    @pytest.mark.parametrize("text", ["0", "4", "99"])
    def test_ordinal_out_of_range(self, text):
        assert extract_slot_selection(text, self.SLOTS) is None

    def test_ordinal_is_trimmed(self):
        assert extract_slot_selection("  2 ", self.SLOTS) == self.SLOTS[1]

    def test_time_literal_matches_available_slot(self):
        assert extract_slot_selection("10:00 please", self.SLOTS) == self.SLOTS[2]

    def test_time_literal_of_unavailable_slot(self):
        assert extract_slot_selection("9:30", self.SLOTS) is None

    def test_time_literal_not_offered(self):
        assert extract_slot_selection("14:00", self.SLOTS) is None

    def test_numeric_takes_priority_over_time(self):
        slots = [make_slot("01:00", "01:30"), make_slot("02:00", "02:30")]
        assert extract_slot_selection("2", slots) == slots[1]

    def test_empty_slot_list(self):
        assert extract_slot_selection("1", []) is None

    def test_no_number_no_time(self):
        assert extract_slot_selection("the first one", self.SLOTS) is None

    def test_overlong_number_is_not_a_pick(self):
        assert extract_slot_selection("9" * 5000, self.SLOTS) is None

    def test_leading_zeros_still_pick(self):
        assert extract_slot_selection("02", self.SLOTS) == self.SLOTS[1]

    def test_non_ascii_digits_are_not_ordinals(self):
        assert extract_slot_selection("٢", self.SLOTS) is None


class TestAsciiDigitsOnly:
    """Values go on the wire verbatim, so only ASCII digits are accepted."""

    def test_date_in_arabic_indic_digits(self):
        assert extract_date("٢٠٢٤-٠١-١٥") is None

    def test_time_in_fullwidth_digits(self):
        assert extract_time("１０:３０") is None
