"""Tests for the booking flow handler."""

from __future__ import annotations

import pytest
from stubs import make_slot

from scheduling_agent.conversation import messages
from scheduling_agent.conversation.context import FlowContext
from scheduling_agent.conversation.flows.booking import handle_booking_turn
from scheduling_agent.conversation.state import (
    BookingAwaitingDate,
    BookingAwaitingEmail,
    BookingAwaitingName,
    BookingAwaitingPhone,
    BookingAwaitingReason,
    BookingAwaitingSlot,
    BookingAwaitingType,
    BookingComplete,
    BookingConfirming,
    BookingFetchingSlots,
    CancelAwaitingReason,
)
from scheduling_agent.errors import StateConsistencyError
from scheduling_agent.models import get_appointment_type

PHYSICAL = get_appointment_type("physical")
SLOT = make_slot("09:00", "09:45")


@pytest.fixture
def pending():
    return []


@pytest.fixture
def ctx(stub_client, today, pending):
    return FlowContext(client=stub_client, today=today, max_slot_options=3, publish_pending=pending.append)


def _reason_state():
    return BookingAwaitingReason(
        appointment_type=PHYSICAL,
        date="2024-01-15",
        selected_slot=SLOT,
        patient_name="Jane Doe",
        patient_email="jane@example.com",
        patient_phone="555-0100",
    )


# ── TestTypeStep ─────────────────────────────────────────────────────


class TestTypeStep:
    @pytest.mark.asyncio
    async def test_recognised_type_asks_for_date(self, ctx):
        state, reply = await handle_booking_turn(BookingAwaitingType(), "book a physical exam", ctx)
        assert state == BookingAwaitingDate(appointment_type=PHYSICAL)
        assert "physical exam (45 minutes)" in reply

    @pytest.mark.asyncio
    async def test_unknown_type_reprompts(self, ctx):
        start = BookingAwaitingType()
        state, reply = await handle_booking_turn(start, "book an appointment", ctx)
        assert state is start
        assert reply == messages.ASK_APPOINTMENT_TYPE
        assert "General Consultation" in reply


# ── TestDateStep ─────────────────────────────────────────────────────


class TestDateStep:
    @pytest.mark.asyncio
    async def test_relative_date_queries_availability(self, ctx, stub_client, pending):
        state, reply = await handle_booking_turn(BookingAwaitingDate(appointment_type=PHYSICAL), "tomorrow", ctx)

        assert stub_client.calls == [("availability", {"date": "2024-01-15", "appointment_type": "physical"})]
        assert pending == [BookingFetchingSlots(appointment_type=PHYSICAL, date="2024-01-15")]
        assert isinstance(state, BookingAwaitingSlot)
        assert state.available_slots == (SLOT,)
        assert "1) 09:00–09:45" in reply

    @pytest.mark.asyncio
    async def test_unparseable_date_reprompts_without_remote_call(self, ctx, stub_client):
        start = BookingAwaitingDate(appointment_type=PHYSICAL)
        state, reply = await handle_booking_turn(start, "next tuesday", ctx)
        assert state is start
        assert reply == messages.DATE_NOT_UNDERSTOOD
        assert stub_client.calls == []

    @pytest.mark.asyncio
    async def test_offers_only_available_slots_up_to_limit(self, ctx, stub_client):
        stub_client.slots = [
            make_slot("09:00", "09:45", available=False),
            make_slot("09:45", "10:30"),
            make_slot("10:30", "11:15"),
            make_slot("11:15", "12:00", available=False),
            make_slot("12:00", "12:45"),
            make_slot("12:45", "13:30"),
        ]
        state, reply = await handle_booking_turn(
            BookingAwaitingDate(appointment_type=PHYSICAL), "2024-01-15", ctx,
        )
        assert [s.start_time for s in state.available_slots] == ["09:45", "10:30", "12:00"]
        assert "3) 12:00–12:45" in reply
        assert "4)" not in reply

    @pytest.mark.asyncio
    async def test_no_availability_returns_to_date(self, ctx, stub_client):
        stub_client.slots = [make_slot("09:00", "09:45", available=False)]
        state, reply = await handle_booking_turn(BookingAwaitingDate(appointment_type=PHYSICAL), "tomorrow", ctx)
        assert state == BookingAwaitingDate(appointment_type=PHYSICAL)
        assert reply == messages.NO_AVAILABILITY

    @pytest.mark.asyncio
    async def test_availability_failure_returns_to_date(self, ctx, stub_client):
        stub_client.fail_availability = "Backend unavailable"
        state, reply = await handle_booking_turn(BookingAwaitingDate(appointment_type=PHYSICAL), "tomorrow", ctx)
        assert state == BookingAwaitingDate(appointment_type=PHYSICAL)
        assert reply == messages.AVAILABILITY_FAILED


# ── TestSlotStep ─────────────────────────────────────────────────────


class TestSlotStep:
    START = BookingAwaitingSlot(
        appointment_type=PHYSICAL,
        date="2024-01-15",
        available_slots=(SLOT, make_slot("10:00", "10:45")),
    )

    @pytest.mark.asyncio
    async def test_pick_by_number(self, ctx):
        state, reply = await handle_booking_turn(self.START, "2", ctx)
        assert isinstance(state, BookingAwaitingName)
        assert state.selected_slot.start_time == "10:00"
        assert "10:00–10:45 on 2024-01-15" in reply
        assert messages.ASK_NAME in reply

    @pytest.mark.asyncio
    async def test_pick_by_time(self, ctx):
        state, _ = await handle_booking_turn(self.START, "9:00 works", ctx)
        assert state.selected_slot == SLOT

    @pytest.mark.asyncio
    async def test_no_match_keeps_offered_slots(self, ctx):
        state, reply = await handle_booking_turn(self.START, "5", ctx)
        assert state is self.START
        assert reply == messages.SLOT_NOT_MATCHED


# ── TestPatientDetails ───────────────────────────────────────────────


class TestPatientDetails:
    @pytest.mark.asyncio
    async def test_name_email_phone_in_order(self, ctx):
        state = BookingAwaitingName(appointment_type=PHYSICAL, date="2024-01-15", selected_slot=SLOT)

        state, reply = await handle_booking_turn(state, "  Jane Doe ", ctx)
        assert isinstance(state, BookingAwaitingEmail)
        assert state.patient_name == "Jane Doe"
        assert reply == messages.ASK_EMAIL

        state, reply = await handle_booking_turn(state, "not-an-email", ctx)
        assert isinstance(state, BookingAwaitingPhone)
        assert state.patient_email == "not-an-email"
        assert reply == messages.ASK_PHONE

        state, reply = await handle_booking_turn(state, "555-0100", ctx)
        assert state == _reason_state().model_copy(update={"patient_email": "not-an-email"})
        assert reply == messages.ASK_REASON

    @pytest.mark.asyncio
    async def test_blank_answer_reprompts(self, ctx):
        start = BookingAwaitingName(appointment_type=PHYSICAL, date="2024-01-15", selected_slot=SLOT)
        state, reply = await handle_booking_turn(start, "   ", ctx)
        assert state is start
        assert reply == messages.ASK_NAME


# ── TestConfirmStep ──────────────────────────────────────────────────


class TestConfirmStep:
    @pytest.mark.asyncio
    async def test_books_with_collected_fields(self, ctx, stub_client, pending):
        state, reply = await handle_booking_turn(_reason_state(), "annual checkup", ctx)

        assert stub_client.calls == [
            (
                "book",
                {
                    "appointment_type": "physical",
                    "date": "2024-01-15",
                    "start_time": "09:00",
                    "name": "Jane Doe",
                    "email": "jane@example.com",
                    "phone": "555-0100",
                    "reason": "annual checkup",
                },
            )
        ]
        assert len(pending) == 1 and isinstance(pending[0], BookingConfirming)
        assert isinstance(state, BookingComplete)
        assert state.booking_id == "APPT-20240115-0900"
        assert "Booking ID: APPT-20240115-0900" in reply
        assert "Confirmation code: CONF-ABC123" in reply

    @pytest.mark.asyncio
    async def test_blank_reason_reprompts_without_booking(self, ctx, stub_client):
        state, reply = await handle_booking_turn(_reason_state(), "", ctx)
        assert state == _reason_state()
        assert reply == messages.ASK_REASON
        assert stub_client.calls == []

    @pytest.mark.asyncio
    async def test_failure_returns_to_date_keeping_type(self, ctx, stub_client):
        stub_client.fail_book = "Selected slot is no longer available."
        state, reply = await handle_booking_turn(_reason_state(), "annual checkup", ctx)
        assert state == BookingAwaitingDate(appointment_type=PHYSICAL)
        assert reply == messages.BOOKING_FAILED


class TestForeignStep:
    @pytest.mark.asyncio
    async def test_step_from_another_flow_is_inconsistent(self, ctx):
        with pytest.raises(StateConsistencyError):
            await handle_booking_turn(CancelAwaitingReason(booking_id="B"), "hello", ctx)
