"""Booking flow.

type → date → availability lookup → slot → name → email → phone → reason →
book → complete.

A failed ``book`` call is recoverable: the user is sent back to pick a date,
keeping the appointment type but dropping the slot, since availability may
have changed in the meantime.
"""

from __future__ import annotations

import logging
from typing import Any

from scheduling_agent.conversation import messages
from scheduling_agent.conversation.context import FlowContext, Transition
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
    ConversationState,
)
from scheduling_agent.errors import RemoteCallError, StateConsistencyError
from scheduling_agent.models import AppointmentTypeConfig
from scheduling_agent.nlu.extractors import (
    extract_appointment_type,
    extract_date,
    extract_slot_selection,
)

logger = logging.getLogger(__name__)


def _carry(state: ConversationState) -> dict[str, Any]:
    """Collected fields of *state*, ready to seed the next variant."""
    return {name: getattr(state, name) for name in type(state).model_fields if name != "step"}


# ── Steps ────────────────────────────────────────────────────────────


async def _resolve_type(state: BookingAwaitingType, text: str, ctx: FlowContext) -> Transition:
    appointment_type = extract_appointment_type(text)
    if appointment_type is None:
        return Transition(state, messages.ASK_APPOINTMENT_TYPE)
    return Transition(
        BookingAwaitingDate(appointment_type=appointment_type),
        messages.type_chosen(appointment_type),
    )


async def _resolve_date(state: BookingAwaitingDate, text: str, ctx: FlowContext) -> Transition:
    date = extract_date(text, ctx.today())
    if date is None:
        return Transition(state, messages.DATE_NOT_UNDERSTOOD)
    return await _fetch_slots(state.appointment_type, date, ctx)


async def _fetch_slots(
    appointment_type: AppointmentTypeConfig,
    date: str,
    ctx: FlowContext,
) -> Transition:
    """Query availability and offer the first few open slots."""
    back_to_date = BookingAwaitingDate(appointment_type=appointment_type)
    pending = BookingFetchingSlots(appointment_type=appointment_type, date=date)
    try:
        slots = await ctx.call_remote(
            pending, ctx.client.query_availability(date, appointment_type),
        )
    except RemoteCallError as exc:
        logger.error("Failed to fetch availability for %s on %s: %s", appointment_type.key, date, exc)
        return Transition(back_to_date, messages.AVAILABILITY_FAILED)

    available = [s for s in slots if s.available][: ctx.max_slot_options]
    if not available:
        logger.info("No availability for %s on %s", appointment_type.key, date)
        return Transition(back_to_date, messages.NO_AVAILABILITY)

    return Transition(
        BookingAwaitingSlot(
            appointment_type=appointment_type,
            date=date,
            available_slots=tuple(available),
        ),
        messages.slot_options(date, available),
    )


async def _resolve_slot(state: BookingAwaitingSlot, text: str, ctx: FlowContext) -> Transition:
    slot = extract_slot_selection(text, state.available_slots)
    if slot is None:
        return Transition(state, messages.SLOT_NOT_MATCHED)
    return Transition(
        BookingAwaitingName(
            appointment_type=state.appointment_type,
            date=state.date,
            selected_slot=slot,
        ),
        messages.slot_held(slot, state.date),
    )


async def _collect_name(state: BookingAwaitingName, text: str, ctx: FlowContext) -> Transition:
    name = text.strip()
    if not name:
        return Transition(state, messages.ASK_NAME)
    return Transition(BookingAwaitingEmail(**_carry(state), patient_name=name), messages.ASK_EMAIL)


async def _collect_email(state: BookingAwaitingEmail, text: str, ctx: FlowContext) -> Transition:
    # Taken as typed; the backend is the only validator.
    email = text.strip()
    if not email:
        return Transition(state, messages.ASK_EMAIL)
    return Transition(BookingAwaitingPhone(**_carry(state), patient_email=email), messages.ASK_PHONE)


async def _collect_phone(state: BookingAwaitingPhone, text: str, ctx: FlowContext) -> Transition:
    phone = text.strip()
    if not phone:
        return Transition(state, messages.ASK_PHONE)
    return Transition(BookingAwaitingReason(**_carry(state), patient_phone=phone), messages.ASK_REASON)


async def _collect_reason_and_book(
    state: BookingAwaitingReason,
    text: str,
    ctx: FlowContext,
) -> Transition:
    reason = text.strip()
    if not reason:
        return Transition(state, messages.ASK_REASON)

    pending = BookingConfirming(**_carry(state), reason=reason)
    try:
        result = await ctx.call_remote(
            pending,
            ctx.client.book(
                pending.appointment_type,
                pending.date,
                pending.selected_slot,
                name=pending.patient_name,
                email=pending.patient_email,
                phone=pending.patient_phone,
                reason=pending.reason,
            ),
        )
    except RemoteCallError as exc:
        logger.error("Failed to book %s on %s: %s", pending.selected_slot.start_time, pending.date, exc)
        return Transition(
            BookingAwaitingDate(appointment_type=pending.appointment_type),
            messages.BOOKING_FAILED,
        )

    logger.info("Booking confirmed: %s", result.booking_id)
    return Transition(
        BookingComplete(
            **_carry(pending),
            booking_id=result.booking_id,
            confirmation_code=result.confirmation_code,
        ),
        messages.booking_confirmed(result),
    )


_STEP_HANDLERS = {
    BookingAwaitingType: _resolve_type,
    BookingAwaitingDate: _resolve_date,
    BookingAwaitingSlot: _resolve_slot,
    BookingAwaitingName: _collect_name,
    BookingAwaitingEmail: _collect_email,
    BookingAwaitingPhone: _collect_phone,
    BookingAwaitingReason: _collect_reason_and_book,
}


async def handle_booking_turn(
    state: ConversationState,
    text: str,
    ctx: FlowContext,
) -> Transition:
    """Consume one user turn in the booking flow."""
    handler = _STEP_HANDLERS.get(type(state))
    if handler is None:
        raise StateConsistencyError(f"Booking flow cannot handle step {state.step!r}")
    return await handler(state, text, ctx)
