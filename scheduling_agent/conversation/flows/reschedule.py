"""Reschedule flow: booking id → new date → new time → reschedule → complete.

The backend treats a reschedule as a one-shot operation, so a failed call
abandons the flow entirely instead of offering a retry from the middle.
"""

from __future__ import annotations

import logging

from scheduling_agent.conversation import messages
from scheduling_agent.conversation.context import FlowContext, Transition
from scheduling_agent.conversation.state import (
    AwaitingIntent,
    ConversationState,
    RescheduleAwaitingBookingId,
    RescheduleAwaitingDate,
    RescheduleAwaitingTime,
    RescheduleComplete,
    Rescheduling,
)
from scheduling_agent.errors import RemoteCallError, StateConsistencyError
from scheduling_agent.nlu.extractors import extract_date, extract_time

logger = logging.getLogger(__name__)


async def _collect_booking_id(
    state: RescheduleAwaitingBookingId,
    text: str,
    ctx: FlowContext,
) -> Transition:
    booking_id = text.strip()
    if not booking_id:
        return Transition(state, messages.ASK_RESCHEDULE_BOOKING_ID)
    return Transition(RescheduleAwaitingDate(booking_id=booking_id), messages.ASK_NEW_DATE)


async def _resolve_date(state: RescheduleAwaitingDate, text: str, ctx: FlowContext) -> Transition:
    date = extract_date(text, ctx.today())
    if date is None:
        return Transition(state, messages.DATE_NOT_UNDERSTOOD)
    return Transition(
        RescheduleAwaitingTime(booking_id=state.booking_id, date=date),
        messages.ASK_NEW_TIME,
    )


async def _resolve_time_and_reschedule(
    state: RescheduleAwaitingTime,
    text: str,
    ctx: FlowContext,
) -> Transition:
    start_time = extract_time(text)
    if start_time is None:
        return Transition(state, messages.TIME_NOT_UNDERSTOOD)

    pending = Rescheduling(booking_id=state.booking_id, date=state.date, start_time=start_time)
    try:
        result = await ctx.call_remote(
            pending, ctx.client.reschedule(pending.booking_id, pending.date, start_time),
        )
    except RemoteCallError as exc:
        logger.error("Failed to reschedule %s: %s", pending.booking_id, exc)
        return Transition(AwaitingIntent(), messages.RESCHEDULE_FAILED)

    logger.info("Rescheduled %s -> %s", result.previous_booking_id, result.booking_id)
    return Transition(
        RescheduleComplete(
            booking_id=result.booking_id,
            previous_booking_id=result.previous_booking_id,
            date=pending.date,
            start_time=start_time,
        ),
        messages.rescheduled(result, pending.date, start_time),
    )


_STEP_HANDLERS = {
    RescheduleAwaitingBookingId: _collect_booking_id,
    RescheduleAwaitingDate: _resolve_date,
    RescheduleAwaitingTime: _resolve_time_and_reschedule,
}


async def handle_reschedule_turn(
    state: ConversationState,
    text: str,
    ctx: FlowContext,
) -> Transition:
    """Consume one user turn in the reschedule flow."""
    handler = _STEP_HANDLERS.get(type(state))
    if handler is None:
        raise StateConsistencyError(f"Reschedule flow cannot handle step {state.step!r}")
    return await handler(state, text, ctx)
