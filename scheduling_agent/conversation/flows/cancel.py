"""Cancel flow: booking id → optional reason → cancel → complete."""

from __future__ import annotations

import logging

from scheduling_agent.conversation import messages
from scheduling_agent.conversation.context import FlowContext, Transition
from scheduling_agent.conversation.state import (
    AwaitingIntent,
    CancelAwaitingBookingId,
    CancelAwaitingReason,
    CancelComplete,
    Cancelling,
    ConversationState,
)
from scheduling_agent.errors import RemoteCallError, StateConsistencyError

logger = logging.getLogger(__name__)


async def _collect_booking_id(
    state: CancelAwaitingBookingId,
    text: str,
    ctx: FlowContext,
) -> Transition:
    booking_id = text.strip()
    if not booking_id:
        return Transition(state, messages.ASK_CANCEL_BOOKING_ID)
    return Transition(CancelAwaitingReason(booking_id=booking_id), messages.ASK_CANCEL_REASON)


async def _collect_reason_and_cancel(
    state: CancelAwaitingReason,
    text: str,
    ctx: FlowContext,
) -> Transition:
    raw = text.strip()
    reason = None if not raw or raw.lower() == messages.SKIP_KEYWORD else raw

    pending = Cancelling(booking_id=state.booking_id, reason=reason)
    try:
        result = await ctx.call_remote(pending, ctx.client.cancel(pending.booking_id, reason))
    except RemoteCallError as exc:
        logger.error("Failed to cancel %s: %s", pending.booking_id, exc)
        return Transition(AwaitingIntent(), messages.CANCEL_FAILED)

    logger.info("Cancelled %s", result.booking_id)
    return Transition(
        CancelComplete(booking_id=result.booking_id, reason=reason),
        messages.cancelled(result, reason),
    )


_STEP_HANDLERS = {
    CancelAwaitingBookingId: _collect_booking_id,
    CancelAwaitingReason: _collect_reason_and_cancel,
}


async def handle_cancel_turn(
    state: ConversationState,
    text: str,
    ctx: FlowContext,
) -> Transition:
    """Consume one user turn in the cancel flow."""
    handler = _STEP_HANDLERS.get(type(state))
    if handler is None:
        raise StateConsistencyError(f"Cancel flow cannot handle step {state.step!r}")
    return await handler(state, text, ctx)
