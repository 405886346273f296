"""Conversation state as a tagged family of immutable variants.

Each variant is a frozen pydantic model identified by its ``step`` literal and
carries exactly the fields that are known at that point of its flow.  A
booking that is waiting for a slot pick has no ``patient_name`` attribute at
all, and a booking cannot reach the confirm step without every required
field, because pydantic refuses to build the variant.

Variants that subclass :class:`AwaitingRemoteReply` are the "waiting on the
scheduling backend" states.  The engine refuses new turns while in one of
them.

Flow graphs::

    AwaitingIntent
      ├─ book:       ask_type → ask_date → fetching_slots → select_slot → ask_name
      │              → ask_email → ask_phone → ask_reason → confirming → complete
      ├─ reschedule: ask_booking_id → ask_date → ask_time → confirming → complete
      └─ cancel:     ask_booking_id → ask_reason → confirming → complete
"""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, StringConstraints

from scheduling_agent.models import AppointmentTypeConfig, AvailabilitySlot, Intent

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


class ConversationState(BaseModel):
    """Base class of every state variant."""

    model_config = ConfigDict(frozen=True)

    intent: ClassVar[Intent | None] = None
    # Terminal variants are shown once, then the next turn starts over.
    terminal: ClassVar[bool] = False

    step: str


class AwaitingRemoteReply(ConversationState):
    """Marker base: a backend call is in flight for this conversation."""

    operation: ClassVar[str]


class AwaitingIntent(ConversationState):
    step: Literal["awaiting_intent"] = "awaiting_intent"


# ── Booking ──────────────────────────────────────────────────────────


class _Booking(ConversationState):
    intent: ClassVar[Intent | None] = Intent.BOOK


class BookingAwaitingType(_Booking):
    step: Literal["book.ask_type"] = "book.ask_type"


class BookingAwaitingDate(_Booking):
    step: Literal["book.ask_date"] = "book.ask_date"
    appointment_type: AppointmentTypeConfig


class _BookingDated(_Booking):
    appointment_type: AppointmentTypeConfig
    date: NonEmptyStr


class BookingFetchingSlots(AwaitingRemoteReply, _BookingDated):
    operation: ClassVar[str] = "availability"
    step: Literal["book.fetching_slots"] = "book.fetching_slots"


class BookingAwaitingSlot(_BookingDated):
    step: Literal["book.select_slot"] = "book.select_slot"
    # Most recent fetch only, already filtered to available slots.
    available_slots: tuple[AvailabilitySlot, ...]


class _BookingHeld(_BookingDated):
    selected_slot: AvailabilitySlot


class BookingAwaitingName(_BookingHeld):
    step: Literal["book.ask_name"] = "book.ask_name"


class _BookingNamed(_BookingHeld):
    patient_name: NonEmptyStr


class BookingAwaitingEmail(_BookingNamed):
    step: Literal["book.ask_email"] = "book.ask_email"


class _BookingEmailed(_BookingNamed):
    patient_email: NonEmptyStr


class BookingAwaitingPhone(_BookingEmailed):
    step: Literal["book.ask_phone"] = "book.ask_phone"


class _BookingPhoned(_BookingEmailed):
    patient_phone: NonEmptyStr


class BookingAwaitingReason(_BookingPhoned):
    step: Literal["book.ask_reason"] = "book.ask_reason"


class _BookingDetailed(_BookingPhoned):
    reason: NonEmptyStr


class BookingConfirming(AwaitingRemoteReply, _BookingDetailed):
    operation: ClassVar[str] = "book"
    step: Literal["book.confirming"] = "book.confirming"


class BookingComplete(_BookingDetailed):
    terminal: ClassVar[bool] = True
    step: Literal["book.complete"] = "book.complete"
    booking_id: NonEmptyStr
    confirmation_code: NonEmptyStr


# ── Reschedule ───────────────────────────────────────────────────────


class _Reschedule(ConversationState):
    intent: ClassVar[Intent | None] = Intent.RESCHEDULE


class RescheduleAwaitingBookingId(_Reschedule):
    step: Literal["reschedule.ask_booking_id"] = "reschedule.ask_booking_id"


class RescheduleAwaitingDate(_Reschedule):
    step: Literal["reschedule.ask_date"] = "reschedule.ask_date"
    booking_id: NonEmptyStr


class RescheduleAwaitingTime(_Reschedule):
    step: Literal["reschedule.ask_time"] = "reschedule.ask_time"
    booking_id: NonEmptyStr
    date: NonEmptyStr


class Rescheduling(AwaitingRemoteReply, _Reschedule):
    operation: ClassVar[str] = "reschedule"
    step: Literal["reschedule.confirming"] = "reschedule.confirming"
    booking_id: NonEmptyStr
    date: NonEmptyStr
    start_time: NonEmptyStr


class RescheduleComplete(_Reschedule):
    terminal: ClassVar[bool] = True
    step: Literal["reschedule.complete"] = "reschedule.complete"
    booking_id: NonEmptyStr
    previous_booking_id: NonEmptyStr
    date: NonEmptyStr
    start_time: NonEmptyStr


# ── Cancel ───────────────────────────────────────────────────────────


class _Cancel(ConversationState):
    intent: ClassVar[Intent | None] = Intent.CANCEL


class CancelAwaitingBookingId(_Cancel):
    step: Literal["cancel.ask_booking_id"] = "cancel.ask_booking_id"


class CancelAwaitingReason(_Cancel):
    step: Literal["cancel.ask_reason"] = "cancel.ask_reason"
    booking_id: NonEmptyStr


class Cancelling(AwaitingRemoteReply, _Cancel):
    operation: ClassVar[str] = "cancel"
    step: Literal["cancel.confirming"] = "cancel.confirming"
    booking_id: NonEmptyStr
    reason: str | None = None


class CancelComplete(_Cancel):
    terminal: ClassVar[bool] = True
    step: Literal["cancel.complete"] = "cancel.complete"
    booking_id: NonEmptyStr
    reason: str | None = None


def starts_new_flow(state: ConversationState) -> bool:
    """True when the next turn should be classified for a fresh intent."""
    return state.intent is None or state.terminal
