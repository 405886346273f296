"""Agent utterances.

All user-facing text lives here so the flow handlers only decide *which*
message to send.  Dates and times are echoed exactly as the backend returned
them.
"""

from __future__ import annotations

from collections.abc import Sequence

from scheduling_agent.models import (
    APPOINTMENT_TYPES,
    AppointmentTypeConfig,
    AvailabilitySlot,
    BookingConfirmation,
    CancellationConfirmation,
    RescheduleConfirmation,
)

GREETING = (
    "Hi, I'm your scheduling assistant. I can help you book, reschedule, or "
    "cancel a medical appointment. What would you like to do?"
)

DATE_FORMAT_HINT = 'You can write YYYY-MM-DD, "today", or "tomorrow".'
SKIP_KEYWORD = "skip"
NO_REASON_GIVEN = "no reason given"

# ── Engine ──────────────────────────────────────────────────────────

EMPTY_TURN = "I didn't catch that. Please type a message."
BUSY = "I'm still working on your previous request. One moment, please."
RESTART_AFTER_INCONSISTENCY = (
    "I'm missing some information to complete your request. Let's start over."
)

# ── Booking ─────────────────────────────────────────────────────────

ASK_APPOINTMENT_TYPE = (
    "What type of appointment would you like? I can schedule a "
    + ", ".join(t.label for t in APPOINTMENT_TYPES[:-1])
    + f", or {APPOINTMENT_TYPES[-1].label}."
)
DATE_NOT_UNDERSTOOD = f"I couldn't understand that date. {DATE_FORMAT_HINT}"
NO_AVAILABILITY = "I'm sorry, there are no available slots for that date. Try another date."
AVAILABILITY_FAILED = (
    "Something went wrong while fetching availability. Please try again in a moment."
)
SLOT_NOT_MATCHED = (
    "I couldn't match that to one of the suggested times. Please reply with "
    'the number or exact start time (e.g. "10:00").'
)
ASK_EMAIL = "Thanks. What is the best email to send confirmation?"
ASK_PHONE = "Got it. And what phone number can the clinic use if they need to reach you?"
ASK_REASON = "Lastly, what's the reason for your visit? (A short phrase is fine.)"
ASK_NAME = "What is your full name?"
BOOKING_FAILED = (
    "Something went wrong while booking your appointment. Please pick a date "
    f"again and we'll find a new time. {DATE_FORMAT_HINT}"
)

# ── Reschedule ──────────────────────────────────────────────────────

START_RESCHEDULE = "Sure, let's reschedule. What is your booking ID?"
ASK_RESCHEDULE_BOOKING_ID = "Please provide the booking ID you'd like to reschedule."
ASK_NEW_DATE = f"Got it. What new date would you like? {DATE_FORMAT_HINT}"
ASK_NEW_TIME = "What new time would you prefer? Please provide a time like HH:mm (e.g. 10:30)."
TIME_NOT_UNDERSTOOD = "I couldn't read that time. Please use HH:mm, for example 10:30."
RESCHEDULE_FAILED = (
    "Something went wrong while rescheduling your appointment. Please try again."
)

# ── Cancel ──────────────────────────────────────────────────────────

START_CANCEL = "Okay, I can help with that. What is your booking ID?"
ASK_CANCEL_BOOKING_ID = "Please provide the booking ID you'd like to cancel."
ASK_CANCEL_REASON = (
    "I can include an optional note with your cancellation. What's the reason? "
    f'(You can say "{SKIP_KEYWORD}" to leave this blank.)'
)
CANCEL_FAILED = "Something went wrong while cancelling your appointment. Please try again."


def type_chosen(appointment_type: AppointmentTypeConfig) -> str:
    return (
        f"Great, a {appointment_type.label.lower()} "
        f"({appointment_type.duration_minutes} minutes). "
        f"On which date would you like to come in? {DATE_FORMAT_HINT}"
    )


def slot_options(date: str, slots: Sequence[AvailabilitySlot]) -> str:
    """Numbered list of the offered slots, 1-based."""
    lines = [f"Here are some available times on {date}:"]
    for index, slot in enumerate(slots, start=1):
        lines.append(f"{index}) {slot.start_time}–{slot.end_time}")
    lines.append("")
    lines.append(
        'Reply with the number of your preferred slot or the start time (e.g. "10:00").'
    )
    return "\n".join(lines)


def slot_held(slot: AvailabilitySlot, date: str) -> str:
    return f"Perfect, I'll hold {slot.start_time}–{slot.end_time} on {date}. {ASK_NAME}"


def booking_confirmed(result: BookingConfirmation) -> str:
    return (
        "You're all set! Your appointment is confirmed.\n\n"
        f"Booking ID: {result.booking_id}\n"
        f"Confirmation code: {result.confirmation_code}\n\n"
        'If you\'d like, you can say "reschedule" or "cancel" followed by your booking ID.'
    )


def rescheduled(result: RescheduleConfirmation, date: str, start_time: str) -> str:
    return (
        "Your appointment has been rescheduled.\n\n"
        f"New booking ID: {result.booking_id}\n"
        f"Previous booking ID: {result.previous_booking_id}\n"
        f"Date: {date}\n"
        f"Time: {start_time}"
    )


def cancelled(result: CancellationConfirmation, reason: str | None) -> str:
    return (
        "Your appointment has been cancelled.\n\n"
        f"Booking ID: {result.booking_id}\n"
        f"Status: {result.status}\n"
        f"Reason: {reason or NO_REASON_GIVEN}"
    )
