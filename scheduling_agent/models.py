"""Domain value types: the appointment catalog, slots and backend results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Intent(str, Enum):
    """The user's top-level goal for a conversation."""

    BOOK = "book"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class AppointmentTypeConfig(_Frozen):
    """One entry of the static appointment catalog."""

    key: str
    label: str
    duration_minutes: int = Field(..., gt=0)


class AvailabilitySlot(_Frozen):
    """A bookable interval as returned by the scheduling backend.

    Times are ``HH:mm`` strings and are treated as opaque by the
    conversation layer.
    """

    start_time: str
    end_time: str
    available: bool


class BookingConfirmation(_Frozen):
    booking_id: str
    status: str
    confirmation_code: str


class RescheduleConfirmation(_Frozen):
    booking_id: str
    status: str
    previous_booking_id: str


class CancellationConfirmation(_Frozen):
    booking_id: str
    status: str


# ── Appointment catalog ─────────────────────────────────────────────

APPOINTMENT_TYPES: tuple[AppointmentTypeConfig, ...] = (
    AppointmentTypeConfig(key="consultation", label="General Consultation", duration_minutes=30),
    AppointmentTypeConfig(key="followup", label="Follow-up", duration_minutes=15),
    AppointmentTypeConfig(key="physical", label="Physical Exam", duration_minutes=45),
    AppointmentTypeConfig(key="specialist", label="Specialist Consultation", duration_minutes=60),
)

APPOINTMENT_TYPES_BY_KEY: dict[str, AppointmentTypeConfig] = {
    t.key: t for t in APPOINTMENT_TYPES
}


def get_appointment_type(key: str) -> AppointmentTypeConfig | None:
    """Look up a catalog entry by its wire key (e.g. ``"physical"``)."""
    return APPOINTMENT_TYPES_BY_KEY.get(key)
