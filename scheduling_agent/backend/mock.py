"""Mock scheduling backend.

Stands in for a real calendar provider: slots are generated on the fly from
the working-day window and the appointment duration, availability is a
deterministic hash of date, type and slot index, and bookings are not
stored.  Both the FastAPI routes and ``InMemorySchedulingClient`` are thin
wrappers over these functions, so the HTTP and in-process backends behave
identically.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
from datetime import date as date_cls
from typing import Any

from scheduling_agent.errors import BackendValidationError
from scheduling_agent.models import APPOINTMENT_TYPES_BY_KEY

logger = logging.getLogger(__name__)

WORKDAY_START_HOUR = 9
WORKDAY_END_HOUR = 17

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_CODE_ALPHABET = string.ascii_uppercase + string.digits


# ── Validation ──────────────────────────────────────────────────────


def is_valid_date(value: str) -> bool:
    """``YYYY-MM-DD`` that is also a real calendar date."""
    if not _DATE_RE.match(value):
        return False
    try:
        date_cls.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_valid_time(value: str) -> bool:
    """Zero-padded 24-hour ``HH:mm``."""
    return bool(_TIME_RE.match(value))


def _check_date(value: str) -> None:
    if not is_valid_date(value):
        raise BackendValidationError("Invalid date format. Expected YYYY-MM-DD.")


def _check_time(value: str) -> None:
    if not is_valid_time(value):
        raise BackendValidationError("Invalid start_time format. Expected HH:mm.")


def _check_type(value: str) -> None:
    if value not in APPOINTMENT_TYPES_BY_KEY:
        raise BackendValidationError(
            "Invalid appointment_type. Expected one of: "
            f"{', '.join(APPOINTMENT_TYPES_BY_KEY)}."
        )


# ── Slot generation ─────────────────────────────────────────────────


def _slot_hash(source: str) -> int:
    h = 0
    for ch in source:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h


def _fmt_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def generate_slots(date: str, appointment_type: str) -> list[dict[str, Any]]:
    """Enumerate the working day in steps of the type's duration.

    Roughly two thirds of the slots come back available; the pattern is
    stable for a given date and type.
    """
    duration = APPOINTMENT_TYPES_BY_KEY[appointment_type].duration_minutes
    day_start = WORKDAY_START_HOUR * 60
    slot_count = ((WORKDAY_END_HOUR - WORKDAY_START_HOUR) * 60) // duration

    slots = []
    for i in range(slot_count):
        start = day_start + i * duration
        slots.append(
            {
                "start_time": _fmt_minutes(start),
                "end_time": _fmt_minutes(start + duration),
                "available": _slot_hash(f"{date}-{appointment_type}-{i}") % 3 != 0,
            }
        )
    return slots


def _booking_id(date: str, start_time: str) -> str:
    return f"APPT-{date.replace('-', '')}-{start_time.replace(':', '')}"


def _confirmation_code() -> str:
    return "CONF-" + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))


# ── Operations ──────────────────────────────────────────────────────


def availability(date: str, appointment_type: str) -> dict[str, Any]:
    _check_date(date)
    _check_type(appointment_type)
    return {
        "date": date,
        "appointment_type": appointment_type,
        "available_slots": generate_slots(date, appointment_type),
    }


def book(
    appointment_type: str,
    date: str,
    start_time: str,
    patient: dict[str, str],
    reason: str | None = None,
) -> dict[str, Any]:
    _check_date(date)
    _check_time(start_time)
    _check_type(appointment_type)

    booking_id = _booking_id(date, start_time)
    logger.info("Mock backend: booked %s (%s)", booking_id, appointment_type)
    return {
        "booking_id": booking_id,
        "status": "confirmed",
        "confirmation_code": _confirmation_code(),
        "appointment_type": appointment_type,
        "date": date,
        "start_time": start_time,
        "patient": patient,
        "reason": reason,
    }


def reschedule(booking_id: str, date: str, start_time: str) -> dict[str, Any]:
    if not booking_id:
        raise BackendValidationError("Missing required field: booking_id.")
    _check_date(date)
    _check_time(start_time)

    new_id = _booking_id(date, start_time)
    logger.info("Mock backend: rescheduled %s -> %s", booking_id, new_id)
    return {
        "booking_id": new_id,
        "status": "rescheduled",
        "previous_booking_id": booking_id,
        "date": date,
        "start_time": start_time,
    }


def cancel(booking_id: str, reason: str | None = None) -> dict[str, Any]:
    if not booking_id:
        raise BackendValidationError("Missing required field: booking_id.")
    logger.info("Mock backend: cancelled %s", booking_id)
    return {"booking_id": booking_id, "status": "cancelled", "reason": reason}
