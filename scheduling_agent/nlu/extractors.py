"""Slot extractors: pull structured values out of free-text turns.

Every extractor is pure and returns ``None`` when nothing usable is found.
A parse failure is an expected outcome for the caller to re-prompt on, not
an error.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date, timedelta

from scheduling_agent.models import AppointmentTypeConfig, AvailabilitySlot, get_appointment_type

_ISO_DATE_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b", re.ASCII)
_TIME_RE = re.compile(r"\b([01]?\d|2[0-3]):[0-5]\d\b", re.ASCII)
_NUMERIC_RE = re.compile(r"^\d+$", re.ASCII)

# Checked in order; "follow-up consultation" is a follow-up, not a consultation.
_TYPE_SYNONYMS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("follow",), "followup"),
    (("physical",), "physical"),
    (("specialist",), "specialist"),
    (("consult", "general", "checkup", "check-up"), "consultation"),
)


def extract_appointment_type(text: str) -> AppointmentTypeConfig | None:
    """Match known synonyms against the appointment catalog."""
    lowered = text.lower()
    for synonyms, key in _TYPE_SYNONYMS:
        if any(s in lowered for s in synonyms):
            return get_appointment_type(key)
    return None


def extract_date(text: str, today: date | None = None) -> str | None:
    """Return a ``YYYY-MM-DD`` date from *text*.

    Understands an explicit ISO literal (returned verbatim) and the relative
    words "today" and "tomorrow". Nothing else is recognised.

    Args:
        text: The user's turn.
        today: Reference date for relative words; defaults to the local date.
    """
    iso_match = _ISO_DATE_RE.search(text)
    if iso_match:
        return iso_match.group(0)

    lowered = text.lower()
    reference = today or date.today()
    if "today" in lowered:
        return reference.isoformat()
    if "tomorrow" in lowered:
        return (reference + timedelta(days=1)).isoformat()
    return None


def extract_time(text: str) -> str | None:
    """Return the first ``H:mm`` / ``HH:mm`` time in *text* as ``HH:mm``."""
    match = _TIME_RE.search(text)
    if not match:
        return None
    return match.group(0).zfill(5)


def extract_slot_selection(
    text: str,
    slots: Sequence[AvailabilitySlot],
) -> AvailabilitySlot | None:
    """Resolve the user's pick from the list of offered slots.

    A purely numeric answer is a 1-based ordinal into *slots* and takes
    priority. Otherwise a time literal selects the available slot starting at
    that time.
    """
    if not slots:
        return None

    stripped = text.strip()
    if _NUMERIC_RE.match(stripped):
        # Longer than any valid ordinal; also keeps int() within its digit limit.
        if len(stripped.lstrip("0")) > len(str(len(slots))):
            return None
        index = int(stripped) - 1
        if 0 <= index < len(slots):
            return slots[index]
        return None

    start_time = extract_time(text)
    if start_time is None:
        return None
    return next(
        (s for s in slots if s.start_time == start_time and s.available),
        None,
    )
