"""In-process ``SchedulingClient`` backed by the mock backend.

Used by the CLI (``SCHEDULING_BACKEND=memory``) so the assistant can be tried
without starting the API server.  Backend validation errors surface exactly
as an HTTP 400 would: a ``RemoteCallError`` carrying the backend's message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from scheduling_agent.backend import mock
from scheduling_agent.errors import BackendValidationError, RemoteCallError
from scheduling_agent.models import (
    AppointmentTypeConfig,
    AvailabilitySlot,
    BookingConfirmation,
    CancellationConfirmation,
    RescheduleConfirmation,
)
from scheduling_agent.services.metrics import metrics
from scheduling_agent.services.scheduling_client import SchedulingClient

logger = logging.getLogger(__name__)


class InMemorySchedulingClient(SchedulingClient):
    """Calls the mock backend functions directly, no network involved."""

    async def _call(self, operation: str, fn: Callable[..., dict[str, Any]], *args) -> dict[str, Any]:
        async with metrics.track(operation):
            try:
                return fn(*args)
            except BackendValidationError as exc:
                raise RemoteCallError(str(exc), status_code=400, operation=operation) from exc

    async def query_availability(
        self,
        date: str,
        appointment_type: AppointmentTypeConfig,
    ) -> list[AvailabilitySlot]:
        data = await self._call("availability", mock.availability, date, appointment_type.key)
        return [AvailabilitySlot.model_validate(s) for s in data["available_slots"]]

    async def book(
        self,
        appointment_type: AppointmentTypeConfig,
        date: str,
        slot: AvailabilitySlot,
        *,
        name: str,
        email: str,
        phone: str,
        reason: str | None = None,
    ) -> BookingConfirmation:
        patient = {"name": name, "email": email, "phone": phone}
        data = await self._call(
            "book", mock.book, appointment_type.key, date, slot.start_time, patient, reason,
        )
        return BookingConfirmation.model_validate(data)

    async def reschedule(
        self,
        booking_id: str,
        date: str,
        start_time: str,
    ) -> RescheduleConfirmation:
        data = await self._call("reschedule", mock.reschedule, booking_id, date, start_time)
        return RescheduleConfirmation.model_validate(data)

    async def cancel(
        self,
        booking_id: str,
        reason: str | None = None,
    ) -> CancellationConfirmation:
        data = await self._call("cancel", mock.cancel, booking_id, reason)
        return CancellationConfirmation.model_validate(data)
