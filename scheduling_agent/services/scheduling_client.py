"""Remote Scheduling Client: the contract with the scheduling backend.

``SchedulingClient`` is the abstract interface the conversation flows talk to.
``HttpSchedulingClient`` implements it over the backend's REST API (see
``scheduling_agent.api.routes`` for the server side).

The client makes exactly one attempt per call: no retries, no caching and no
idempotency keys.  Preventing double-booking is the backend's job.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from scheduling_agent.config import (
    REQUEST_TIMEOUT_SECONDS,
    SCHEDULING_API_BASE_URL,
    SCHEDULING_API_TOKEN,
    SCHEDULING_BACKEND,
)
from scheduling_agent.errors import RemoteCallError
from scheduling_agent.models import (
    AppointmentTypeConfig,
    AvailabilitySlot,
    BookingConfirmation,
    CancellationConfirmation,
    RescheduleConfirmation,
)
from scheduling_agent.services.metrics import metrics

logger = logging.getLogger(__name__)

# Fallback messages when the backend does not say what went wrong.
_GENERIC_ERRORS = {
    "availability": "Failed to fetch availability.",
    "book": "Failed to book appointment.",
    "reschedule": "Failed to reschedule appointment.",
    "cancel": "Failed to cancel appointment.",
}

_SLOT_LIST = TypeAdapter(list[AvailabilitySlot])


class SchedulingClient(ABC):
    """Asynchronous interface to the four backend operations.

    Every method raises :class:`RemoteCallError` when the backend does not
    succeed.
    """

    @abstractmethod
    async def query_availability(
        self,
        date: str,
        appointment_type: AppointmentTypeConfig,
    ) -> list[AvailabilitySlot]:
        """Return every slot for *date*, in backend order, available or not."""

    @abstractmethod
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
        """Book *slot* on *date* for the given patient."""

    @abstractmethod
    async def reschedule(
        self,
        booking_id: str,
        date: str,
        start_time: str,
    ) -> RescheduleConfirmation:
        """Move an existing booking; the backend issues a new booking ID."""

    @abstractmethod
    async def cancel(
        self,
        booking_id: str,
        reason: str | None = None,
    ) -> CancellationConfirmation:
        """Cancel an existing booking."""

    async def aclose(self) -> None:
        """Release any held resources.  No-op by default."""


class HttpSchedulingClient(SchedulingClient):
    """``SchedulingClient`` over the backend REST API using ``httpx``."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Content-Type": "application/json"}
        token = token or SCHEDULING_API_TOKEN
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._base_url = (base_url or SCHEDULING_API_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=timeout if timeout is not None else REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> HttpSchedulingClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Internal helpers ─────────────────────────────────────────────

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute one HTTP request and map every failure to RemoteCallError."""
        async with metrics.track(operation):
            try:
                response = await self._client.request(
                    method, path, params=params, json=json_body,
                )
            except httpx.HTTPError as exc:
                logger.warning(
                    "Scheduling API %s %s failed (%s)", method, path, type(exc).__name__,
                )
                raise RemoteCallError(
                    _GENERIC_ERRORS[operation], operation=operation,
                ) from exc

            if not response.is_success:
                raise RemoteCallError(
                    _error_message(response, operation),
                    status_code=response.status_code,
                    operation=operation,
                )

            try:
                body = response.json()
            except ValueError as exc:
                raise RemoteCallError(
                    _GENERIC_ERRORS[operation],
                    status_code=response.status_code,
                    operation=operation,
                ) from exc

            if not isinstance(body, dict):
                logger.error("Scheduling API %s returned a non-object body", operation)
                raise RemoteCallError(
                    _GENERIC_ERRORS[operation],
                    status_code=response.status_code,
                    operation=operation,
                )
            return body

    # ── Public API methods ───────────────────────────────────────────

    async def query_availability(
        self,
        date: str,
        appointment_type: AppointmentTypeConfig,
    ) -> list[AvailabilitySlot]:
        data = await self._request(
            "availability",
            "GET",
            "/availability",
            params={"date": date, "appointment_type": appointment_type.key},
        )
        return _parse(
            "availability",
            lambda: _SLOT_LIST.validate_python(data.get("available_slots")),
        )

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
        data = await self._request(
            "book",
            "POST",
            "/book",
            json_body={
                "appointment_type": appointment_type.key,
                "date": date,
                "start_time": slot.start_time,
                "patient": {"name": name, "email": email, "phone": phone},
                "reason": reason,
            },
        )
        return _parse("book", lambda: BookingConfirmation.model_validate(data))

    async def reschedule(
        self,
        booking_id: str,
        date: str,
        start_time: str,
    ) -> RescheduleConfirmation:
        data = await self._request(
            "reschedule",
            "POST",
            "/reschedule",
            json_body={"booking_id": booking_id, "date": date, "start_time": start_time},
        )
        return _parse("reschedule", lambda: RescheduleConfirmation.model_validate(data))

    async def cancel(
        self,
        booking_id: str,
        reason: str | None = None,
    ) -> CancellationConfirmation:
        data = await self._request(
            "cancel",
            "POST",
            "/cancel",
            json_body={"booking_id": booking_id, "reason": reason},
        )
        return _parse("cancel", lambda: CancellationConfirmation.model_validate(data))


def _error_message(response: httpx.Response, operation: str) -> str:
    """Prefer the backend's ``{"error": ...}`` message over the generic one."""
    try:
        body = response.json()
    except ValueError:
        return _GENERIC_ERRORS[operation]
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return _GENERIC_ERRORS[operation]


def _parse(operation: str, build):
    """Validate a success payload; a malformed one is a failed call too."""
    try:
        return build()
    except ValidationError as exc:
        logger.error("Malformed %s response from scheduling API: %s", operation, exc)
        raise RemoteCallError(_GENERIC_ERRORS[operation], operation=operation) from exc


# ── Module-level factory (thread-safe) ──────────────────────────────
_client: SchedulingClient | None = None
_client_lock = threading.Lock()


def get_scheduling_client() -> SchedulingClient:
    """Return the process-wide client selected by ``SCHEDULING_BACKEND``.

    ``memory`` runs the mock backend in-process; ``http`` talks to a running
    backend at ``SCHEDULING_API_BASE_URL``.
    """
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                if SCHEDULING_BACKEND == "http":
                    _client = HttpSchedulingClient()
                else:
                    from scheduling_agent.services.in_memory_client import (  # noqa: PLC0415
                        InMemorySchedulingClient,
                    )

                    _client = InMemorySchedulingClient()
                logger.debug("Scheduling client: %s", type(_client).__name__)
    return _client
