"""FastAPI route definitions: health check and the mock scheduling backend.

Backend validation failures are raised as ``BackendValidationError`` and
turned into ``400 {"error": ...}`` by the exception handlers registered in
``server.py``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from scheduling_agent import config
from scheduling_agent.api.schemas import (
    AvailabilityResponse,
    BookRequest,
    BookResponse,
    CancelRequest,
    CancelResponse,
    ErrorResponse,
    HealthResponse,
    RescheduleRequest,
    RescheduleResponse,
)
from scheduling_agent.backend import mock

logger = logging.getLogger(__name__)

router = APIRouter()


def require_token(authorization: str | None = Header(default=None)) -> None:
    """Enforce ``Bearer <SCHEDULING_API_TOKEN>`` when a token is configured."""
    expected = config.SCHEDULING_API_TOKEN
    if not expected:
        return
    if authorization != f"Bearer {expected}":
        raise HTTPException(status_code=401, detail="Invalid or missing API token.")


scheduling = APIRouter(
    prefix="/scheduling",
    dependencies=[Depends(require_token)],
    responses={400: {"model": ErrorResponse}},
)


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@scheduling.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    date: str = Query(..., description="YYYY-MM-DD"),
    appointment_type: str = Query(..., description="consultation | followup | physical | specialist"),
):
    """List every slot of the working day with its availability flag."""
    return mock.availability(date, appointment_type)


@scheduling.post("/book", response_model=BookResponse)
async def book(request: BookRequest):
    return mock.book(
        request.appointment_type,
        request.date,
        request.start_time,
        request.patient.model_dump(),
        request.reason,
    )


@scheduling.post("/reschedule", response_model=RescheduleResponse)
async def reschedule(request: RescheduleRequest):
    return mock.reschedule(request.booking_id, request.date, request.start_time)


@scheduling.post("/cancel", response_model=CancelResponse)
async def cancel(request: CancelRequest):
    return mock.cancel(request.booking_id, request.reason)


router.include_router(scheduling)
