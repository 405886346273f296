"""Pydantic schemas for the mock scheduling backend endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Patient(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)


class Slot(BaseModel):
    start_time: str = Field(..., description="HH:mm")
    end_time: str = Field(..., description="HH:mm")
    available: bool


class BookRequest(BaseModel):
    """Book a slot for a patient."""

    appointment_type: str = Field(..., description="consultation | followup | physical | specialist")
    date: str = Field(..., description="YYYY-MM-DD")
    start_time: str = Field(..., description="HH:mm")
    patient: Patient
    reason: str | None = None


class RescheduleRequest(BaseModel):
    booking_id: str = Field(..., min_length=1)
    date: str = Field(..., description="YYYY-MM-DD")
    start_time: str = Field(..., description="HH:mm")


class CancelRequest(BaseModel):
    booking_id: str = Field(..., min_length=1)
    reason: str | None = None


class AvailabilityResponse(BaseModel):
    date: str
    appointment_type: str
    available_slots: list[Slot]


class BookResponse(BaseModel):
    booking_id: str
    status: str = "confirmed"
    confirmation_code: str
    appointment_type: str
    date: str
    start_time: str
    patient: Patient
    reason: str | None = None


class RescheduleResponse(BaseModel):
    booking_id: str
    status: str = "rescheduled"
    previous_booking_id: str
    date: str
    start_time: str


class CancelResponse(BaseModel):
    booking_id: str
    status: str = "cancelled"
    reason: str | None = None


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "scheduling-agent"
