"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    MISSED = "missed"
    CANCELLED = "cancelled"


class StaffRole(str, Enum):
    """Roles of the staff members operating the dashboard."""

    RECEPTIONIST = "receptionist"
    DOCTOR = "doctor"
    ADMIN = "admin"


class Actor(BaseModel):
    """The staff member on whose behalf an engine operation runs."""

    uid: str = Field(..., min_length=1)
    name: str = ""
    role: StaffRole = StaffRole.RECEPTIONIST

    @property
    def display_name(self) -> str:
        """Name used in activity messages."""
        return self.name or "Someone"


class Appointment(BaseModel):
    """A stored appointment record."""

    id: str
    patient_name: str
    patient_phone: str | None = None
    date: str
    time: str
    doctor_id: str | None = None
    doctor_name: str | None = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    is_follow_up: bool = False
    previous_appointment_id: str | None = None
    is_late: bool = False
    original_time: str | None = None
    delay_reason: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def delay_minutes(self) -> int | None:
        """Minutes the appointment is running behind its booked time."""
        from app.scheduling.delays import delay_minutes

        return delay_minutes(self)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def delay_visible(self) -> bool:
        """Whether the late badge should be shown; hidden once the appointment is closed."""
        from app.scheduling.delays import is_delay_visible

        return is_delay_visible(self)


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment."""

    patient_name: str = Field(..., max_length=200)
    patient_phone: str | None = Field(None, max_length=20)
    date: str | None = Field(None, description="Local calendar date, YYYY-MM-DD")
    time: str | None = Field(None, description="Wall-clock time HH:MM, or 'on-call'")
    is_on_call: bool = False
    doctor_id: str | None = None
    doctor_name: str | None = Field(None, max_length=200)
    notes: str | None = Field(None, max_length=1000)
    is_follow_up: bool = False
    previous_appointment_id: str | None = None


class FollowUpCreate(BaseModel):
    """Schema for booking a follow-up to an existing appointment."""

    date: str | None = None
    time: str | None = None
    is_on_call: bool = False
    doctor_id: str | None = None
    doctor_name: str | None = Field(None, max_length=200)
    notes: str | None = Field(None, max_length=1000)


class AppointmentUpdate(BaseModel):
    """Schema for rescheduling or editing an appointment; status is not editable here."""

    patient_name: str | None = Field(None, max_length=200)
    patient_phone: str | None = Field(None, max_length=20)
    date: str | None = None
    time: str | None = None
    is_on_call: bool | None = None
    doctor_id: str | None = None
    doctor_name: str | None = Field(None, max_length=200)
    notes: str | None = Field(None, max_length=1000)


class AppointmentStatusUpdate(BaseModel):
    """Schema for updating appointment status."""

    status: AppointmentStatus


class MarkLateRequest(BaseModel):
    """Schema for marking an appointment as running late."""

    minutes: int
    reason: str | None = Field(None, max_length=500)


class BookingResponse(BaseModel):
    """Result of a booking; ``conflict`` is advisory and never blocks the write."""

    id: str
    conflict: Appointment | None = None


class ConflictResponse(BaseModel):
    """Result of a standalone conflict check."""

    conflict: Appointment | None = None


class RescheduleResponse(BaseModel):
    """Result of a reschedule or edit."""

    appointment: Appointment
    conflict: Appointment | None = None


class StatusChangeResponse(BaseModel):
    """Result of a status transition."""

    appointment: Appointment
    follow_up_suggested: bool


class AppointmentView(str, Enum):
    """Calendar windows offered by the listing endpoint."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class AppointmentListResponse(BaseModel):
    """Schema for appointment list response."""

    total: int
    items: list[Appointment]
