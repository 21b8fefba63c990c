"""Appointment scheduling engine.

Every operation is a short read-decide-write against the store with no
locking: concurrent writers to the same appointment race and the last write
wins. Conflicts are advisory, so double-booking is reported but allowed.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from app.core.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from app.schemas.appointments import (
    Actor,
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    BookingResponse,
    FollowUpCreate,
    RescheduleResponse,
    StatusChangeResponse,
)
from app.scheduling.conflicts import ACTIVE_STATUSES, find_conflict
from app.scheduling.delays import apply_delay, revert_delay
from app.scheduling.lifecycle import is_terminal, suggests_follow_up, validate_transition
from app.scheduling.timeslots import (
    add_days,
    add_months,
    is_on_call,
    local_now,
    minutes_until,
    resolve_slot_time,
    sort_appointments,
    to_date_string,
    validate_date,
)
from app.stores.base import AppointmentStore

logger = structlog.get_logger(__name__)


class AppointmentService:
    """Facade over conflict detection, delays and the status lifecycle."""

    def __init__(
        self,
        store: AppointmentStore,
        clock: Callable[[], datetime] | None = None,
        confirmation_window_minutes: int = 60,
    ):
        """
        Initialize service.

        Args:
            store: Appointment store
            clock: Returns the clinic's current wall-clock time (naive)
            confirmation_window_minutes: Lead time for unconfirmed reminders
        """
        self.store = store
        self.clock = clock or local_now
        self.confirmation_window_minutes = confirmation_window_minutes

    async def get_appointment(self, appointment_id: str) -> Appointment:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
        """
        appointment = await self.store.get(appointment_id)
        if appointment is None:
            raise NotFoundException("Appointment not found")
        return appointment

    async def check_conflict(
        self, date: str, time: str, exclude_id: str | None = None
    ) -> Appointment | None:
        """Advisory slot check for a candidate date and time."""
        date = validate_date(date)
        time = resolve_slot_time(time, on_call=False)
        return await find_conflict(self.store, date, time, exclude_id)

    async def create_appointment(self, data: AppointmentCreate, actor: Actor) -> BookingResponse:
        """
        Book a new appointment in ``scheduled`` status.

        A conflicting booking in the same slot is returned alongside the new
        id; the write happens regardless.

        Args:
            data: Booking details
            actor: Staff member making the booking

        Returns:
            New appointment id and any conflicting appointment

        Raises:
            ValidationException: If patient name, date or time are missing or malformed
        """
        patient_name = (data.patient_name or "").strip()
        if not patient_name:
            raise ValidationException("Patient name is required")
        date = validate_date(data.date)
        time = resolve_slot_time(data.time, data.is_on_call)

        if data.is_follow_up and not data.previous_appointment_id:
            raise ValidationException("A follow-up appointment must reference the previous appointment")
        if data.previous_appointment_id and not data.is_follow_up:
            raise ValidationException("Only follow-up appointments may reference a previous appointment")

        conflict = await find_conflict(self.store, date, time)

        fields: dict[str, Any] = {
            "patient_name": patient_name,
            "patient_phone": data.patient_phone or None,
            "date": date,
            "time": time,
            "doctor_id": data.doctor_id or None,
            "doctor_name": data.doctor_name or None,
            "notes": data.notes,
            "status": AppointmentStatus.SCHEDULED.value,
            "is_follow_up": data.is_follow_up,
            "previous_appointment_id": data.previous_appointment_id,
            "is_late": False,
            "created_by": actor.uid,
        }
        appointment_id = await self.store.create(fields)

        logger.info(
            "appointment_created",
            appointment_id=appointment_id,
            date=date,
            time=time,
            is_follow_up=data.is_follow_up,
            actor_id=actor.uid,
        )
        if conflict is not None:
            logger.warning(
                "appointment_conflict_detected",
                appointment_id=appointment_id,
                conflicting_id=conflict.id,
                date=date,
                time=time,
            )

        return BookingResponse(id=appointment_id, conflict=conflict)

    async def book_follow_up(
        self, previous_id: str, data: FollowUpCreate, actor: Actor
    ) -> BookingResponse:
        """
        Book a follow-up for ``previous_id``, copying the patient details.

        The doctor is carried over unless the request names one.
        """
        previous = await self.get_appointment(previous_id)
        doctor_id = data.doctor_id if data.doctor_id is not None else previous.doctor_id
        doctor_name = data.doctor_name if data.doctor_name is not None else previous.doctor_name

        booking = AppointmentCreate(
            patient_name=previous.patient_name,
            patient_phone=previous.patient_phone,
            date=data.date,
            time=data.time,
            is_on_call=data.is_on_call,
            doctor_id=doctor_id,
            doctor_name=doctor_name,
            notes=data.notes,
            is_follow_up=True,
            previous_appointment_id=previous.id,
        )
        return await self.create_appointment(booking, actor)

    async def update_appointment(
        self, appointment_id: str, data: AppointmentUpdate, actor: Actor
    ) -> RescheduleResponse:
        """
        Reschedule or edit an active appointment without changing its status.

        Conflict detection re-runs against the resulting slot, excluding the
        appointment itself. Moving the slot drops any running-late state,
        which referred to the old booking.

        Raises:
            NotFoundException: If appointment not found
            InvalidTransitionException: If the appointment is already closed
            ValidationException: If the new values are malformed
        """
        current = await self.get_appointment(appointment_id)
        if is_terminal(current.status):
            raise InvalidTransitionException(
                current.status.value,
                message=f"Cannot reschedule a {current.status.value} appointment",
            )

        changes = data.model_dump(exclude_unset=True)
        fields: dict[str, Any] = {}

        if "patient_name" in changes:
            patient_name = (changes["patient_name"] or "").strip()
            if not patient_name:
                raise ValidationException("Patient name is required")
            fields["patient_name"] = patient_name
        for key in ("patient_phone", "doctor_id", "doctor_name", "notes"):
            if key in changes:
                fields[key] = changes[key]

        date = validate_date(changes["date"]) if "date" in changes else current.date
        if "time" in changes or "is_on_call" in changes:
            on_call = bool(changes.get("is_on_call"))
            requested_time = changes.get("time")
            if requested_time is None and not on_call and not is_on_call(current.time):
                requested_time = current.time
            time = resolve_slot_time(requested_time, on_call)
        else:
            time = current.time

        slot_moved = date != current.date or time != current.time
        if slot_moved:
            fields.update(date=date, time=time, is_late=False, original_time=None)

        conflict = await find_conflict(self.store, date, time, exclude_id=appointment_id)

        fields["updated_by"] = actor.uid
        await self.store.update(appointment_id, fields)

        logger.info(
            "appointment_rescheduled" if slot_moved else "appointment_updated",
            appointment_id=appointment_id,
            date=date,
            time=time,
            conflicting_id=conflict.id if conflict else None,
            actor_id=actor.uid,
        )
        return RescheduleResponse(
            appointment=await self.get_appointment(appointment_id),
            conflict=conflict,
        )

    async def reschedule(
        self,
        appointment_id: str,
        new_date: str,
        new_time: str,
        actor: Actor,
    ) -> Appointment | None:
        """
        Move an appointment to a new slot.

        Returns:
            The conflicting appointment, if any (advisory only)
        """
        result = await self.update_appointment(
            appointment_id,
            AppointmentUpdate(date=new_date, time=new_time),
            actor,
        )
        return result.conflict

    async def change_status(
        self,
        appointment_id: str,
        new_status: AppointmentStatus,
        actor: Actor,
    ) -> StatusChangeResponse:
        """
        Apply a lifecycle transition.

        Returns:
            Updated appointment and whether a follow-up booking should be offered

        Raises:
            NotFoundException: If appointment not found
            InvalidTransitionException: If the transition is not legal
        """
        current = await self.get_appointment(appointment_id)
        validate_transition(current.status, new_status)

        await self.store.update(
            appointment_id,
            {"status": AppointmentStatus(new_status).value, "updated_by": actor.uid},
        )

        follow_up_suggested = suggests_follow_up(new_status)
        logger.info(
            "appointment_status_changed",
            appointment_id=appointment_id,
            old_status=current.status.value,
            new_status=AppointmentStatus(new_status).value,
            follow_up_suggested=follow_up_suggested,
            actor_id=actor.uid,
        )
        return StatusChangeResponse(
            appointment=await self.get_appointment(appointment_id),
            follow_up_suggested=follow_up_suggested,
        )

    async def mark_late(
        self,
        appointment_id: str,
        minutes: int,
        reason: str | None,
        actor: Actor,
    ) -> Appointment:
        """
        Push an active appointment back by ``minutes``.

        Raises:
            NotFoundException: If appointment not found
            ValidationException: If closed, on-call, or minutes out of range
        """
        current = await self.get_appointment(appointment_id)
        if current.status not in ACTIVE_STATUSES:
            raise ValidationException(f"Cannot delay a {current.status.value} appointment")

        change = apply_delay(current, minutes, reason)
        await self.store.update(appointment_id, {**change.as_fields(), "updated_by": actor.uid})

        logger.info(
            "appointment_marked_late",
            appointment_id=appointment_id,
            minutes=minutes,
            new_time=change.time,
            original_time=change.original_time,
            actor_id=actor.uid,
        )
        return await self.get_appointment(appointment_id)

    async def revert_late(self, appointment_id: str, actor: Actor) -> Appointment:
        """
        Return a delayed appointment to its originally booked time.

        Allowed whatever the status, so a closed appointment that still
        carries a delay can be set back to its booked time.

        Raises:
            NotFoundException: If appointment not found
            ValidationException: If the appointment is not running late
        """
        current = await self.get_appointment(appointment_id)
        change = revert_delay(current)
        await self.store.update(appointment_id, {**change.as_fields(), "updated_by": actor.uid})

        logger.info(
            "appointment_late_reverted",
            appointment_id=appointment_id,
            restored_time=change.time,
            status=current.status.value,
            actor_id=actor.uid,
        )
        return await self.get_appointment(appointment_id)

    async def delete_appointment(self, appointment_id: str, actor: Actor) -> Appointment:
        """Hard delete; callers restrict this to administrators."""
        current = await self.get_appointment(appointment_id)
        await self.store.delete(appointment_id)
        logger.info("appointment_deleted", appointment_id=appointment_id, actor_id=actor.uid)
        return current

    def today(self) -> str:
        """The clinic's current calendar day as YYYY-MM-DD."""
        return to_date_string(self.clock().date())

    async def list_today(self) -> list[Appointment]:
        rows = await self.store.query_by_date_and_status(self.today())
        return sort_appointments(rows)

    async def list_week(self) -> list[Appointment]:
        """Appointments from today up to, not including, the same weekday next week."""
        today = self.clock().date()
        rows = await self.store.query_by_date_range(
            to_date_string(today), to_date_string(add_days(today, 7))
        )
        return sort_appointments(rows)

    async def list_month(self) -> list[Appointment]:
        today = self.clock().date()
        rows = await self.store.query_by_date_range(
            to_date_string(today), to_date_string(add_months(today, 1))
        )
        return sort_appointments(rows)

    async def list_all(self) -> list[Appointment]:
        """Every appointment, newest date first."""
        return sort_appointments(await self.store.list_all(), newest_first=True)

    async def list_for_doctor(self, doctor_id: str) -> list[Appointment]:
        return sort_appointments(await self.store.query_by_doctor(doctor_id))

    async def _starting_within(
        self, minutes: float, statuses: tuple[AppointmentStatus, ...]
    ) -> list[Appointment]:
        now = self.clock()
        rows = await self.store.query_by_date_and_status(self.today(), statuses=statuses)
        return sort_appointments(
            [
                row
                for row in rows
                if not is_on_call(row.time) and 0 < minutes_until(row.time, now) <= minutes
            ]
        )

    async def list_upcoming(self, minutes_threshold: int) -> list[Appointment]:
        """Today's active appointments starting within ``minutes_threshold`` minutes."""
        return await self._starting_within(minutes_threshold, ACTIVE_STATUSES)

    async def list_needing_confirmation(self) -> list[Appointment]:
        """Today's unconfirmed appointments starting within the confirmation window."""
        return await self._starting_within(
            self.confirmation_window_minutes, (AppointmentStatus.SCHEDULED,)
        )
