"""Appointment endpoints."""

from fastapi import APIRouter, Query, status

from app.dependencies import Activity, AdminActor, Appointments, CurrentActor
from app.schemas.appointments import (
    Appointment,
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    AppointmentView,
    BookingResponse,
    ConflictResponse,
    FollowUpCreate,
    MarkLateRequest,
    RescheduleResponse,
    StatusChangeResponse,
)

router = APIRouter()


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book new appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    current_actor: CurrentActor,
    service: Appointments,
    activity: Activity,
) -> BookingResponse:
    """
    Book a new appointment.

    A double booking is allowed; the clashing appointment is returned in
    ``conflict`` so the caller can warn about it.
    """
    booking = await service.create_appointment(data, current_actor)
    await activity.appointment_created(await service.get_appointment(booking.id), current_actor)
    return booking


@router.get(
    "/",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    current_actor: CurrentActor,
    service: Appointments,
    view: AppointmentView = Query(AppointmentView.ALL),
    doctor_id: str | None = Query(None),
) -> AppointmentListResponse:
    """
    List appointments for a calendar window, or for one doctor.

    Args:
        view: all, today, week (next 7 days) or month (next calendar month)
        doctor_id: When given, list every appointment for this doctor instead
    """
    if doctor_id:
        items = await service.list_for_doctor(doctor_id)
    elif view is AppointmentView.TODAY:
        items = await service.list_today()
    elif view is AppointmentView.WEEK:
        items = await service.list_week()
    elif view is AppointmentView.MONTH:
        items = await service.list_month()
    else:
        items = await service.list_all()
    return AppointmentListResponse(total=len(items), items=items)


@router.get(
    "/upcoming",
    response_model=AppointmentListResponse,
    tags=["Appointments"],
    summary="Appointments starting soon",
)
async def list_upcoming(
    current_actor: CurrentActor,
    service: Appointments,
    minutes: int = Query(15, ge=1, le=24 * 60),
) -> AppointmentListResponse:
    """Today's active appointments starting within the next ``minutes`` minutes."""
    items = await service.list_upcoming(minutes)
    return AppointmentListResponse(total=len(items), items=items)


@router.get(
    "/needing-confirmation",
    response_model=AppointmentListResponse,
    tags=["Appointments"],
    summary="Unconfirmed appointments starting soon",
)
async def list_needing_confirmation(
    current_actor: CurrentActor,
    service: Appointments,
) -> AppointmentListResponse:
    items = await service.list_needing_confirmation()
    return AppointmentListResponse(total=len(items), items=items)


@router.get(
    "/conflicts",
    response_model=ConflictResponse,
    tags=["Appointments"],
    summary="Check a slot for double booking",
)
async def check_conflict(
    current_actor: CurrentActor,
    service: Appointments,
    date: str = Query(...),
    time: str = Query(...),
    exclude_id: str | None = Query(None),
) -> ConflictResponse:
    """Report an active appointment already booked at ``date`` and ``time``."""
    return ConflictResponse(conflict=await service.check_conflict(date, time, exclude_id))


@router.get(
    "/{appointment_id}",
    response_model=Appointment,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: str,
    current_actor: CurrentActor,
    service: Appointments,
) -> Appointment:
    return await service.get_appointment(appointment_id)


@router.put(
    "/{appointment_id}",
    response_model=RescheduleResponse,
    tags=["Appointments"],
    summary="Reschedule or edit appointment",
)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    current_actor: CurrentActor,
    service: Appointments,
    activity: Activity,
) -> RescheduleResponse:
    """
    Edit date, time, patient, doctor or notes of an active appointment.

    Status is unchanged. Any clash with the new slot is reported, not enforced.
    """
    result = await service.update_appointment(appointment_id, data, current_actor)
    await activity.appointment_updated(result.appointment, current_actor)
    return result


@router.patch(
    "/{appointment_id}/status",
    response_model=StatusChangeResponse,
    tags=["Appointments"],
    summary="Update appointment status",
)
async def update_appointment_status(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    current_actor: CurrentActor,
    service: Appointments,
    activity: Activity,
) -> StatusChangeResponse:
    """
    Confirm, cancel, complete or mark an appointment as missed.

    ``follow_up_suggested`` is true after completion.
    """
    result = await service.change_status(appointment_id, data.status, current_actor)
    await activity.status_changed(result.appointment, current_actor)
    return result


@router.post(
    "/{appointment_id}/follow-up",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book follow-up appointment",
)
async def create_follow_up(
    appointment_id: str,
    data: FollowUpCreate,
    current_actor: CurrentActor,
    service: Appointments,
    activity: Activity,
) -> BookingResponse:
    booking = await service.book_follow_up(appointment_id, data, current_actor)
    await activity.appointment_created(await service.get_appointment(booking.id), current_actor)
    return booking


@router.post(
    "/{appointment_id}/late",
    response_model=Appointment,
    tags=["Appointments"],
    summary="Mark appointment as running late",
)
async def mark_late(
    appointment_id: str,
    data: MarkLateRequest,
    current_actor: CurrentActor,
    service: Appointments,
    activity: Activity,
) -> Appointment:
    appointment = await service.mark_late(appointment_id, data.minutes, data.reason, current_actor)
    await activity.appointment_delayed(appointment, data.minutes, current_actor)
    return appointment


@router.delete(
    "/{appointment_id}/late",
    response_model=Appointment,
    tags=["Appointments"],
    summary="Revert running-late status",
)
async def revert_late(
    appointment_id: str,
    current_actor: CurrentActor,
    service: Appointments,
    activity: Activity,
) -> Appointment:
    appointment = await service.revert_late(appointment_id, current_actor)
    await activity.delay_reverted(appointment, current_actor)
    return appointment


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Appointments"],
    summary="Delete appointment",
)
async def delete_appointment(
    appointment_id: str,
    admin: AdminActor,
    service: Appointments,
    activity: Activity,
) -> None:
    """Permanently delete an appointment. Administrators only."""
    appointment = await service.delete_appointment(appointment_id, admin)
    await activity.appointment_deleted(appointment, admin)
