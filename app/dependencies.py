"""FastAPI dependencies."""

from collections.abc import AsyncGenerator
from functools import partial
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from app.config import settings
from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.core.firebase import get_firestore_client
from app.core.security import decode_access_token
from app.database import get_session_factory
from app.schemas.appointments import Actor, StaffRole
from app.scheduling.timeslots import local_now
from app.services.activity_service import ActivityService
from app.services.appointment_service import AppointmentService
from app.stores.base import ActivityLogStore, AppointmentStore
from app.stores.firestore import FirestoreActivityLogStore, FirestoreAppointmentStore
from app.stores.memory import InMemoryActivityLogStore, InMemoryAppointmentStore
from app.stores.sql import SqlActivityLogStore, SqlAppointmentStore

# Security
security = HTTPBearer()

# Process-wide stores for APPOINTMENT_STORE=memory
_memory_appointment_store = InMemoryAppointmentStore()
_memory_activity_store = InMemoryActivityLogStore()


def _credentials_error(detail: str = "Could not validate credentials") -> UnauthorizedException:
    return UnauthorizedException(detail)


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> Actor:
    """
    Build the acting staff member from the bearer token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Actor carrying the token's ``sub``, ``name`` and ``role`` claims

    Raises:
        UnauthorizedException: If token is invalid or expired
    """
    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise _credentials_error()

    uid = payload.get("sub")
    if uid is None or not isinstance(uid, str):
        raise _credentials_error()

    try:
        return Actor(
            uid=uid,
            name=payload.get("name") or "",
            role=payload.get("role") or StaffRole.RECEPTIONIST,
        )
    except ValidationError:
        raise _credentials_error("Invalid staff role")


async def require_admin(actor: Annotated[Actor, Depends(get_current_actor)]) -> Actor:
    """Allow only administrators through."""
    if actor.role is not StaffRole.ADMIN:
        raise ForbiddenException("Only administrators can delete appointments")
    return actor


async def get_appointment_store() -> AsyncGenerator[AppointmentStore, None]:
    """Appointment store for the configured backend."""
    if settings.appointment_store == "postgres":
        async with get_session_factory()() as session:
            yield SqlAppointmentStore(session)
    elif settings.appointment_store == "firestore":
        yield FirestoreAppointmentStore(
            get_firestore_client(), settings.firestore_appointments_collection
        )
    else:
        yield _memory_appointment_store


async def get_activity_store() -> AsyncGenerator[ActivityLogStore, None]:
    """Activity log store for the configured backend."""
    if settings.appointment_store == "postgres":
        async with get_session_factory()() as session:
            yield SqlActivityLogStore(session)
    elif settings.appointment_store == "firestore":
        yield FirestoreActivityLogStore(
            get_firestore_client(), settings.firestore_activity_collection
        )
    else:
        yield _memory_activity_store


def get_appointment_service(
    store: Annotated[AppointmentStore, Depends(get_appointment_store)],
) -> AppointmentService:
    """Scheduling engine bound to the request's store and the clinic clock."""
    return AppointmentService(
        store,
        clock=partial(local_now, settings.clinic_timezone),
        confirmation_window_minutes=settings.confirmation_window_minutes,
    )


def get_activity_service(
    store: Annotated[ActivityLogStore, Depends(get_activity_store)],
) -> ActivityService:
    return ActivityService(store)


# Type aliases for dependency injection
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
AdminActor = Annotated[Actor, Depends(require_admin)]
Appointments = Annotated[AppointmentService, Depends(get_appointment_service)]
Activity = Annotated[ActivityService, Depends(get_activity_service)]
AppointmentStoreDep = Annotated[AppointmentStore, Depends(get_appointment_store)]
