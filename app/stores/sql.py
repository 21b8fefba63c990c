"""PostgreSQL-backed stores using SQLAlchemy Core."""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.core.exceptions import NotFoundException, StoreUnavailableException
from app.models.activity_logs import activity_logs
from app.models.appointments import appointments
from app.schemas.activity import ActivityLogEntry
from app.schemas.appointments import Appointment, AppointmentStatus
from app.stores.base import ActivityLogStore, AppointmentStore

logger = get_logger(__name__)

_UNAVAILABLE_ERRORS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    PoolTimeoutError,
    OSError,
)


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Surface connectivity failures as ``StoreUnavailableException``."""
    try:
        yield
    except _UNAVAILABLE_ERRORS as e:
        logger.warning("store_unavailable", backend="postgres", operation=operation, error=str(e))
        raise StoreUnavailableException() from e


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except (TypeError, ValueError):
        return False
    return True


def _status_values(statuses: Sequence[AppointmentStatus]) -> list[str]:
    return [AppointmentStatus(s).value for s in statuses]


class SqlAppointmentStore(AppointmentStore):
    """Appointment store over the ``appointments`` table."""

    def __init__(self, db: AsyncSession):
        """Initialize store with database session."""
        self.db = db

    async def _fetch(self, *conditions) -> list[Appointment]:
        stmt = select(appointments)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        with translate_errors("query"):
            result = await self.db.execute(stmt)
            rows = result.fetchall()
        return [Appointment.model_validate(dict(row._mapping)) for row in rows]

    async def create(self, fields: dict[str, Any]) -> str:
        stmt = insert(appointments).values(**fields).returning(appointments.c.id)
        with translate_errors("create"):
            result = await self.db.execute(stmt)
            await self.db.commit()
        return str(result.scalar_one())

    async def get(self, appointment_id: str) -> Appointment | None:
        if not _is_uuid(appointment_id):
            return None
        rows = await self._fetch(appointments.c.id == appointment_id)
        return rows[0] if rows else None

    async def update(self, appointment_id: str, fields: dict[str, Any]) -> None:
        if not _is_uuid(appointment_id):
            raise NotFoundException("Appointment not found")
        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(**fields, updated_at=datetime.now(UTC))
        )
        with translate_errors("update"):
            result = await self.db.execute(stmt)
            await self.db.commit()
        if result.rowcount == 0:
            raise NotFoundException("Appointment not found")

    async def delete(self, appointment_id: str) -> None:
        if not _is_uuid(appointment_id):
            raise NotFoundException("Appointment not found")
        stmt = delete(appointments).where(appointments.c.id == appointment_id)
        with translate_errors("delete"):
            result = await self.db.execute(stmt)
            await self.db.commit()
        if result.rowcount == 0:
            raise NotFoundException("Appointment not found")

    async def query_by_date_and_status(
        self,
        date: str,
        time: str | None = None,
        statuses: Sequence[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        conditions = [appointments.c.date == date]
        if time is not None:
            conditions.append(appointments.c.time == time)
        if statuses is not None:
            conditions.append(appointments.c.status.in_(_status_values(statuses)))
        return await self._fetch(*conditions)

    async def query_by_date_range(
        self,
        from_date: str,
        to_date: str,
        statuses: Sequence[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        conditions = [appointments.c.date >= from_date, appointments.c.date < to_date]
        if statuses is not None:
            conditions.append(appointments.c.status.in_(_status_values(statuses)))
        return await self._fetch(*conditions)

    async def query_by_doctor(self, doctor_id: str) -> list[Appointment]:
        return await self._fetch(appointments.c.doctor_id == doctor_id)

    async def list_all(self) -> list[Appointment]:
        return await self._fetch()

    async def ping(self) -> bool:
        try:
            await self.db.execute(select(1))
            return True
        except Exception:
            return False


class SqlActivityLogStore(ActivityLogStore):
    """Activity log over the ``activity_logs`` table."""

    def __init__(self, db: AsyncSession):
        """Initialize store with database session."""
        self.db = db

    async def create(self, fields: dict[str, Any]) -> str:
        stmt = insert(activity_logs).values(**fields).returning(activity_logs.c.id)
        with translate_errors("create_activity"):
            result = await self.db.execute(stmt)
            await self.db.commit()
        return str(result.scalar_one())

    async def list_recent(self, limit: int = 20) -> list[ActivityLogEntry]:
        stmt = select(activity_logs).order_by(activity_logs.c.created_at.desc()).limit(limit)
        with translate_errors("list_activity"):
            result = await self.db.execute(stmt)
            rows = result.fetchall()
        return [ActivityLogEntry.model_validate(dict(row._mapping)) for row in rows]
