"""In-process stores for development and tests."""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from app.core.exceptions import NotFoundException
from app.schemas.activity import ActivityLogEntry
from app.schemas.appointments import Appointment, AppointmentStatus
from app.stores.base import ActivityLogStore, AppointmentStore


class InMemoryAppointmentStore(AppointmentStore):
    """Dict-backed appointment store; last writer wins per record."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._records: dict[str, dict[str, Any]] = {}

    def _load(self, appointment_id: str) -> Appointment:
        return Appointment.model_validate({**self._records[appointment_id], "id": appointment_id})

    def _matching(self, predicate) -> list[Appointment]:
        return [
            self._load(appointment_id)
            for appointment_id, record in self._records.items()
            if predicate(record)
        ]

    async def create(self, fields: dict[str, Any]) -> str:
        appointment_id = uuid4().hex
        record = dict(fields)
        record["created_at"] = datetime.now(UTC)
        self._records[appointment_id] = record
        return appointment_id

    async def get(self, appointment_id: str) -> Appointment | None:
        if appointment_id not in self._records:
            return None
        return self._load(appointment_id)

    async def update(self, appointment_id: str, fields: dict[str, Any]) -> None:
        if appointment_id not in self._records:
            raise NotFoundException("Appointment not found")
        self._records[appointment_id].update(fields, updated_at=datetime.now(UTC))

    async def delete(self, appointment_id: str) -> None:
        if self._records.pop(appointment_id, None) is None:
            raise NotFoundException("Appointment not found")

    async def query_by_date_and_status(
        self,
        date: str,
        time: str | None = None,
        statuses: Sequence[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        allowed = {AppointmentStatus(s) for s in statuses} if statuses is not None else None
        return self._matching(
            lambda r: r["date"] == date
            and (time is None or r["time"] == time)
            and (allowed is None or AppointmentStatus(r["status"]) in allowed)
        )

    async def query_by_date_range(
        self,
        from_date: str,
        to_date: str,
        statuses: Sequence[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        allowed = {AppointmentStatus(s) for s in statuses} if statuses is not None else None
        return self._matching(
            lambda r: from_date <= r["date"] < to_date
            and (allowed is None or AppointmentStatus(r["status"]) in allowed)
        )

    async def query_by_doctor(self, doctor_id: str) -> list[Appointment]:
        return self._matching(lambda r: r.get("doctor_id") == doctor_id)

    async def list_all(self) -> list[Appointment]:
        return self._matching(lambda r: True)

    async def ping(self) -> bool:
        return True


class InMemoryActivityLogStore(ActivityLogStore):
    """List-backed activity log."""

    def __init__(self) -> None:
        """Initialize an empty log."""
        self._entries: list[ActivityLogEntry] = []

    async def create(self, fields: dict[str, Any]) -> str:
        entry = ActivityLogEntry(id=uuid4().hex, created_at=datetime.now(UTC), **fields)
        self._entries.append(entry)
        return entry.id

    async def list_recent(self, limit: int = 20) -> list[ActivityLogEntry]:
        return list(reversed(self._entries))[:limit]
