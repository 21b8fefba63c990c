"""Storage interfaces consumed by the scheduling engine."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from app.schemas.activity import ActivityLogEntry
from app.schemas.appointments import Appointment, AppointmentStatus


class AppointmentStore(ABC):
    """
    Durable keyed storage of appointment records.

    Field names are the snake_case names of ``Appointment``. Dates and times
    cross this boundary as plain strings. Implementations stamp ``created_at``
    on create and ``updated_at`` on update, and raise
    ``StoreUnavailableException`` when the backend cannot be reached.
    """

    @abstractmethod
    async def create(self, fields: dict[str, Any]) -> str:
        """Persist a new record and return its id."""

    @abstractmethod
    async def get(self, appointment_id: str) -> Appointment | None:
        """Point read; None when the id does not exist."""

    @abstractmethod
    async def update(self, appointment_id: str, fields: dict[str, Any]) -> None:
        """Partial update in a single write; raises NotFoundException for unknown ids."""

    @abstractmethod
    async def delete(self, appointment_id: str) -> None:
        """Hard delete; raises NotFoundException for unknown ids."""

    @abstractmethod
    async def query_by_date_and_status(
        self,
        date: str,
        time: str | None = None,
        statuses: Sequence[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        """Records on ``date``, optionally narrowed to an exact ``time`` and ``statuses``."""

    @abstractmethod
    async def query_by_date_range(
        self,
        from_date: str,
        to_date: str,
        statuses: Sequence[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        """Records with ``from_date <= date < to_date``."""

    @abstractmethod
    async def query_by_doctor(self, doctor_id: str) -> list[Appointment]:
        """Records assigned to ``doctor_id``."""

    @abstractmethod
    async def list_all(self) -> list[Appointment]:
        """Every record."""

    @abstractmethod
    async def ping(self) -> bool:
        """True when the backend is reachable."""


class ActivityLogStore(ABC):
    """Append-only storage for the human-readable audit trail."""

    @abstractmethod
    async def create(self, fields: dict[str, Any]) -> str:
        """Persist an entry and return its id."""

    @abstractmethod
    async def list_recent(self, limit: int = 20) -> list[ActivityLogEntry]:
        """Newest entries first."""
