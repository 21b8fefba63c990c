"""Firestore-backed stores.

Documents use camelCase field names (``patientName``, ``isLate``...) so that
records written by the web dashboard and by this service are interchangeable.
"""

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from google.api_core.exceptions import (
    DeadlineExceeded,
    InternalServerError,
    NotFound,
    ResourceExhausted,
    RetryError,
    ServiceUnavailable,
)
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from pydantic.alias_generators import to_camel, to_snake
from structlog import get_logger

from app.core.exceptions import NotFoundException, StoreUnavailableException
from app.schemas.activity import ActivityLogEntry
from app.schemas.appointments import Appointment, AppointmentStatus
from app.stores.base import ActivityLogStore, AppointmentStore

logger = get_logger(__name__)

_UNAVAILABLE_ERRORS = (
    ServiceUnavailable,
    DeadlineExceeded,
    InternalServerError,
    ResourceExhausted,
    RetryError,
)


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Surface transient Firestore failures as ``StoreUnavailableException``."""
    try:
        yield
    except _UNAVAILABLE_ERRORS as e:
        logger.warning("store_unavailable", backend="firestore", operation=operation, error=str(e))
        raise StoreUnavailableException() from e


def to_document(fields: dict[str, Any]) -> dict[str, Any]:
    """Snake_case record fields to camelCase document fields."""
    return {to_camel(key): value for key, value in fields.items()}


def from_document(document_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """camelCase document fields to snake_case record fields."""
    record = {to_snake(key): value for key, value in data.items()}
    record["id"] = document_id
    return record


class FirestoreAppointmentStore(AppointmentStore):
    """Appointment store over a Firestore collection."""

    def __init__(self, client: firestore.AsyncClient, collection_name: str = "appointments"):
        """Initialize store with an async Firestore client."""
        self.collection = client.collection(collection_name)

    async def _stream(self, query) -> list[Appointment]:
        with translate_errors("query"):
            return [
                Appointment.model_validate(from_document(snapshot.id, snapshot.to_dict()))
                async for snapshot in query.stream()
            ]

    async def create(self, fields: dict[str, Any]) -> str:
        document = to_document(fields)
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        with translate_errors("create"):
            _, doc_ref = await self.collection.add(document)
        return doc_ref.id

    async def get(self, appointment_id: str) -> Appointment | None:
        with translate_errors("get"):
            snapshot = await self.collection.document(appointment_id).get()
        if not snapshot.exists:
            return None
        return Appointment.model_validate(from_document(snapshot.id, snapshot.to_dict()))

    async def update(self, appointment_id: str, fields: dict[str, Any]) -> None:
        document = to_document(fields)
        document["updatedAt"] = firestore.SERVER_TIMESTAMP
        try:
            with translate_errors("update"):
                await self.collection.document(appointment_id).update(document)
        except NotFound:
            raise NotFoundException("Appointment not found")

    async def delete(self, appointment_id: str) -> None:
        doc_ref = self.collection.document(appointment_id)
        with translate_errors("delete"):
            snapshot = await doc_ref.get()
            if not snapshot.exists:
                raise NotFoundException("Appointment not found")
            await doc_ref.delete()

    async def query_by_date_and_status(
        self,
        date: str,
        time: str | None = None,
        statuses: Sequence[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        query = self.collection.where(filter=FieldFilter("date", "==", date))
        if time is not None:
            query = query.where(filter=FieldFilter("time", "==", time))
        if statuses is not None:
            values = [AppointmentStatus(s).value for s in statuses]
            query = query.where(filter=FieldFilter("status", "in", values))
        return await self._stream(query)

    async def query_by_date_range(
        self,
        from_date: str,
        to_date: str,
        statuses: Sequence[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        # status is filtered in memory to avoid a composite index
        query = self.collection.where(filter=FieldFilter("date", ">=", from_date)).where(
            filter=FieldFilter("date", "<", to_date)
        )
        records = await self._stream(query)
        if statuses is None:
            return records
        allowed = {AppointmentStatus(s) for s in statuses}
        return [record for record in records if record.status in allowed]

    async def query_by_doctor(self, doctor_id: str) -> list[Appointment]:
        return await self._stream(self.collection.where(filter=FieldFilter("doctorId", "==", doctor_id)))

    async def list_all(self) -> list[Appointment]:
        return await self._stream(self.collection)

    async def ping(self) -> bool:
        try:
            async for _ in self.collection.limit(1).stream():
                pass
            return True
        except Exception:
            return False


class FirestoreActivityLogStore(ActivityLogStore):
    """Activity log over a Firestore collection."""

    def __init__(self, client: firestore.AsyncClient, collection_name: str = "activity_logs"):
        """Initialize store with an async Firestore client."""
        self.collection = client.collection(collection_name)

    async def create(self, fields: dict[str, Any]) -> str:
        document = to_document(fields)
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        with translate_errors("create_activity"):
            _, doc_ref = await self.collection.add(document)
        return doc_ref.id

    async def list_recent(self, limit: int = 20) -> list[ActivityLogEntry]:
        query = self.collection.order_by("createdAt", direction=firestore.Query.DESCENDING).limit(limit)
        with translate_errors("list_activity"):
            return [
                ActivityLogEntry.model_validate(from_document(snapshot.id, snapshot.to_dict()))
                async for snapshot in query.stream()
            ]
