"""Activity log schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class ActivityType(str, Enum):
    """Kinds of appointment activity recorded in the audit trail."""

    APPOINTMENT_CREATED = "appointment_created"
    APPOINTMENT_UPDATED = "appointment_updated"
    APPOINTMENT_STATUS_CHANGED = "appointment_status_changed"
    APPOINTMENT_DELETED = "appointment_deleted"
    APPOINTMENT_DELAYED = "appointment_delayed"


class ActivityLogEntry(BaseModel):
    """A stored activity log entry."""

    id: str
    type: ActivityType | str
    message: str
    actor_id: str
    actor_name: str
    created_at: datetime | None = None


class ActivityListResponse(BaseModel):
    """Recent activity, newest first."""

    items: list[ActivityLogEntry]
