"""Appointment and activity-log storage backends."""

from app.stores.base import ActivityLogStore, AppointmentStore
from app.stores.memory import InMemoryActivityLogStore, InMemoryAppointmentStore

__all__ = [
    "ActivityLogStore",
    "AppointmentStore",
    "InMemoryActivityLogStore",
    "InMemoryAppointmentStore",
]
