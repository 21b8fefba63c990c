"""Database models."""

from app.models.activity_logs import activity_logs
from app.models.appointments import appointments, metadata

__all__ = [
    "activity_logs",
    "appointments",
    "metadata",
]
