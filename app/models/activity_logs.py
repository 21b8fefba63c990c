"""Activity log table model using SQLAlchemy Core."""

from sqlalchemy import Column, Index, Table, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from app.models.appointments import metadata

activity_logs = Table(
    "activity_logs",
    metadata,
    Column(
        "id",
        UUID(as_uuid=False),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    ),
    Column("type", Text, nullable=False),
    Column("message", Text, nullable=False),
    Column("actor_id", Text, nullable=False),
    Column("actor_name", Text, nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()")),
    Index("ix_activity_logs_created_at", "created_at"),
)
