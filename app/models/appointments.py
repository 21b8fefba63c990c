"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Index,
    MetaData,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID, VARCHAR

# Metadata for all tables
metadata = MetaData()

# Dates and times are kept as the calendar-local strings the dashboard uses.
appointments = Table(
    "appointments",
    metadata,
    Column(
        "id",
        UUID(as_uuid=False),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
    ),
    # Snapshot fields (denormalized at booking time)
    Column("patient_name", Text, nullable=False),
    Column("patient_phone", VARCHAR(20), nullable=True),
    Column("doctor_id", Text, nullable=True),
    Column("doctor_name", Text, nullable=True),
    # Slot
    Column("date", VARCHAR(10), nullable=False),
    Column("time", VARCHAR(7), nullable=False),
    # Status management
    Column("status", Text, nullable=False, server_default="scheduled"),
    # Follow-up back-reference, intentionally not a foreign key
    Column("is_follow_up", Boolean, nullable=False, server_default=text("false")),
    Column("previous_appointment_id", Text, nullable=True),
    # Running late
    Column("is_late", Boolean, nullable=False, server_default=text("false")),
    Column("original_time", VARCHAR(5), nullable=True),
    Column("delay_reason", Text, nullable=True),
    Column("notes", Text, nullable=True),
    # Audit fields
    Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=text("NOW()")),
    Column("created_by", Text, nullable=True),
    Column("updated_at", TIMESTAMP(timezone=True), nullable=True),
    Column("updated_by", Text, nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('scheduled', 'confirmed', 'completed', 'missed', 'cancelled')",
        name="appointments_status_check",
    ),
    CheckConstraint(
        "NOT is_late OR (original_time IS NOT NULL AND original_time <> 'on-call')",
        name="appointments_late_has_original_time",
    ),
    Index("ix_appointments_date_time_status", "date", "time", "status"),
    Index("ix_appointments_doctor_id", "doctor_id"),
)
