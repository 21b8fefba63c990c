"""Activity log service for the staff-facing audit trail."""

import structlog

from app.schemas.activity import ActivityLogEntry, ActivityType
from app.schemas.appointments import Actor, Appointment
from app.stores.base import ActivityLogStore

logger = structlog.get_logger(__name__)


class ActivityService:
    """Records who did what to which appointment."""

    def __init__(self, store: ActivityLogStore):
        """Initialize service with an activity log store."""
        self.store = store

    async def log_activity(self, activity_type: ActivityType, message: str, actor: Actor) -> None:
        """
        Append an entry to the activity log.

        Best-effort: a failure is logged and never propagated, so the write
        that triggered it still succeeds.

        Args:
            activity_type: Kind of activity
            message: Human-readable description
            actor: Staff member who performed the action
        """
        try:
            await self.store.create(
                {
                    "type": activity_type.value,
                    "message": message,
                    "actor_id": actor.uid,
                    "actor_name": actor.name or "Unknown",
                }
            )
        except Exception as e:
            logger.warning(
                "failed_to_log_activity",
                activity_type=activity_type.value,
                actor_id=actor.uid,
                error=str(e),
            )

    async def list_recent(self, limit: int = 20) -> list[ActivityLogEntry]:
        return await self.store.list_recent(limit)

    async def appointment_created(self, appointment: Appointment, actor: Actor) -> None:
        if appointment.is_follow_up:
            message = f"{actor.display_name} scheduled a follow-up for {appointment.patient_name}"
        else:
            message = f"{actor.display_name} created an appointment for {appointment.patient_name}"
        await self.log_activity(ActivityType.APPOINTMENT_CREATED, message, actor)

    async def appointment_updated(self, appointment: Appointment, actor: Actor) -> None:
        await self.log_activity(
            ActivityType.APPOINTMENT_UPDATED,
            f"{actor.display_name} updated appointment for {appointment.patient_name}",
            actor,
        )

    async def status_changed(self, appointment: Appointment, actor: Actor) -> None:
        await self.log_activity(
            ActivityType.APPOINTMENT_STATUS_CHANGED,
            f"{actor.display_name} marked {appointment.patient_name} as {appointment.status.value}",
            actor,
        )

    async def appointment_delayed(self, appointment: Appointment, minutes: int, actor: Actor) -> None:
        await self.log_activity(
            ActivityType.APPOINTMENT_DELAYED,
            f"{actor.display_name} marked {appointment.patient_name} as running "
            f"{minutes} minutes late ({appointment.delay_reason})",
            actor,
        )

    async def delay_reverted(self, appointment: Appointment, actor: Actor) -> None:
        await self.log_activity(
            ActivityType.APPOINTMENT_UPDATED,
            f"{actor.display_name} cleared the delay for {appointment.patient_name}",
            actor,
        )

    async def appointment_deleted(self, appointment: Appointment, actor: Actor) -> None:
        await self.log_activity(
            ActivityType.APPOINTMENT_DELETED,
            f"{actor.display_name} deleted appointment for {appointment.patient_name}",
            actor,
        )
