"""Activity log endpoints."""

from fastapi import APIRouter, Query, status

from app.dependencies import Activity, CurrentActor
from app.schemas.activity import ActivityListResponse

router = APIRouter()


@router.get(
    "/",
    response_model=ActivityListResponse,
    status_code=status.HTTP_200_OK,
    tags=["Activity"],
    summary="Recent activity",
)
async def list_activity(
    current_actor: CurrentActor,
    activity: Activity,
    limit: int = Query(20, ge=1, le=100),
) -> ActivityListResponse:
    """Most recent activity log entries, newest first."""
    return ActivityListResponse(items=await activity.list_recent(limit))
