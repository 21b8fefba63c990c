"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from app.config import settings
from app.dependencies import AppointmentStoreDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Liveness payload."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(BaseModel):
    """Readiness payload with the store backend and its ping result."""

    status: str
    version: str
    environment: str
    store_backend: str
    store: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Liveness: the process is up and serving."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Detailed health check",
)
async def detailed_health_check(store: AppointmentStoreDep) -> DetailedHealthResponse:
    """
    Readiness of the configured appointment store.

    A failed ping reports ``degraded`` with HTTP 200 so the probe result can
    be read rather than retried.
    """
    store_healthy = await store.ping()

    return DetailedHealthResponse(
        status="healthy" if store_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        store_backend=settings.appointment_store,
        store="healthy" if store_healthy else "unhealthy",
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    return {"message": "pong"}
