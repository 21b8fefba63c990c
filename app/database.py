"""Database configuration and connection management."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings

# Global engine and session factory, created on first use
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    """Async driver URL for the configured database."""
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL must be set when APPOINTMENT_STORE=postgres")
    # Convert sync PostgreSQL URL to async
    return settings.database_url.replace("postgresql://", "postgresql+asyncpg://")


def get_engine() -> AsyncEngine:
    """
    Get or create the async engine.

    Returns:
        Async engine with connection pooling
    """
    global _engine

    if _engine is None:
        _engine = create_async_engine(
            get_database_url(),
            echo=settings.debug,
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20,
            pool_recycle=3600,
            connect_args={
                "server_settings": {
                    "application_name": settings.app_name,
                },
            },
        )

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the async session factory."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _session_factory


async def check_database_connection() -> bool:
    """Check if database connection is healthy."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


async def close_database_connection() -> None:
    """Dispose of pooled connections."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
