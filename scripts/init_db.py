"""Script to initialize the database without running migrations."""

import asyncio

from sqlalchemy import text

from app.database import close_database_connection, get_engine
from app.models import metadata


async def init_db() -> None:
    """Create the appointments and activity log tables."""
    async with get_engine().begin() as conn:
        await conn.execute(text('CREATE EXTENSION IF NOT EXISTS "pgcrypto"'))
        await conn.run_sync(metadata.create_all)

    await close_database_connection()
    print("✓ Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_db())
