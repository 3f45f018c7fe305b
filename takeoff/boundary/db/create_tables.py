"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, takeoff.configs
System role: Database schema initialization

Usage:
    python -m takeoff.boundary.db.create_tables
"""

import asyncio
import logging

from takeoff.boundary.db.base import Base
from takeoff.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
import takeoff.boundary.db.models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_all_tables() -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: issues CREATE TABLE IF NOT EXISTS for each model, so safe
    to run on every startup. Existing tables remain unchanged.

    Raises:
        SQLAlchemyError: If database connection fails or table creation fails
    """
    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{__name__}:create_all_tables - Tables created")


async def drop_all_tables() -> None:
    """Drop all database tables and their data."""
    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info(f"{__name__}:drop_all_tables - Tables dropped")


if __name__ == "__main__":
    from takeoff.observability.logger import configure_logging

    configure_logging()
    asyncio.run(create_all_tables())
