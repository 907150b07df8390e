"""PostgreSQL connection pool management."""

import logging

import asyncpg

from src.profiles.config import Settings

logger = logging.getLogger(__name__)

CREATE_USER_PROFILES_TABLE = """
CREATE TABLE IF NOT EXISTS user_profiles (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    cognito_sub VARCHAR(255) UNIQUE NOT NULL,
    first_name VARCHAR(100),
    last_name VARCHAR(100),
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

# Global pool instance (initialized in main.py lifespan)
_pool: asyncpg.Pool | None = None


async def create_database_pool(settings: Settings) -> asyncpg.Pool:
    """
    Create the asyncpg connection pool from settings.

    Unset host/database/user/password fall back to the driver's defaults
    (PG* environment variables, then localhost). ``db_ssl`` enables TLS
    without certificate verification.

    Raises:
        OSError, asyncpg.PostgresError: If the database is unreachable
    """
    logger.info(
        f"Connecting to PostgreSQL at {settings.db_host or 'default host'}:{settings.db_port}",
        extra={"db_name": settings.db_name, "ssl": settings.db_ssl},
    )
    return await asyncpg.create_pool(
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
        user=settings.db_user,
        password=settings.db_password,
        ssl="require" if settings.db_ssl else "disable",
        min_size=1,
        max_size=10,
        command_timeout=30,
    )


async def initialize_database(pool: asyncpg.Pool) -> None:
    """Create the ``user_profiles`` table if it doesn't exist."""
    async with pool.acquire() as conn:
        await conn.execute(CREATE_USER_PROFILES_TABLE)
    logger.info("Database schema ready")


def set_database_pool(pool: asyncpg.Pool | None) -> None:
    """Install (or reset, with None) the process-wide pool."""
    global _pool
    _pool = pool


def get_database_pool() -> asyncpg.Pool:
    """
    Get the process-wide pool.

    Raises:
        RuntimeError: If the pool has not been initialized
    """
    if _pool is None:
        raise RuntimeError(
            "Database pool not initialized. "
            "Ensure application startup calls set_database_pool()."
        )
    return _pool


async def close_database_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")
