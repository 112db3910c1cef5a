"""
asyncpg pool for the sub-channel directory.

The pool is created once in the application lifespan (init_db) and handed to
request handlers one connection at a time through DBSessionDep. Sizing and the
per-command timeout are read from Settings:

    db_pool_min_size / db_pool_max_size / db_command_timeout
"""

from typing import Optional

import asyncpg
from asyncpg import Pool

from channel_hub.core.config import get_settings


_pool: Optional[Pool] = None


async def init_db() -> Pool:
    """
    Create the pool if it does not exist yet and return it.

    Raises:
        asyncpg.PostgresError: Authentication or server-side failure.
        OSError: Database host unreachable.
    """
    global _pool

    if _pool is None:
        settings = get_settings()
        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )

    return _pool


async def get_db_pool() -> Pool:
    """Return the pool, creating it lazily when startup could not."""
    if _pool is None:
        return await init_db()
    return _pool


async def close_db() -> None:
    """Close the pool; a later get_db_pool() opens a new one."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
