"""
FastAPI dependency injection module for the Channel Hub backend.

Key Dependencies Provided:
- get_db_session: Async generator yielding database connections from the pool
- get_settings_dependency: Returns the cached Settings singleton
- get_overlap_strategy: Resolves the configured OverlapStrategy
- SettingsDep / DBSessionDep / OverlapStrategyDep: Annotated aliases

Overriding these in tests:

    app.dependency_overrides[get_db_session] = lambda: mock_conn
    app.dependency_overrides[get_settings_dependency] = lambda: mock_settings

Usage:
    @router.get("/sub-channels")
    async def list_sub_channels(db: DBSessionDep) -> dict:
        rows = await db.fetch("SELECT * FROM sub_channels")
        ...
"""

from typing import Annotated, AsyncGenerator

from asyncpg import Connection
from fastapi import Depends

from channel_hub.core.config import Settings, get_settings
from channel_hub.core.database import get_db_pool
from channel_hub.models.schemas import OverlapStrategy
from channel_hub.services.overlap_validation import strategy_from_name


# =============================================================================
# Database Session Dependency
# =============================================================================

async def get_db_session() -> AsyncGenerator[Connection, None]:
    """
    Yield an async database connection from the pool.

    The connection is released back to the pool when the endpoint completes,
    whether it succeeded or raised.

    Raises:
        asyncpg.PostgresError: If connection acquisition fails.
    """
    pool = await get_db_pool()
    async with pool.acquire() as connection:
        yield connection


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it through
    app.dependency_overrides.
    """
    return get_settings()


def get_overlap_strategy(
    settings: Annotated[Settings, Depends(get_settings_dependency)],
) -> OverlapStrategy:
    """Resolve the configured overlap strategy name into an OverlapStrategy."""
    return strategy_from_name(
        settings.overlap_strategy,
        similarity_threshold=settings.similarity_threshold,
    )


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

DBSessionDep = Annotated[Connection, Depends(get_db_session)]

OverlapStrategyDep = Annotated[OverlapStrategy, Depends(get_overlap_strategy)]
