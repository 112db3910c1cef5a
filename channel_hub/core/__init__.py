"""
Core infrastructure package for the Channel Hub backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL connectivity via asyncpg
- FastAPI dependency injection utilities

Usage:
    from channel_hub.core import get_settings, init_db, close_db, DBSessionDep
"""

from channel_hub.core.config import Settings, get_settings

from channel_hub.core.database import init_db, close_db, get_db_pool

from channel_hub.core.dependencies import (
    get_db_session,
    get_settings_dependency,
    get_overlap_strategy,
    SettingsDep,
    DBSessionDep,
    OverlapStrategyDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # FastAPI dependency injection (from dependencies.py)
    'get_db_session',
    'get_settings_dependency',
    'get_overlap_strategy',
    'SettingsDep',
    'DBSessionDep',
    'OverlapStrategyDep',
]
