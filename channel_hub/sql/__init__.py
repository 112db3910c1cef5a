"""
SQL Query Module for the Channel Hub backend.

Provides parameterized asyncpg queries for the sub_channels table, keeping data
access separate from the overlap rules in channel_hub.services.

Example usage:
    from channel_hub.sql import get_sibling_sub_channels_query

    query = get_sibling_sub_channels_query(exclude_id="abc")
    rows = await conn.fetch(query, parent_channel_id, "abc")
"""

from channel_hub.sql.sub_channel_queries import (
    get_list_sub_channels_query,
    get_sibling_sub_channels_query,
    get_sub_channel_by_id_query,
    get_insert_sub_channel_query,
    get_update_sub_channel_query,
    get_delete_sub_channel_query,
    get_parent_write_lock_query,
    SUB_CHANNEL_COLUMNS,
    UPDATABLE_COLUMNS,
)

__all__ = [
    'get_list_sub_channels_query',
    'get_sibling_sub_channels_query',
    'get_sub_channel_by_id_query',
    'get_insert_sub_channel_query',
    'get_update_sub_channel_query',
    'get_delete_sub_channel_query',
    'get_parent_write_lock_query',
    'SUB_CHANNEL_COLUMNS',
    'UPDATABLE_COLUMNS',
]
