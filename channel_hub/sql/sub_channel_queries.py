"""
Parameterized SQL for the sub_channels table.

Expected schema:

    CREATE TABLE sub_channels (
        id                        uuid PRIMARY KEY DEFAULT gen_random_uuid(),
        parent_channel_id         text NOT NULL,
        name                      text NOT NULL,
        utm_source                text NOT NULL,
        utm_medium                text NOT NULL,
        utm_medium_matching_type  text NOT NULL DEFAULT 'exact',
        created_at                timestamptz NOT NULL DEFAULT now()
    );

Queries use asyncpg's $n placeholders; ids are compared as text so callers can
pass plain strings.
"""

from typing import Optional


SUB_CHANNEL_COLUMNS = (
    "id, parent_channel_id, name, utm_source, utm_medium, "
    "utm_medium_matching_type, created_at"
)

# Columns a PATCH may change, in the order they appear in UPDATE statements
UPDATABLE_COLUMNS = ("name", "utm_source", "utm_medium", "utm_medium_matching_type")


def get_list_sub_channels_query(by_parent: bool) -> str:
    """
    SELECT sub-channels ordered by name.

    Args:
        by_parent: When True the query takes $1 = parent_channel_id.
    """
    where_clause = "WHERE parent_channel_id = $1" if by_parent else ""
    return f"""
        SELECT {SUB_CHANNEL_COLUMNS}
        FROM sub_channels
        {where_clause}
        ORDER BY name
    """


def get_sibling_sub_channels_query(exclude_id: Optional[str] = None) -> str:
    """
    SELECT the comparison set for overlap validation.

    $1 = parent_channel_id, and $2 = id to exclude when exclude_id is given.
    """
    exclusion = "AND id::text <> $2" if exclude_id else ""
    return f"""
        SELECT {SUB_CHANNEL_COLUMNS}
        FROM sub_channels
        WHERE parent_channel_id = $1
        {exclusion}
    """


def get_sub_channel_by_id_query() -> str:
    return f"""
        SELECT {SUB_CHANNEL_COLUMNS}
        FROM sub_channels
        WHERE id::text = $1
    """


def get_insert_sub_channel_query() -> str:
    """INSERT ... RETURNING; $1..$5 = parent, name, source, medium, matching type."""
    return f"""
        INSERT INTO sub_channels (
            parent_channel_id, name, utm_source, utm_medium, utm_medium_matching_type
        ) VALUES ($1, $2, $3, $4, $5)
        RETURNING {SUB_CHANNEL_COLUMNS}
    """


def get_update_sub_channel_query() -> str:
    """UPDATE every updatable column; $1 = id, $2..$5 = UPDATABLE_COLUMNS."""
    assignments = ", ".join(
        f"{column} = ${position}"
        for position, column in enumerate(UPDATABLE_COLUMNS, start=2)
    )
    return f"""
        UPDATE sub_channels
        SET {assignments}
        WHERE id::text = $1
        RETURNING {SUB_CHANNEL_COLUMNS}
    """


def get_delete_sub_channel_query() -> str:
    return """
        DELETE FROM sub_channels
        WHERE id::text = $1
    """


def get_parent_write_lock_query() -> str:
    """
    Transaction-scoped advisory lock on one parent channel ($1 = parent_channel_id).

    Held from the overlap check until the INSERT/UPDATE commits, so two writers
    under the same parent validate one after the other.
    """
    return "SELECT pg_advisory_xact_lock(hashtext($1))"
