"""
Sub-Channel Directory Service

Reads and writes the sub_channels table and gates every write that changes a
UTM rule behind the overlap validator:

- error verdict: rejected with OverlapConflictError
- warning verdict: rejected unless the caller sets override_warnings
- none: persisted

Create and update hold a per-parent advisory lock (pg_advisory_xact_lock) inside
a transaction from the overlap check until the write.

Functions take an asyncpg connection so the API layer controls acquisition
(DBSessionDep) and tests can pass a mock.
"""

import logging
from typing import List, Optional, Tuple

from asyncpg import Connection

from channel_hub.models.enums import ConflictSeverity, MatchingType
from channel_hub.models.schemas import (
    CandidateSubChannel,
    OverlapStrategy,
    SubChannel,
    SubChannelCreate,
    SubChannelUpdate,
    ValidationVerdict,
)
from channel_hub.services.overlap_validation import (
    SOURCE_GATED,
    InvalidArgumentError,
    validate,
)
from channel_hub.sql.sub_channel_queries import (
    UPDATABLE_COLUMNS,
    get_delete_sub_channel_query,
    get_insert_sub_channel_query,
    get_list_sub_channels_query,
    get_parent_write_lock_query,
    get_sibling_sub_channels_query,
    get_sub_channel_by_id_query,
    get_update_sub_channel_query,
)


logger = logging.getLogger(__name__)


class SubChannelNotFoundError(LookupError):
    """Raised when a sub-channel id does not exist."""


class OverlapConflictError(Exception):
    """Raised when a write is refused because of its overlap verdict."""

    def __init__(self, verdict: ValidationVerdict):
        self.verdict = verdict
        super().__init__(verdict.message)


# =============================================================================
# Reads
# =============================================================================


async def list_sub_channels(
    conn: Connection,
    parent_channel_id: Optional[str] = None,
) -> List[SubChannel]:
    """List sub-channels ordered by name, optionally for one parent channel."""
    if parent_channel_id:
        rows = await conn.fetch(get_list_sub_channels_query(by_parent=True), parent_channel_id)
    else:
        rows = await conn.fetch(get_list_sub_channels_query(by_parent=False))
    return [SubChannel.from_record(dict(row)) for row in rows]


async def fetch_sibling_sub_channels(
    conn: Connection,
    parent_channel_id: str,
    exclude_id: Optional[str] = None,
) -> List[SubChannel]:
    """Load the overlap comparison set for a parent channel."""
    query = get_sibling_sub_channels_query(exclude_id)
    if exclude_id:
        rows = await conn.fetch(query, parent_channel_id, exclude_id)
    else:
        rows = await conn.fetch(query, parent_channel_id)
    return [SubChannel.from_record(dict(row)) for row in rows]


async def get_sub_channel(conn: Connection, sub_channel_id: str) -> SubChannel:
    """
    Fetch one sub-channel.

    Raises:
        SubChannelNotFoundError: If no row has this id.
    """
    row = await conn.fetchrow(get_sub_channel_by_id_query(), sub_channel_id)
    if row is None:
        raise SubChannelNotFoundError(f"Sub-channel {sub_channel_id} not found")
    return SubChannel.from_record(dict(row))


# =============================================================================
# Validation Gate
# =============================================================================


async def validate_candidate(
    conn: Connection,
    candidate: CandidateSubChannel,
    exclude_id: Optional[str] = None,
    strategy: OverlapStrategy = SOURCE_GATED,
) -> ValidationVerdict:
    """Load the candidate's siblings and run the overlap validator on them."""
    for field in ("parent_channel_id", "utm_source", "utm_medium"):
        value = getattr(candidate, field)
        if value is None or not value.strip():
            raise InvalidArgumentError(f"{field} is required")

    siblings = await fetch_sibling_sub_channels(conn, candidate.parent_channel_id, exclude_id)
    return validate(candidate, siblings, exclude_id=exclude_id, strategy=strategy)


def enforce_verdict(verdict: ValidationVerdict, override_warnings: bool = False) -> None:
    """
    Refuse a write whose verdict is blocking, or advisory without an override.

    Raises:
        OverlapConflictError: carrying the verdict.
    """
    if verdict.conflict_severity == ConflictSeverity.ERROR:
        raise OverlapConflictError(verdict)
    if verdict.conflict_severity == ConflictSeverity.WARNING and not override_warnings:
        raise OverlapConflictError(verdict)


# =============================================================================
# Writes
# =============================================================================


async def create_sub_channel(
    conn: Connection,
    data: SubChannelCreate,
    strategy: OverlapStrategy = SOURCE_GATED,
) -> Tuple[SubChannel, ValidationVerdict]:
    """
    Validate and insert a new sub-channel.

    The overlap check and the INSERT run in one transaction holding the parent
    channel's advisory lock, so concurrent writers under the same parent cannot
    both pass validation against a directory that lacks the other's row.

    Returns:
        The stored sub-channel and the verdict it was accepted with.

    Raises:
        InvalidArgumentError: Blank name or UTM field.
        OverlapConflictError: Verdict refused (see enforce_verdict).
    """
    if not data.name.strip():
        raise InvalidArgumentError("name is required")

    candidate = data.to_candidate()

    async with conn.transaction():
        await conn.execute(get_parent_write_lock_query(), data.parent_channel_id)

        verdict = await validate_candidate(conn, candidate, strategy=strategy)
        enforce_verdict(verdict, data.override_warnings)

        if verdict.conflict_severity == ConflictSeverity.WARNING:
            logger.warning(
                f"Creating sub-channel '{data.name}' under {data.parent_channel_id} "
                f"despite overlap warning: {verdict.message}"
            )

        row = await conn.fetchrow(
            get_insert_sub_channel_query(),
            data.parent_channel_id,
            data.name.strip(),
            data.utm_source.strip(),
            data.utm_medium.strip(),
            data.utm_medium_matching_type.value,
        )

    created = SubChannel.from_record(dict(row))

    logger.info(
        f"Created sub-channel id={created.id} parent={created.parent_channel_id} "
        f"source={created.utm_source} medium={created.utm_medium}"
    )

    return created, verdict


async def update_sub_channel(
    conn: Connection,
    sub_channel_id: str,
    update: SubChannelUpdate,
    strategy: OverlapStrategy = SOURCE_GATED,
) -> Tuple[SubChannel, Optional[ValidationVerdict]]:
    """
    Apply a partial update to a sub-channel.

    The overlap check only runs when a UTM field is part of the update; the
    sub-channel itself is excluded from its comparison set. Like creation, the
    read, check and UPDATE happen under the parent channel's advisory lock.

    Returns:
        The stored sub-channel and the verdict, or None when no UTM field changed.

    Raises:
        SubChannelNotFoundError: Unknown id.
        InvalidArgumentError: A provided field is blank.
        OverlapConflictError: Verdict refused (see enforce_verdict).
    """
    changes = update.changes()

    for column in ("name", "utm_source", "utm_medium"):
        if column in changes and not changes[column].strip():
            raise InvalidArgumentError(f"{column} cannot be blank")

    async with conn.transaction():
        current = await get_sub_channel(conn, sub_channel_id)
        await conn.execute(get_parent_write_lock_query(), current.parent_channel_id)

        merged = current.model_copy(update=changes)

        verdict: Optional[ValidationVerdict] = None
        if update.touches_utm():
            candidate = CandidateSubChannel(
                parent_channel_id=merged.parent_channel_id,
                name=merged.name,
                utm_source=merged.utm_source,
                utm_medium=merged.utm_medium,
                utm_medium_matching_type=merged.utm_medium_matching_type,
            )
            verdict = await validate_candidate(
                conn, candidate, exclude_id=current.id, strategy=strategy
            )
            enforce_verdict(verdict, update.override_warnings)

        values = []
        for column in UPDATABLE_COLUMNS:
            value = getattr(merged, column)
            values.append(value.value if isinstance(value, MatchingType) else value.strip())

        row = await conn.fetchrow(get_update_sub_channel_query(), current.id, *values)
        if row is None:
            raise SubChannelNotFoundError(f"Sub-channel {sub_channel_id} not found")

    logger.info(f"Updated sub-channel id={current.id} fields={sorted(changes)}")

    return SubChannel.from_record(dict(row)), verdict


async def delete_sub_channel(conn: Connection, sub_channel_id: str) -> None:
    """
    Delete a sub-channel.

    Raises:
        SubChannelNotFoundError: If nothing was deleted.
    """
    status = await conn.execute(get_delete_sub_channel_query(), sub_channel_id)
    rows_affected = int(status.split()[-1]) if status else 0
    if rows_affected == 0:
        raise SubChannelNotFoundError(f"Sub-channel {sub_channel_id} not found")

    logger.info(f"Deleted sub-channel id={sub_channel_id}")
