"""
Sub-Channel Directory Test Module

Tests for channel_hub/services/sub_channel_directory.py against a mocked
asyncpg connection (see conftest.mock_conn).

Test Coverage:
- Reads: parent filtering, sibling loading with self-exclusion, not-found
- Create: validation gate (error blocks, warning needs override), parent lock
- Update: re-validation only when a UTM field changes, excluding itself
- Delete: status parsing and not-found
"""

from unittest.mock import AsyncMock

import pytest

from channel_hub.models import (
    ConflictSeverity,
    MatchingType,
    SubChannelCreate,
    SubChannelUpdate,
)
from channel_hub.services.overlap_validation import InvalidArgumentError, SYMMETRIC
from channel_hub.services.sub_channel_directory import (
    OverlapConflictError,
    SubChannelNotFoundError,
    create_sub_channel,
    delete_sub_channel,
    fetch_sibling_sub_channels,
    get_sub_channel,
    list_sub_channels,
    update_sub_channel,
)

from channel_hub.tests.conftest import OTHER_PARENT_ID, PARENT_ID


# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


def _create_payload(**overrides) -> SubChannelCreate:
    data = {
        "parent_channel_id": PARENT_ID,
        "name": "Google Search",
        "utm_source": "google",
        "utm_medium": "cpc",
        "utm_medium_matching_type": "exact",
    }
    data.update(overrides)
    return SubChannelCreate(**data)


# =============================================================================
# Test Class: TestReads
# =============================================================================

class TestReads:

    async def test_list_filters_by_parent(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetch.return_value = [make_row("a", "google", "cpc"), make_row("b", "bing", "cpc")]

        result = await list_sub_channels(mock_conn, PARENT_ID)

        assert [sc.id for sc in result] == ["a", "b"]
        query, parent = mock_conn.fetch.call_args.args
        assert "WHERE parent_channel_id = $1" in query
        assert "ORDER BY name" in query
        assert parent == PARENT_ID

    async def test_list_without_parent_returns_all(self, mock_conn: AsyncMock) -> None:
        await list_sub_channels(mock_conn)

        (query,) = mock_conn.fetch.call_args.args
        assert "WHERE" not in query

    async def test_siblings_exclude_id_is_bound(self, mock_conn: AsyncMock) -> None:
        await fetch_sibling_sub_channels(mock_conn, PARENT_ID, exclude_id="self")

        query, parent, excluded = mock_conn.fetch.call_args.args
        assert "id::text <> $2" in query
        assert (parent, excluded) == (PARENT_ID, "self")

    async def test_siblings_without_exclusion(self, mock_conn: AsyncMock) -> None:
        await fetch_sibling_sub_channels(mock_conn, PARENT_ID)

        query, parent = mock_conn.fetch.call_args.args
        assert "<>" not in query

    async def test_rows_become_sub_channels(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetch.return_value = [make_row("a", "google", "cpc", matching_type="contains")]

        (sub_channel,) = await fetch_sibling_sub_channels(mock_conn, PARENT_ID)

        assert sub_channel.utm_medium_matching_type == MatchingType.CONTAINS
        assert sub_channel.parent_channel_id == PARENT_ID

    async def test_get_missing_sub_channel_raises(self, mock_conn: AsyncMock) -> None:
        mock_conn.fetchrow.return_value = None

        with pytest.raises(SubChannelNotFoundError):
            await get_sub_channel(mock_conn, "missing")


# =============================================================================
# Test Class: TestCreate
# =============================================================================

class TestCreate:

    async def test_creates_when_no_conflict(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetch.return_value = [make_row("b", "bing", "cpc")]
        mock_conn.fetchrow.return_value = make_row("new", "google", "cpc", name="Google Search")

        created, verdict = await create_sub_channel(mock_conn, _create_payload())

        assert created.id == "new"
        assert verdict.conflict_severity == ConflictSeverity.NONE
        insert_args = mock_conn.fetchrow.call_args.args
        assert "INSERT INTO sub_channels" in insert_args[0]
        assert insert_args[1:] == (PARENT_ID, "Google Search", "google", "cpc", "exact")

    async def test_blocking_conflict_is_not_persisted(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetch.return_value = [make_row("g", "Google", "CPC")]

        with pytest.raises(OverlapConflictError) as exc_info:
            await create_sub_channel(mock_conn, _create_payload())

        assert exc_info.value.verdict.conflict_severity == ConflictSeverity.ERROR
        mock_conn.fetchrow.assert_not_called()

    async def test_warning_requires_override(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetch.return_value = [make_row("g", "google", "cpc_brand", matching_type="contains")]

        with pytest.raises(OverlapConflictError) as exc_info:
            await create_sub_channel(mock_conn, _create_payload())

        assert exc_info.value.verdict.conflict_severity == ConflictSeverity.WARNING
        mock_conn.fetchrow.assert_not_called()

    async def test_warning_with_override_is_persisted(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetch.return_value = [make_row("g", "google", "cpc_brand", matching_type="contains")]
        mock_conn.fetchrow.return_value = make_row("new", "google", "cpc")

        created, verdict = await create_sub_channel(
            mock_conn, _create_payload(override_warnings=True)
        )

        assert created.id == "new"
        assert verdict.conflict_severity == ConflictSeverity.WARNING

    async def test_strategy_is_forwarded(self, mock_conn: AsyncMock, make_row) -> None:
        """Source containment alone only matters under the symmetric rules."""
        mock_conn.fetch.return_value = [make_row("ig", "instagram.com", "feed", matching_type="contains")]
        mock_conn.fetchrow.return_value = make_row("new", "instagram", "stories")
        payload = _create_payload(utm_source="instagram", utm_medium="stories")

        created, verdict = await create_sub_channel(mock_conn, payload)
        assert verdict.conflict_severity == ConflictSeverity.NONE

        with pytest.raises(OverlapConflictError):
            await create_sub_channel(mock_conn, payload, SYMMETRIC)

    async def test_check_and_insert_hold_parent_lock(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetchrow.return_value = make_row("new", "google", "cpc")

        await create_sub_channel(mock_conn, _create_payload())

        mock_conn.transaction.assert_called_once()
        lock_query, parent = mock_conn.execute.call_args.args
        assert "pg_advisory_xact_lock" in lock_query
        assert parent == PARENT_ID

        calls = [name for name, _, _ in mock_conn.mock_calls]
        assert (
            calls.index("transaction")
            < calls.index("execute")
            < calls.index("fetch")
            < calls.index("fetchrow")
        )

    async def test_refused_create_rolls_back(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetch.return_value = [make_row("g", "Google", "CPC")]

        with pytest.raises(OverlapConflictError):
            await create_sub_channel(mock_conn, _create_payload())

        exc_type = mock_conn.transaction.return_value.__aexit__.await_args.args[0]
        assert exc_type is OverlapConflictError

    @pytest.mark.parametrize("field", ["name", "utm_source", "utm_medium"])
    async def test_blank_fields_are_rejected(self, mock_conn: AsyncMock, field: str) -> None:
        with pytest.raises(InvalidArgumentError):
            await create_sub_channel(mock_conn, _create_payload(**{field: "  "}))

        mock_conn.fetch.assert_not_called()
        mock_conn.fetchrow.assert_not_called()


# =============================================================================
# Test Class: TestUpdate
# =============================================================================

class TestUpdate:

    async def test_utm_change_is_validated_without_self(self, mock_conn: AsyncMock, make_row) -> None:
        current = make_row("me", "google", "cpc")
        mock_conn.fetchrow.side_effect = [current, make_row("me", "google", "display")]
        mock_conn.fetch.return_value = [make_row("other", "google", "video")]

        updated, verdict = await update_sub_channel(
            mock_conn, "me", SubChannelUpdate(utm_medium="display")
        )

        assert updated.utm_medium == "display"
        assert verdict is not None
        assert verdict.conflict_severity == ConflictSeverity.NONE
        _, parent, excluded = mock_conn.fetch.call_args.args
        assert (parent, excluded) == (PARENT_ID, "me")

        update_args = mock_conn.fetchrow.call_args.args
        assert update_args[1:] == ("me", "Sub-channel me", "google", "display", "exact")

    async def test_name_only_change_skips_validation(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetchrow.side_effect = [
            make_row("me", "google", "cpc"),
            make_row("me", "google", "cpc", name="Renamed"),
        ]

        updated, verdict = await update_sub_channel(mock_conn, "me", SubChannelUpdate(name="Renamed"))

        assert verdict is None
        assert updated.name == "Renamed"
        mock_conn.fetch.assert_not_called()

    async def test_conflicting_update_is_refused(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetchrow.side_effect = [make_row("me", "google", "cpc")]
        mock_conn.fetch.return_value = [make_row("other", "google", "display")]

        with pytest.raises(OverlapConflictError) as exc_info:
            await update_sub_channel(mock_conn, "me", SubChannelUpdate(utm_medium="Display"))

        assert exc_info.value.verdict.conflict_severity == ConflictSeverity.ERROR
        assert mock_conn.fetchrow.await_count == 1

    async def test_update_holds_parent_lock(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetchrow.side_effect = [
            make_row("me", "google", "cpc", parent_channel_id=OTHER_PARENT_ID),
            make_row("me", "google", "display", parent_channel_id=OTHER_PARENT_ID),
        ]

        await update_sub_channel(mock_conn, "me", SubChannelUpdate(utm_medium="display"))

        mock_conn.transaction.assert_called_once()
        lock_query, parent = mock_conn.execute.call_args.args
        assert "pg_advisory_xact_lock" in lock_query
        assert parent == OTHER_PARENT_ID

    async def test_missing_sub_channel(self, mock_conn: AsyncMock) -> None:
        mock_conn.fetchrow.return_value = None

        with pytest.raises(SubChannelNotFoundError):
            await update_sub_channel(mock_conn, "missing", SubChannelUpdate(utm_medium="cpc"))

    async def test_blank_change_is_rejected(self, mock_conn: AsyncMock, make_row) -> None:
        mock_conn.fetchrow.return_value = make_row("me", "google", "cpc")

        with pytest.raises(InvalidArgumentError):
            await update_sub_channel(mock_conn, "me", SubChannelUpdate(utm_source=" "))


# =============================================================================
# Test Class: TestDelete
# =============================================================================

class TestDelete:

    async def test_delete_existing(self, mock_conn: AsyncMock) -> None:
        mock_conn.execute.return_value = "DELETE 1"

        await delete_sub_channel(mock_conn, "me")

        query, sub_channel_id = mock_conn.execute.call_args.args
        assert "DELETE FROM sub_channels" in query
        assert sub_channel_id == "me"

    async def test_delete_missing(self, mock_conn: AsyncMock) -> None:
        mock_conn.execute.return_value = "DELETE 0"

        with pytest.raises(SubChannelNotFoundError):
            await delete_sub_channel(mock_conn, "missing")
