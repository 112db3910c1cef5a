"""
FastAPI router for the sub-channel directory.

Key Endpoints:
- GET    /sub-channels            - List sub-channels (optionally by parent)
- GET    /sub-channels/{id}       - Fetch one sub-channel
- POST   /sub-channels            - Create, gated by overlap validation
- PATCH  /sub-channels/{id}       - Partial update, re-validated when UTMs change
- DELETE /sub-channels/{id}       - Delete

Writes answer 409 when the overlap verdict is an error, or a warning sent
without override_warnings; the detail carries the verdict so the UI can show it
and offer the override.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query

from channel_hub.core.dependencies import DBSessionDep, OverlapStrategyDep
from channel_hub.models.schemas import (
    SubChannelCreate,
    SubChannelUpdate,
    ValidationVerdict,
)
from channel_hub.services.overlap_validation import InvalidArgumentError
from channel_hub.services.sub_channel_directory import (
    OverlapConflictError,
    SubChannelNotFoundError,
    create_sub_channel,
    delete_sub_channel,
    get_sub_channel,
    list_sub_channels,
    update_sub_channel,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sub-channels")


# =============================================================================
# Helper Functions
# =============================================================================


def _verdict_payload(verdict: Optional[ValidationVerdict]) -> Optional[Dict[str, Any]]:
    if verdict is None:
        return None
    return verdict.to_response().model_dump(mode="json")


def _conflict_exception(error: OverlapConflictError) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "message": error.verdict.message,
            "validation": _verdict_payload(error.verdict),
        },
    )


# =============================================================================
# Reads
# =============================================================================


@router.get("", response_model=dict)
async def list_sub_channels_endpoint(
    db: DBSessionDep,
    parent_channel_id: Optional[str] = Query(default=None, description="Filter by parent channel"),
) -> dict:
    """List sub-channels ordered by name: { subChannels: [...] }."""
    try:
        sub_channels = await list_sub_channels(db, parent_channel_id)
    except Exception as e:
        logger.error(f"Error listing sub-channels: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch sub-channels")

    return {"subChannels": [sc.model_dump(mode="json") for sc in sub_channels]}


@router.get("/{sub_channel_id}", response_model=dict)
async def get_sub_channel_endpoint(sub_channel_id: str, db: DBSessionDep) -> dict:
    try:
        sub_channel = await get_sub_channel(db, sub_channel_id)
    except SubChannelNotFoundError:
        raise HTTPException(status_code=404, detail="Sub-channel not found")
    except Exception as e:
        logger.error(f"Error fetching sub-channel {sub_channel_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch sub-channel")

    return sub_channel.model_dump(mode="json")


# =============================================================================
# Writes
# =============================================================================


@router.post("", response_model=dict, status_code=201)
async def create_sub_channel_endpoint(
    payload: SubChannelCreate,
    db: DBSessionDep,
    strategy: OverlapStrategyDep,
) -> dict:
    """
    Create a sub-channel after overlap validation.

    Returns:
        { subChannel: {...}, validation: { hasConflicts, conflictType, ... } }

    Raises:
        HTTPException 400: Blank required field.
        HTTPException 409: Blocking conflict, or warning without override_warnings.
        HTTPException 500: Database failure.
    """
    try:
        created, verdict = await create_sub_channel(db, payload, strategy)
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OverlapConflictError as e:
        logger.info(f"Sub-channel creation refused: {e.verdict.conflict_severity.value}")
        raise _conflict_exception(e)
    except Exception as e:
        logger.error(f"Error creating sub-channel: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create sub-channel")

    return {
        "subChannel": created.model_dump(mode="json"),
        "validation": _verdict_payload(verdict),
    }


@router.patch("/{sub_channel_id}", response_model=dict)
async def update_sub_channel_endpoint(
    sub_channel_id: str,
    payload: SubChannelUpdate,
    db: DBSessionDep,
    strategy: OverlapStrategyDep,
) -> dict:
    """Partially update a sub-channel; validation is null when no UTM field changed."""
    try:
        updated, verdict = await update_sub_channel(db, sub_channel_id, payload, strategy)
    except SubChannelNotFoundError:
        raise HTTPException(status_code=404, detail="Sub-channel not found")
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OverlapConflictError as e:
        logger.info(
            f"Sub-channel {sub_channel_id} update refused: {e.verdict.conflict_severity.value}"
        )
        raise _conflict_exception(e)
    except Exception as e:
        logger.error(f"Error updating sub-channel {sub_channel_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update sub-channel")

    return {
        "subChannel": updated.model_dump(mode="json"),
        "validation": _verdict_payload(verdict),
    }


@router.delete("/{sub_channel_id}", response_model=dict)
async def delete_sub_channel_endpoint(sub_channel_id: str, db: DBSessionDep) -> dict:
    try:
        await delete_sub_channel(db, sub_channel_id)
    except SubChannelNotFoundError:
        raise HTTPException(status_code=404, detail="Sub-channel not found")
    except Exception as e:
        logger.error(f"Error deleting sub-channel {sub_channel_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete sub-channel")

    return {"success": True}
