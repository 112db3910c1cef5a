"""
FastAPI router for authoritative sub-channel overlap validation.

Key Endpoints:
- POST /validate-subchannel-overlap - Validate a UTM rule against its siblings

Request body:
    { utm_source, utm_medium, utm_medium_matching_type, parent_channel_id,
      exclude_sub_channel_id? }

Response shape (200):
    { hasConflicts: bool, conflictType: "error"|"warning"|"none",
      message: str, conflictingChannels: [...] }

Status codes:
- 400: a required parameter is missing/blank or not a string, the matching
  type is invalid, or the body is not JSON (see main.request_validation_handler)
- 500: the existing sub-channels could not be loaded
"""

import logging

from fastapi import APIRouter, HTTPException

from channel_hub.core.dependencies import DBSessionDep, OverlapStrategyDep
from channel_hub.models.enums import MatchingType
from channel_hub.models.schemas import (
    CandidateSubChannel,
    OverlapValidationRequest,
    OverlapValidationResponse,
)
from channel_hub.services.overlap_validation import InvalidArgumentError, validate
from channel_hub.services.sub_channel_directory import fetch_sibling_sub_channels


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "utm_source",
    "utm_medium",
    "utm_medium_matching_type",
    "parent_channel_id",
)

VALIDATE_OVERLAP_PATH = "/validate-subchannel-overlap"
MISSING_PARAMETERS_DETAIL = "Missing required parameters"

router = APIRouter()


@router.post(VALIDATE_OVERLAP_PATH, response_model=OverlapValidationResponse)
async def validate_subchannel_overlap(
    request: OverlapValidationRequest,
    db: DBSessionDep,
    strategy: OverlapStrategyDep,
) -> OverlapValidationResponse:
    """
    Validate a proposed sub-channel rule before it is persisted.

    Loads the sub-channels of parent_channel_id (minus exclude_sub_channel_id)
    and runs the configured overlap strategy (source_gated by default).

    Example Request:
        POST /validate-subchannel-overlap
        {
            "utm_source": "facebook",
            "utm_medium": "cpc",
            "utm_medium_matching_type": "exact",
            "parent_channel_id": "social-media"
        }

    Example Response:
        {
            "hasConflicts": true,
            "conflictType": "error",
            "message": "Exact conflict with \\"Facebook Ads\\": identical UTM source and medium",
            "conflictingChannels": [{"id": "...", "name": "Facebook Ads", ...}]
        }
    """
    missing = [
        field for field in REQUIRED_FIELDS
        if not (getattr(request, field) or "").strip()
    ]
    if missing:
        logger.warning(f"Overlap validation rejected: missing {', '.join(missing)}")
        raise HTTPException(status_code=400, detail=MISSING_PARAMETERS_DETAIL)

    try:
        matching_type = MatchingType(request.utm_medium_matching_type.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail="utm_medium_matching_type must be 'exact' or 'contains'"
        )

    exclude_id = (request.exclude_sub_channel_id or "").strip() or None
    candidate = CandidateSubChannel(
        parent_channel_id=request.parent_channel_id.strip(),
        utm_source=request.utm_source,
        utm_medium=request.utm_medium,
        utm_medium_matching_type=matching_type,
    )

    logger.info(
        f"Validating sub-channel overlap: source={request.utm_source} "
        f"medium={request.utm_medium} type={matching_type.value} "
        f"parent={candidate.parent_channel_id}"
    )

    try:
        existing = await fetch_sibling_sub_channels(db, candidate.parent_channel_id, exclude_id)
    except Exception as e:
        logger.error(f"Error fetching sub-channels: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch existing sub-channels"
        )

    try:
        verdict = validate(candidate, existing, exclude_id=exclude_id, strategy=strategy)
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        f"Overlap validation result: {verdict.conflict_severity.value} "
        f"({len(verdict.conflicting_channels)} conflicting)"
    )

    return verdict.to_response()
