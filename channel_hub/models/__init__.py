"""
Package initialization file for Channel Hub models.

Re-exports the enums and Pydantic schemas so other modules can import them from
channel_hub.models directly.

Usage:
    from channel_hub.models import (
        MatchingType,
        ConflictSeverity,
        SubChannel,
        CandidateSubChannel,
        ValidationVerdict,
    )
"""

# =============================================================================
# Enums
# =============================================================================

from channel_hub.models.enums import (
    MatchingType,
    ConflictSeverity,
    OverlapLevel,
    max_severity,
)

# =============================================================================
# Schemas
# =============================================================================

from channel_hub.models.schemas import (
    # Domain
    SubChannel,
    CandidateSubChannel,
    # Validation
    OverlapStrategy,
    ValidationVerdict,
    # Overlap validation endpoint
    OverlapValidationRequest,
    OverlapValidationResponse,
    ConflictingChannel,
    # Sub-channel directory endpoints
    SubChannelCreate,
    SubChannelUpdate,
)

__all__ = [
    # Enums
    "MatchingType",
    "ConflictSeverity",
    "OverlapLevel",
    "max_severity",
    # Domain
    "SubChannel",
    "CandidateSubChannel",
    # Validation
    "OverlapStrategy",
    "ValidationVerdict",
    # Overlap validation endpoint
    "OverlapValidationRequest",
    "OverlapValidationResponse",
    "ConflictingChannel",
    # Sub-channel directory endpoints
    "SubChannelCreate",
    "SubChannelUpdate",
]
