"""
Backend Services Module

Business logic for the Channel Hub backend.

Services:
- similarity: Levenshtein edit distance and similarity ratio
- overlap_validation: UTM sub-channel overlap detection (pure, stateless)
- sub_channel_directory: sub_channels reads/writes gated by overlap validation

All services are consumed by the API layer (channel_hub/api/).
"""

# =============================================================================
# String Similarity
# =============================================================================

from channel_hub.services.similarity import (
    levenshtein_distance,
    similarity_ratio,
)

# =============================================================================
# Overlap Validation
# Pure validator with the SYMMETRIC and SOURCE_GATED rule presets
# =============================================================================

from channel_hub.services.overlap_validation import (
    validate,
    compare_pair,
    select_comparison_set,
    calculate_overlap_score,
    classify_overlap_score,
    field_overlap_score,
    normalize_utm,
    strategy_from_name,
    InvalidArgumentError,
    SYMMETRIC,
    SOURCE_GATED,
    STRATEGIES,
)

# =============================================================================
# Sub-Channel Directory
# =============================================================================

from channel_hub.services.sub_channel_directory import (
    list_sub_channels,
    fetch_sibling_sub_channels,
    get_sub_channel,
    validate_candidate,
    enforce_verdict,
    create_sub_channel,
    update_sub_channel,
    delete_sub_channel,
    SubChannelNotFoundError,
    OverlapConflictError,
)

__all__ = [
    # similarity
    "levenshtein_distance",
    "similarity_ratio",
    # overlap_validation
    "validate",
    "compare_pair",
    "select_comparison_set",
    "calculate_overlap_score",
    "classify_overlap_score",
    "field_overlap_score",
    "normalize_utm",
    "strategy_from_name",
    "InvalidArgumentError",
    "SYMMETRIC",
    "SOURCE_GATED",
    "STRATEGIES",
    # sub_channel_directory
    "list_sub_channels",
    "fetch_sibling_sub_channels",
    "get_sub_channel",
    "validate_candidate",
    "enforce_verdict",
    "create_sub_channel",
    "update_sub_channel",
    "delete_sub_channel",
    "SubChannelNotFoundError",
    "OverlapConflictError",
]
