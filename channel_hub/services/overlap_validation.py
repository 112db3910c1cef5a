"""
Sub-Channel Overlap Validation Service

Decides whether a candidate sub-channel's UTM rule collides with sub-channels
already registered under the same parent channel, and how badly:

- error: both rules are exact and target identical UTMs (blocks submission)
- warning: the rules can match the same traffic (shown, overridable)
- none: no overlap

Two rule sets are in use and both are exposed as presets of OverlapStrategy:

SYMMETRIC (live form feedback)
    Source and medium are compared alike. A contains/contains pair is scored
    (identical +50, substring +30, Levenshtein ratio > 0.70 +20, per field) and
    only a HIGH score is a warning.

SOURCE_GATED (authoritative check before persistence)
    Sources must be identical or the pair is skipped; the exact/contains rules
    then look at utm_medium only, and any substring relation between two
    contains rules is a warning.

validate() is a pure function: it never mutates its inputs and keeps no state,
so it may be called once per keystroke and again on submit without coordination.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic import ValidationError

from channel_hub.models.enums import (
    ConflictSeverity,
    MatchingType,
    OverlapLevel,
    max_severity,
)
from channel_hub.models.schemas import (
    CandidateSubChannel,
    OverlapStrategy,
    SubChannel,
    ValidationVerdict,
)
from channel_hub.services.similarity import similarity_ratio


logger = logging.getLogger(__name__)


class InvalidArgumentError(ValueError):
    """Raised when the caller passes a candidate that cannot be validated."""


# =============================================================================
# Strategies
# =============================================================================

SYMMETRIC = OverlapStrategy(
    name="symmetric",
    source_must_match=False,
    fuzzy_similarity=True,
)

SOURCE_GATED = OverlapStrategy(
    name="source_gated",
    source_must_match=True,
    fuzzy_similarity=False,
)

STRATEGIES: Dict[str, OverlapStrategy] = {
    SYMMETRIC.name: SYMMETRIC,
    SOURCE_GATED.name: SOURCE_GATED,
}


def strategy_from_name(
    name: str,
    similarity_threshold: Optional[float] = None,
) -> OverlapStrategy:
    """
    Look up a preset strategy by name.

    Args:
        name: 'symmetric' or 'source_gated' (case-insensitive).
        similarity_threshold: Optional override of the fuzzy similarity cut-off.

    Raises:
        InvalidArgumentError: If the name is not a known preset, or the
            threshold is outside [0, 1].
    """
    key = (name or "").strip().lower()
    if key not in STRATEGIES:
        raise InvalidArgumentError(
            f"Unknown overlap strategy: {name!r} (expected one of {sorted(STRATEGIES)})"
        )

    strategy = STRATEGIES[key]
    if similarity_threshold is not None and similarity_threshold != strategy.similarity_threshold:
        try:
            strategy = OverlapStrategy.model_validate(
                {**strategy.model_dump(), "similarity_threshold": similarity_threshold}
            )
        except ValidationError as e:
            raise InvalidArgumentError(
                f"Invalid similarity threshold: {similarity_threshold!r} (expected 0.0-1.0)"
            ) from e
    return strategy


# =============================================================================
# Overlap Scoring
# =============================================================================

# Per-field contributions to the contains/contains overlap score
IDENTICAL_FIELD_SCORE: int = 50
SUBSTRING_FIELD_SCORE: int = 30
SIMILAR_FIELD_SCORE: int = 20

# Lower bounds of each overlap level, checked from the top
OVERLAP_LEVEL_THRESHOLDS: Tuple[Tuple[int, OverlapLevel], ...] = (
    (80, OverlapLevel.HIGH),
    (50, OverlapLevel.MEDIUM),
    (20, OverlapLevel.LOW),
)

NO_CONFLICT_MESSAGE = "No conflicts detected"


def normalize_utm(value: str) -> str:
    """Lower-case and trim a UTM value for comparison."""
    return value.strip().lower()


def _has_substring_relation(a: str, b: str) -> bool:
    return a in b or b in a


def field_overlap_score(a: str, b: str, similarity_threshold: float = 0.70) -> int:
    """
    Score how closely two normalized values of the same UTM field overlap.

    Returns:
        50 if identical, 30 if one contains the other, 20 if their Levenshtein
        similarity ratio is strictly above the threshold, else 0.
    """
    if a == b:
        return IDENTICAL_FIELD_SCORE
    if _has_substring_relation(a, b):
        return SUBSTRING_FIELD_SCORE
    if similarity_ratio(a, b) > similarity_threshold:
        return SIMILAR_FIELD_SCORE
    return 0


def calculate_overlap_score(
    source_a: str,
    medium_a: str,
    source_b: str,
    medium_b: str,
    similarity_threshold: float = 0.70,
) -> int:
    """Sum of the source and medium field scores (0-100) for normalized values."""
    return (
        field_overlap_score(source_a, source_b, similarity_threshold)
        + field_overlap_score(medium_a, medium_b, similarity_threshold)
    )


def classify_overlap_score(score: int) -> OverlapLevel:
    """Map an overlap score to its level: >=80 high, >=50 medium, >=20 low."""
    for lower_bound, level in OVERLAP_LEVEL_THRESHOLDS:
        if score >= lower_bound:
            return level
    return OverlapLevel.NONE


# =============================================================================
# Pairwise Comparison
# =============================================================================


def _require_text(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{field_name} is required")
    return str(value)


def compare_pair(
    candidate: CandidateSubChannel,
    existing: SubChannel,
    strategy: OverlapStrategy = SOURCE_GATED,
) -> Optional[Tuple[ConflictSeverity, str]]:
    """
    Compare a candidate with one existing sub-channel of the same parent.

    Parent scoping and self-exclusion are the caller's job (see validate()).

    Returns:
        (severity, message line) when the pair conflicts, otherwise None.
        Sub-HIGH fuzzy overlaps are informational and return None.
    """
    candidate_source = normalize_utm(_require_text(candidate.utm_source, "utm_source"))
    candidate_medium = normalize_utm(_require_text(candidate.utm_medium, "utm_medium"))
    existing_source = normalize_utm(existing.utm_source)
    existing_medium = normalize_utm(existing.utm_medium)

    if strategy.source_must_match and candidate_source != existing_source:
        return None

    # (candidate value, existing value) pairs the matching rules look at
    if strategy.source_must_match:
        fields = [(candidate_medium, existing_medium)]
    else:
        fields = [
            (candidate_source, existing_source),
            (candidate_medium, existing_medium),
        ]

    candidate_type = candidate.utm_medium_matching_type
    existing_type = existing.utm_medium_matching_type

    if candidate_type == MatchingType.EXACT and existing_type == MatchingType.EXACT:
        if all(ours == theirs for ours, theirs in fields):
            return (
                ConflictSeverity.ERROR,
                f'Exact conflict with "{existing.name}": identical UTM source and medium',
            )
        return None

    if candidate_type == MatchingType.CONTAINS and existing_type == MatchingType.CONTAINS:
        if not any(_has_substring_relation(ours, theirs) for ours, theirs in fields):
            return None
        if strategy.fuzzy_similarity:
            score = calculate_overlap_score(
                candidate_source,
                candidate_medium,
                existing_source,
                existing_medium,
                strategy.similarity_threshold,
            )
            level = classify_overlap_score(score)
            if level != OverlapLevel.HIGH:
                logger.debug(
                    f"Informational {level.value} overlap (score={score}) "
                    f"with sub-channel {existing.id}"
                )
                return None
            return (
                ConflictSeverity.WARNING,
                f'High overlap with "{existing.name}": UTM rules may match the same traffic',
            )
        return (
            ConflictSeverity.WARNING,
            f'Overlap detected with "{existing.name}": contains rules may match the same traffic',
        )

    # Mixed: the contains side's value must contain the exact side's value
    if candidate_type == MatchingType.EXACT:
        overlaps = any(ours in theirs for ours, theirs in fields)
    else:
        overlaps = any(theirs in ours for ours, theirs in fields)

    if overlaps:
        return (
            ConflictSeverity.WARNING,
            f'Possible conflict with "{existing.name}": exact vs contains UTM match',
        )
    return None


def select_comparison_set(
    candidate: CandidateSubChannel,
    existing: Iterable[SubChannel],
    exclude_id: Optional[str] = None,
) -> List[SubChannel]:
    """Existing sub-channels under the candidate's parent, minus exclude_id."""
    return [
        sub_channel
        for sub_channel in existing
        if sub_channel.parent_channel_id == candidate.parent_channel_id
        and (exclude_id is None or sub_channel.id != exclude_id)
    ]


# =============================================================================
# Validation Entry Point
# =============================================================================


def validate(
    candidate: CandidateSubChannel,
    existing: Sequence[SubChannel],
    exclude_id: Optional[str] = None,
    strategy: OverlapStrategy = SOURCE_GATED,
) -> ValidationVerdict:
    """
    Validate a candidate sub-channel against the existing directory.

    Args:
        candidate: The proposed sub-channel.
        existing: Known sub-channels; entries of other parents are ignored.
        exclude_id: Id of the sub-channel being edited, skipped in comparisons.
        strategy: Rule set to apply (SOURCE_GATED or SYMMETRIC preset, or custom).

    Returns:
        ValidationVerdict with the worst severity seen, every conflicting
        sub-channel once in input order, and one message line per conflict.

    Raises:
        InvalidArgumentError: If utm_source, utm_medium or parent_channel_id is
            missing or blank. Nothing is compared in that case.

    Example:
        >>> existing = [SubChannel(id="1", parent_channel_id="p", name="FB",
        ...     utm_source="Facebook", utm_medium="cpc")]
        >>> candidate = CandidateSubChannel(parent_channel_id="p",
        ...     utm_source="facebook", utm_medium="cpc")
        >>> validate(candidate, existing).conflict_severity
        <ConflictSeverity.ERROR: 'error'>
    """
    _require_text(candidate.utm_source, "utm_source")
    _require_text(candidate.utm_medium, "utm_medium")
    _require_text(candidate.parent_channel_id, "parent_channel_id")

    severities: List[ConflictSeverity] = []
    conflicts: List[SubChannel] = []
    messages: List[str] = []
    seen_ids: Set[str] = set()

    for sub_channel in select_comparison_set(candidate, existing, exclude_id):
        if sub_channel.id in seen_ids:
            continue

        outcome = compare_pair(candidate, sub_channel, strategy)
        if outcome is None:
            continue

        severity, message = outcome
        seen_ids.add(sub_channel.id)
        severities.append(severity)
        conflicts.append(sub_channel)
        messages.append(message)

    verdict = ValidationVerdict(
        conflict_severity=max_severity(severities),
        message="\n".join(messages) if messages else NO_CONFLICT_MESSAGE,
        conflicting_channels=conflicts,
    )

    logger.debug(
        f"Overlap verdict ({strategy.name}) for parent={candidate.parent_channel_id}: "
        f"{verdict.conflict_severity.value}, {len(conflicts)} conflicting"
    )

    return verdict
