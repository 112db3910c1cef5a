"""
Pydantic models for the Channel Hub backend.

Covers the sub-channel domain objects consumed by the overlap validator, the
validator's verdict and strategy, and the request/response contracts of the
HTTP endpoints.

Field naming follows the wire format of each contract: the sub_channels table
and its request bodies are snake_case, the overlap validation response keeps the
camelCase shape the dashboard already consumes.

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from channel_hub.models.enums import ConflictSeverity, MatchingType


# =============================================================================
# Sub-Channel Domain Models
# =============================================================================


class SubChannel(BaseModel):
    """
    A persisted sub-channel: a UTM attribution rule under a parent channel.

    Overlap is only ever evaluated among sub-channels sharing parent_channel_id.
    Instances are immutable; the validator never changes them.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "5c7f7a52-3a7d-4a4e-9b0e-3f2d1c9b8a10",
                "parent_channel_id": "social-media",
                "name": "Facebook Ads",
                "utm_source": "facebook",
                "utm_medium": "cpc",
                "utm_medium_matching_type": "exact",
            }
        }
    )

    id: str = Field(..., description="Unique sub-channel identifier")
    parent_channel_id: str = Field(..., description="Owning channel identifier")
    name: str = Field(..., description="Human-readable label used in messages")
    utm_source: str = Field(..., description="UTM source matched by this rule")
    utm_medium: str = Field(..., description="UTM medium matched by this rule")
    utm_medium_matching_type: MatchingType = Field(
        default=MatchingType.EXACT,
        description="exact or contains"
    )
    created_at: Optional[datetime] = Field(default=None)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "SubChannel":
        """Build a SubChannel from an asyncpg record or plain mapping."""
        return cls(
            id=str(record["id"]),
            parent_channel_id=str(record["parent_channel_id"]),
            name=record.get("name") or "",
            utm_source=record["utm_source"],
            utm_medium=record["utm_medium"],
            utm_medium_matching_type=record.get("utm_medium_matching_type") or MatchingType.EXACT,
            created_at=record.get("created_at"),
        )


class CandidateSubChannel(BaseModel):
    """
    A proposed new or edited sub-channel, not yet persisted.

    Fields are optional at the model level so that a missing UTM value reaches
    the validator and is rejected there as an invalid argument.
    """
    model_config = ConfigDict(frozen=True)

    parent_channel_id: Optional[str] = Field(default=None)
    name: str = Field(default="")
    utm_source: Optional[str] = Field(default=None)
    utm_medium: Optional[str] = Field(default=None)
    utm_medium_matching_type: MatchingType = Field(default=MatchingType.EXACT)


# =============================================================================
# Validation Strategy and Verdict
# =============================================================================


class OverlapStrategy(BaseModel):
    """
    Configuration of the overlap rules.

    source_must_match:
        True: pairs with different normalized sources never conflict, and the
        per-case rules look at utm_medium only.
        False: source and medium are compared alike.
    fuzzy_similarity:
        True: contains/contains pairs are scored and only a HIGH overlap level
        is a warning.
        False: any substring relation between contains rules is a warning.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(default="custom")
    source_must_match: bool
    fuzzy_similarity: bool
    similarity_threshold: float = Field(default=0.70, ge=0.0, le=1.0)


class ValidationVerdict(BaseModel):
    """Outcome of validating one candidate against its siblings."""
    model_config = ConfigDict(frozen=True)

    conflict_severity: ConflictSeverity = Field(default=ConflictSeverity.NONE)
    message: str = Field(default="")
    conflicting_channels: List[SubChannel] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicting_channels) > 0

    @property
    def blocks_submission(self) -> bool:
        return self.conflict_severity == ConflictSeverity.ERROR

    @property
    def requires_override(self) -> bool:
        return self.conflict_severity == ConflictSeverity.WARNING

    def to_response(self) -> "OverlapValidationResponse":
        """Render the verdict in the remote endpoint's JSON shape."""
        return OverlapValidationResponse(
            hasConflicts=self.has_conflicts,
            conflictType=self.conflict_severity,
            message=self.message,
            conflictingChannels=[
                ConflictingChannel(
                    id=channel.id,
                    name=channel.name,
                    utm_source=channel.utm_source,
                    utm_medium=channel.utm_medium,
                    utm_medium_matching_type=channel.utm_medium_matching_type,
                )
                for channel in self.conflicting_channels
            ],
        )


# =============================================================================
# Overlap Validation Endpoint Contract
# =============================================================================


class OverlapValidationRequest(BaseModel):
    """
    Request body for POST /validate-subchannel-overlap.

    Every field is optional here; the endpoint answers 400 itself when a
    required one is missing, blank or invalid.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "utm_source": "facebook",
                "utm_medium": "cpc",
                "utm_medium_matching_type": "exact",
                "parent_channel_id": "social-media",
                "exclude_sub_channel_id": None,
            }
        }
    )

    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_medium_matching_type: Optional[str] = None
    parent_channel_id: Optional[str] = None
    exclude_sub_channel_id: Optional[str] = None


class ConflictingChannel(BaseModel):
    """Sub-channel summary embedded in the overlap validation response."""
    id: str
    name: str
    utm_source: str
    utm_medium: str
    utm_medium_matching_type: MatchingType


class OverlapValidationResponse(BaseModel):
    """
    Response body for POST /validate-subchannel-overlap.

    Shape: { hasConflicts, conflictType, message, conflictingChannels }
    """
    hasConflicts: bool
    conflictType: ConflictSeverity
    message: str
    conflictingChannels: List[ConflictingChannel] = Field(default_factory=list)


# =============================================================================
# Sub-Channel Directory Contract
# =============================================================================


class SubChannelCreate(BaseModel):
    """Request body for POST /sub-channels."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "parent_channel_id": "social-media",
                "name": "Instagram Stories",
                "utm_source": "instagram",
                "utm_medium": "stories",
                "utm_medium_matching_type": "contains",
                "override_warnings": False,
            }
        }
    )

    parent_channel_id: str = Field(..., description="Owning channel identifier")
    name: str = Field(..., description="Human-readable label")
    utm_source: str = Field(..., description="UTM source")
    utm_medium: str = Field(..., description="UTM medium")
    utm_medium_matching_type: MatchingType = Field(default=MatchingType.EXACT)
    override_warnings: bool = Field(
        default=False,
        description="Persist even when the overlap verdict is a warning"
    )

    def to_candidate(self) -> CandidateSubChannel:
        return CandidateSubChannel(
            parent_channel_id=self.parent_channel_id,
            name=self.name,
            utm_source=self.utm_source,
            utm_medium=self.utm_medium,
            utm_medium_matching_type=self.utm_medium_matching_type,
        )


class SubChannelUpdate(BaseModel):
    """Request body for PATCH /sub-channels/{id}; omitted fields keep their value."""
    name: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_medium_matching_type: Optional[MatchingType] = None
    override_warnings: bool = False

    def changes(self) -> Dict[str, Any]:
        """Return only the column values that were provided."""
        return self.model_dump(exclude_none=True, exclude={"override_warnings"})

    def touches_utm(self) -> bool:
        return any(
            value is not None
            for value in (self.utm_source, self.utm_medium, self.utm_medium_matching_type)
        )
