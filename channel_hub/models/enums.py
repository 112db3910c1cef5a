"""
Enumeration definitions for the Channel Hub backend.

All enums inherit from both `str` and `Enum` so they serialize as plain strings
in Pydantic models and JSON responses.
"""

from enum import Enum
from typing import Iterable


class MatchingType(str, Enum):
    """
    How a sub-channel's UTM values are matched against incoming traffic.

    - exact: the traffic UTM must equal the stored value
    - contains: the traffic UTM only needs to contain the stored value
    """
    EXACT = "exact"
    CONTAINS = "contains"


class ConflictSeverity(str, Enum):
    """
    Severity of an overlap between two sub-channel rules.

    Ordered none < warning < error:
    - none: no overlap, submission proceeds silently
    - warning: advisory overlap, submission allowed with an explicit override
    - error: identical targeting, submission is blocked
    """
    NONE = "none"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    ConflictSeverity.NONE: 0,
    ConflictSeverity.WARNING: 1,
    ConflictSeverity.ERROR: 2,
}


def max_severity(severities: Iterable[ConflictSeverity]) -> ConflictSeverity:
    """Return the most severe value, or NONE for an empty iterable."""
    worst = ConflictSeverity.NONE
    for severity in severities:
        if severity.rank > worst.rank:
            worst = severity
    return worst


class OverlapLevel(str, Enum):
    """
    Tier of the weighted overlap score between two contains/contains rules.

    Score thresholds: >= 80 high, >= 50 medium, >= 20 low, otherwise none.
    Only HIGH escalates a comparison to a warning.
    """
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
