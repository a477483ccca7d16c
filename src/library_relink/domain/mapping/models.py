"""
Mapping domain models.
"""

from dataclasses import dataclass
from enum import Enum


class MappingStatus(str, Enum):
    """Resolution state of a track; exactly one applies at any time."""

    MATCHED = "matched"
    IGNORED = "ignored"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class TrackMapping:
    """A confirmed association from a track to a candidate file."""

    track_id: str
    relative_path: str  # Candidate path, slash-separated, no leading slash
    resolved_location: str  # Export-ready stored location


@dataclass(frozen=True)
class MappingSummary:
    """Counts of tracks per status."""

    total: int
    matched: int
    ignored: int
    unmatched: int

    @property
    def resolved(self) -> int:
        return self.matched + self.ignored
