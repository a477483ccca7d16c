"""Track list filtering for review queues.

This module handles display-only filters over descriptor tracks:
- Mapping status (matched / ignored / unmatched)
- Bitrate bucket
- Free-text search over title, artist, album and stored location

Filters never change tracks or mappings, only which tracks a query returns.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..descriptor.models import Track
from .models import MappingStatus
from .state import MappingState

STATUS_ALL = "all"


class BitRateBucket(str, Enum):
    """Bitrate ranges in kbps; boundaries are inclusive."""

    LOW = "low"  # <= 160
    MID = "mid"  # 161-256
    HIGH = "high"  # 257-319
    MAX = "max"  # >= 320
    UNKNOWN = "unknown"  # No BitRate attribute


def bit_rate_bucket(bit_rate_kbps: Optional[int]) -> BitRateBucket:
    if bit_rate_kbps is None:
        return BitRateBucket.UNKNOWN
    if bit_rate_kbps <= 160:
        return BitRateBucket.LOW
    if bit_rate_kbps <= 256:
        return BitRateBucket.MID
    if bit_rate_kbps < 320:
        return BitRateBucket.HIGH
    return BitRateBucket.MAX


def parse_status_filter(value: str) -> Optional[MappingStatus]:
    """Parse a status filter name; "all" (or empty) means no filter.

    Raises:
        ValueError: If the name is not a known status
    """
    value = (value or STATUS_ALL).strip().lower()
    if value == STATUS_ALL:
        return None
    try:
        return MappingStatus(value)
    except ValueError:
        valid = [STATUS_ALL] + [s.value for s in MappingStatus]
        raise ValueError(f"Invalid status filter: {value!r}. Must be one of {valid}")


@dataclass(frozen=True)
class TrackFilter:
    """Combined display filter; None/empty fields match everything."""

    status: Optional[MappingStatus] = None
    bit_rate: Optional[BitRateBucket] = None
    query: str = ""

    def matches(self, track: Track, state: MappingState) -> bool:
        if self.status is not None and state.status(track.id) is not self.status:
            return False
        if self.bit_rate is not None and bit_rate_bucket(track.bit_rate_kbps) is not self.bit_rate:
            return False
        needle = self.query.strip().lower()
        if needle:
            haystack = " ".join(
                (track.title, track.artist, track.album, track.stored_location)
            ).lower()
            if needle not in haystack:
                return False
        return True


def filter_tracks(
    tracks: Iterable[Track], state: MappingState, track_filter: TrackFilter
) -> list[Track]:
    """Tracks passing the filter, in their original order."""
    return [track for track in tracks if track_filter.matches(track, state)]
