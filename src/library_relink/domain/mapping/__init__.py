"""Mapping domain - per-track matched/ignored state and review filters."""

from .filters import BitRateBucket, TrackFilter, bit_rate_bucket, filter_tracks
from .models import MappingStatus, MappingSummary, TrackMapping
from .state import MappingState

__all__ = [
    "BitRateBucket",
    "TrackFilter",
    "bit_rate_bucket",
    "filter_tracks",
    "MappingStatus",
    "MappingSummary",
    "TrackMapping",
    "MappingState",
]
