"""
Per-track mapping and ignore state.

Pure state container with no I/O. A track is in exactly one of
{mapped, ignored, neither}: confirming drops it from the ignore set and
ignoring drops its mapping.
"""

from typing import Iterable, Optional, Sequence

from loguru import logger

from ..candidates.models import CandidateFile
from ..descriptor.paths import encode_location
from .models import MappingStatus, MappingSummary, TrackMapping


class MappingState:
    """Mappings and ignore flags for the tracks of one loaded descriptor."""

    def __init__(self) -> None:
        self._mappings: dict[str, TrackMapping] = {}
        self._ignored: set[str] = set()

    @property
    def mappings(self) -> dict[str, TrackMapping]:
        """Snapshot of track id -> mapping."""
        return dict(self._mappings)

    @property
    def ignored(self) -> frozenset[str]:
        return frozenset(self._ignored)

    def get(self, track_id: str) -> Optional[TrackMapping]:
        return self._mappings.get(track_id)

    def confirm(self, track_id: str, candidate: CandidateFile, base_path: str) -> TrackMapping:
        """Map a track to a candidate file, replacing any earlier mapping.

        The location is computed before anything is stored, so a failure
        leaves the previous state in place.

        Args:
            track_id: Track to map
            candidate: Chosen candidate file
            base_path: Root the new location resolves under

        Returns:
            The stored mapping
        """
        mapping = TrackMapping(
            track_id=track_id,
            relative_path=candidate.relative_path,
            resolved_location=encode_location(base_path, candidate.relative_path),
        )
        self._mappings[track_id] = mapping
        self._ignored.discard(track_id)
        logger.debug(f"Mapped track {track_id} -> {candidate.relative_path}")
        return mapping

    def unmap(self, track_id: str) -> Optional[TrackMapping]:
        """Remove a track's mapping; returns the removed mapping, if any."""
        return self._mappings.pop(track_id, None)

    def ignore(self, track_id: str) -> None:
        self._mappings.pop(track_id, None)
        self._ignored.add(track_id)

    def unignore(self, track_id: str) -> None:
        self._ignored.discard(track_id)

    def toggle_ignore(self, track_id: str) -> bool:
        """Flip ignore membership; returns True if the track is now ignored."""
        if track_id in self._ignored:
            self.unignore(track_id)
            return False
        self.ignore(track_id)
        return True

    def status(self, track_id: str) -> MappingStatus:
        if track_id in self._mappings:
            return MappingStatus.MATCHED
        if track_id in self._ignored:
            return MappingStatus.IGNORED
        return MappingStatus.UNMATCHED

    def next_unresolved(
        self, after_track_id: Optional[str], ordered_track_ids: Sequence[str]
    ) -> Optional[str]:
        """Find the next unmatched track after ``after_track_id``, wrapping around.

        The scan starts just after ``after_track_id`` (or at the beginning if
        it is None or not in the order) and ends with ``after_track_id``
        itself, so a lone unmatched current track is returned.

        Args:
            after_track_id: Track that currently has focus
            ordered_track_ids: Track ids in display order

        Returns:
            Id of the first unmatched track, or None if every track is resolved
        """
        count = len(ordered_track_ids)
        if count == 0:
            return None

        try:
            start = ordered_track_ids.index(after_track_id) + 1
        except ValueError:
            start = 0

        for step in range(count):
            track_id = ordered_track_ids[(start + step) % count]
            if self.status(track_id) is MappingStatus.UNMATCHED:
                return track_id
        return None

    def summary(self, track_ids: Iterable[str]) -> MappingSummary:
        matched = ignored = unmatched = 0
        for track_id in track_ids:
            status = self.status(track_id)
            if status is MappingStatus.MATCHED:
                matched += 1
            elif status is MappingStatus.IGNORED:
                ignored += 1
            else:
                unmatched += 1
        return MappingSummary(
            total=matched + ignored + unmatched,
            matched=matched,
            ignored=ignored,
            unmatched=unmatched,
        )

    def clear(self) -> None:
        """Drop all mappings and ignore flags."""
        self._mappings.clear()
        self._ignored.clear()
