"""
Relink session: everything loaded for one remapping job.

Owns the parsed descriptor, the candidate index, the mapping state and the
base path. Loading a new descriptor invalidates every mapping; a failed
load changes nothing.
"""

from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from .candidates.index import DEFAULT_SUGGESTION_COUNT, CandidateIndex, ScoredCandidate
from .candidates.models import CandidateFile
from .descriptor.models import Descriptor, ParseResult, Track
from .descriptor.parser import export_descriptor, parse_descriptor
from .errors import UnknownTrackError
from .mapping.filters import TrackFilter, filter_tracks
from .mapping.models import MappingStatus, MappingSummary, TrackMapping
from .mapping.state import MappingState

DEFAULT_EXPORT_FILENAME = "rekordbox_relinked.xml"


class RelinkSession:
    """Session state for remapping one descriptor onto a new set of files."""

    def __init__(self, base_path: str = "", export_filename: str = DEFAULT_EXPORT_FILENAME):
        self.descriptor: Optional[Descriptor] = None
        self.candidates = CandidateIndex()
        self.mapping = MappingState()
        self.base_path = base_path
        self.export_filename = export_filename

    @property
    def base_path(self) -> str:
        return self._base_path

    @base_path.setter
    def base_path(self, value: str) -> None:
        # A blank value hands control back to the descriptor suggestion
        self._base_path = value
        self._base_path_from_user = bool(value.strip())

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_descriptor(self, text: str) -> ParseResult:
        """Parse and adopt a new descriptor.

        On success all mappings and ignore flags are cleared and the base
        path is re-seeded from the first track's folder unless the caller
        set one. On failure the previous descriptor and mappings are kept.
        """
        result = parse_descriptor(text)
        if not result.ok:
            return result

        self.descriptor = result.descriptor
        self.mapping.clear()
        if not self._base_path_from_user:
            self._base_path = result.descriptor.base_path_suggestion
        return result

    def load_candidates(self, candidates: Iterable[CandidateFile]) -> int:
        return self.candidates.load(candidates)

    def set_base_path(self, base_path: str) -> None:
        """Change the base path and re-resolve existing mappings under it."""
        self.base_path = base_path
        for track_id, mapping in self.mapping.mappings.items():
            candidate = self.candidates.get(mapping.relative_path) or CandidateFile.from_relative_path(
                mapping.relative_path
            )
            self.mapping.confirm(track_id, candidate, base_path)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self.descriptor.tracks if self.descriptor else ()

    @property
    def track_ids(self) -> list[str]:
        return [track.id for track in self.tracks]

    def track(self, track_id: str) -> Track:
        track = self.descriptor.get_track(track_id) if self.descriptor else None
        if track is None:
            raise UnknownTrackError(track_id)
        return track

    def status(self, track_id: str) -> MappingStatus:
        return self.mapping.status(self.track(track_id).id)

    def ranked(self, track_id: str, query: str = "", extension: Optional[str] = None) -> list[ScoredCandidate]:
        return self.candidates.ranked_for(self.track(track_id), query, extension)

    def suggestions(self, track_id: str, k: int = DEFAULT_SUGGESTION_COUNT) -> list[ScoredCandidate]:
        return self.candidates.top_suggestions(self.track(track_id), k)

    def next_unresolved(self, after_track_id: Optional[str] = None) -> Optional[str]:
        return self.mapping.next_unresolved(after_track_id, self.track_ids)

    def filtered_tracks(self, track_filter: TrackFilter) -> list[Track]:
        return filter_tracks(self.tracks, self.mapping, track_filter)

    def summary(self) -> MappingSummary:
        return self.mapping.summary(self.track_ids)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def confirm(self, track_id: str, relative_path: str) -> TrackMapping:
        """Map a track to a loaded candidate.

        Raises:
            UnknownTrackError: If the track is not in the descriptor
            KeyError: If no candidate has that relative path
        """
        track = self.track(track_id)
        candidate = self.candidates.get(relative_path)
        if candidate is None:
            raise KeyError(f"No candidate file at {relative_path!r}")
        return self.mapping.confirm(track.id, candidate, self.base_path)

    def confirm_and_advance(self, track_id: str, relative_path: str) -> Optional[str]:
        """Confirm a mapping and return the next unmatched track id."""
        self.confirm(track_id, relative_path)
        return self.next_unresolved(track_id)

    def ignore(self, track_id: str) -> None:
        self.mapping.ignore(self.track(track_id).id)

    def unignore(self, track_id: str) -> None:
        self.mapping.unignore(self.track(track_id).id)

    def unmap(self, track_id: str) -> Optional[TrackMapping]:
        return self.mapping.unmap(self.track(track_id).id)

    def clear(self) -> None:
        """Reset all mappings and ignore flags, keeping the descriptor."""
        self.mapping.clear()

    def auto_match(self, min_score: float) -> list[TrackMapping]:
        """Confirm the top suggestion of every unmatched track scoring >= min_score.

        Matched and ignored tracks are left alone.

        Returns:
            Mappings created by this call, in track order
        """
        created = []
        for track in self.tracks:
            if self.mapping.status(track.id) is not MappingStatus.UNMATCHED:
                continue
            best = self.candidates.top_suggestions(track, k=1)
            if best and best[0].score >= min_score:
                created.append(self.mapping.confirm(track.id, best[0].candidate, self.base_path))

        logger.info(f"Auto-matched {len(created)} tracks (min_score={min_score})")
        return created

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self) -> str:
        """Serialize the descriptor with the current mappings applied.

        Raises:
            ExportPreconditionError: If nothing is loaded or the base path is blank
        """
        return export_descriptor(self.descriptor, self.mapping.mappings, self.base_path)

    def export_to(self, output_path: Path) -> Path:
        """Export and write the result.

        Args:
            output_path: Target file, or a directory to place the default file name in

        Returns:
            Path that was written

        Raises:
            ExportPreconditionError: If nothing is loaded or the base path is blank
        """
        content = self.export()
        if output_path.is_dir():
            output_path = output_path / self.export_filename

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)

        logger.info(f"Wrote relinked descriptor: {output_path}")
        return output_path
