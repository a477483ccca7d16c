"""
Candidate file index: the flat set of files a track can be remapped to.
"""

from typing import Iterable, NamedTuple, Optional

from loguru import logger

from ..descriptor.models import Track
from ..matching.scoring import score
from .models import CandidateFile

DEFAULT_SUGGESTION_COUNT = 5


class ScoredCandidate(NamedTuple):
    """A candidate file with its score against one track."""

    candidate: CandidateFile
    score: float


def _normalize_extension(extension: Optional[str]) -> str:
    return (extension or "").strip().lstrip(".").lower()


class CandidateIndex:
    """Holds one candidate set, replaced wholesale on every load.

    Filters only shape query results; the stored set never changes.
    """

    def __init__(self, candidates: Iterable[CandidateFile] = ()) -> None:
        self._by_path: dict[str, CandidateFile] = {}
        self.load(candidates)

    def load(self, candidates: Iterable[CandidateFile]) -> int:
        """Replace the candidate set.

        Duplicate relative paths keep the last one seen.

        Returns:
            Number of distinct candidates loaded
        """
        by_path: dict[str, CandidateFile] = {}
        for candidate in candidates:
            if candidate.relative_path in by_path:
                logger.warning(
                    f"Duplicate candidate path {candidate.relative_path!r}; keeping the last one"
                )
            by_path[candidate.relative_path] = candidate

        self._by_path = by_path
        logger.info(f"Loaded {len(by_path)} candidate files")
        return len(by_path)

    def __len__(self) -> int:
        return len(self._by_path)

    def __iter__(self):
        return iter(self.all())

    def get(self, relative_path: str) -> Optional[CandidateFile]:
        return self._by_path.get(relative_path)

    def all(self) -> list[CandidateFile]:
        """All candidates sorted by relative path."""
        return [self._by_path[path] for path in sorted(self._by_path)]

    def extensions(self) -> list[str]:
        """Distinct extensions present in the set, for an extension filter."""
        return sorted({c.extension for c in self._by_path.values() if c.extension})

    def filter(self, query: str = "", extension: Optional[str] = None) -> list[CandidateFile]:
        """Candidates matching a name/path substring and an extension.

        Args:
            query: Case-insensitive substring of display name or relative path
            extension: Extension with or without the dot; empty means any

        Returns:
            Matching candidates sorted by relative path
        """
        needle = query.strip().lower()
        wanted = _normalize_extension(extension)
        results = []
        for candidate in self.all():
            if wanted and candidate.extension != wanted:
                continue
            if needle and needle not in f"{candidate.display_name} {candidate.relative_path}".lower():
                continue
            results.append(candidate)
        return results

    def ranked_for(
        self, track: Track, query: str = "", extension: Optional[str] = None
    ) -> list[ScoredCandidate]:
        """Score every (filtered) candidate against a track.

        Returns:
            Scored candidates, best first; ties ordered by relative path
        """
        scored = [ScoredCandidate(c, score(track, c)) for c in self.filter(query, extension)]
        scored.sort(key=lambda item: (-item.score, item.candidate.relative_path))
        return scored

    def top_suggestions(
        self,
        track: Track,
        k: int = DEFAULT_SUGGESTION_COUNT,
        query: str = "",
        extension: Optional[str] = None,
    ) -> list[ScoredCandidate]:
        """The best ``k`` candidates with a non-zero score."""
        ranked = self.ranked_for(track, query, extension)
        return [item for item in ranked[:k] if item.score > 0]
