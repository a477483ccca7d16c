"""
Token-overlap scoring between a descriptor track and a candidate file.

A cheap, explainable heuristic: DJ collections usually keep artist and
title words in file names even after re-encoding or reorganizing folders.
"""

from ..candidates.models import CandidateFile
from ..descriptor.models import Track
from .tokenize import tokenize

TITLE_BONUS = 0.15
TITLE_PREFIX_LENGTH = 14


def strip_extension(name: str) -> str:
    """Drop the final ``.ext`` from a file name (dotfiles keep their name)."""
    dot = name.rfind(".")
    return name[:dot] if dot > 0 else name


def candidate_tokens(candidate: CandidateFile) -> set[str]:
    """Tokens from the candidate's bare name and its whole relative path."""
    return set(tokenize(strip_extension(candidate.display_name))) | set(
        tokenize(candidate.relative_path)
    )


def title_bonus(track: Track, candidate: CandidateFile) -> float:
    """Bonus when the file name contains the start of the track title."""
    prefix = track.title[:TITLE_PREFIX_LENGTH].lower()
    if not prefix:
        return 0.0
    name = strip_extension(candidate.display_name).lower()
    return TITLE_BONUS if prefix in name else 0.0


def score(track: Track, candidate: CandidateFile) -> float:
    """Similarity between a track and a candidate file, in [0, 1].

    The fraction of the track's artist+title tokens present anywhere in the
    candidate's name or path, plus a bonus for a title-prefix hit in the
    file name, capped at 1 and rounded to 3 decimals.

    Args:
        track: Descriptor track
        candidate: Candidate file

    Returns:
        Score between 0.0 and 1.0 (0.0 when the track has no artist/title words)
    """
    track_tokens = tokenize(f"{track.artist} {track.title}")
    if not track_tokens:
        return 0.0

    available = candidate_tokens(candidate)
    overlap = sum(1 for token in track_tokens if token in available) / len(track_tokens)
    return round(min(overlap + title_bonus(track, candidate), 1.0), 3)
