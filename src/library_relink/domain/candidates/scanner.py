"""
Candidate discovery from a folder of audio files.

Walks a directory and turns every supported audio file into a
CandidateFile relative to that directory.
"""

from pathlib import Path
from typing import Iterator

from loguru import logger

from .models import CandidateFile

DEFAULT_FORMATS = [".mp3", ".m4a", ".aac", ".aif", ".aiff", ".wav", ".flac", ".ogg", ".opus"]


def is_supported_format(local_path: Path, supported_formats: list[str]) -> bool:
    """Check if file format is supported."""
    return local_path.suffix.lower() in supported_formats


def iter_candidate_files(
    root: Path, supported_formats: list[str] = DEFAULT_FORMATS, recursive: bool = True
) -> Iterator[CandidateFile]:
    """Yield candidate files under ``root``.

    Unreadable directories are logged and skipped rather than aborting the
    scan; whatever was found is treated as the full candidate set.

    Args:
        root: Folder holding the new audio files
        supported_formats: Lowercase extensions including the dot
        recursive: Descend into subdirectories

    Yields:
        CandidateFile with a slash-separated path relative to root and the
        absolute Path as its handle
    """
    formats = [fmt.lower() for fmt in supported_formats]
    pending = [root]

    while pending:
        directory = pending.pop()
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.warning(f"Skipping unreadable directory {directory}: {e}")
            continue

        for entry in entries:
            if entry.is_dir():
                if recursive:
                    pending.append(entry)
            elif entry.is_file() and is_supported_format(entry, formats):
                yield CandidateFile.from_relative_path(
                    entry.relative_to(root).as_posix(), handle=entry
                )


def scan_candidates(
    root: Path, supported_formats: list[str] = DEFAULT_FORMATS, recursive: bool = True
) -> list[CandidateFile]:
    """Scan a folder for candidate files.

    Raises:
        FileNotFoundError: If root does not exist or is not a directory
    """
    root = root.expanduser()
    if not root.is_dir():
        raise FileNotFoundError(f"Candidate folder not found: {root}")

    candidates = list(iter_candidate_files(root, supported_formats, recursive))
    logger.info(f"Scanned {root}: {len(candidates)} candidate files")
    return candidates
