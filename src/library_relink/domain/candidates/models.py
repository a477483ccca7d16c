"""
Candidate file models.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


def normalize_relative_path(path: str) -> str:
    """Slash-separated, no leading slash."""
    return path.replace("\\", "/").lstrip("/")


@dataclass(frozen=True)
class CandidateFile:
    """A file from the new audio folder that a track may be remapped to.

    ``handle`` is whatever the producer uses to read the file later (a
    Path for directory scans); matching never touches it.
    """

    display_name: str
    relative_path: str
    handle: Optional[Any] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_relative_path(cls, relative_path: str, handle: Any = None) -> "CandidateFile":
        normalized = normalize_relative_path(relative_path)
        return cls(
            display_name=normalized.rsplit("/", 1)[-1],
            relative_path=normalized,
            handle=handle,
        )

    @property
    def extension(self) -> str:
        """Lowercase extension without the dot ("" if none)."""
        dot = self.display_name.rfind(".")
        return self.display_name[dot + 1:].lower() if dot > 0 else ""
