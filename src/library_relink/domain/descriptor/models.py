"""
Descriptor domain models.

Contains data structures for representing the tracks of a parsed library
descriptor and where each one sits in the source document.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..errors import DescriptorParseError

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"


@dataclass(frozen=True)
class Track:
    """One collection entry of the descriptor.

    Text fields hold the raw attribute values ("" when absent); the
    ``display_*`` properties substitute placeholders for the UI layer.
    """

    id: str
    ordinal_index: int  # Position within the collection, 0-based
    title: str = ""
    artist: str = ""
    album: str = ""
    stored_location: str = ""  # Decoded plain path
    raw_location: Optional[str] = None  # Location attribute as written
    bit_rate_kbps: Optional[int] = None
    duration_seconds: Optional[float] = None
    bpm: Optional[float] = None
    has_native_id: bool = True

    @property
    def display_title(self) -> str:
        return self.title or UNKNOWN_TITLE

    @property
    def display_artist(self) -> str:
        return self.artist or UNKNOWN_ARTIST

    @property
    def display_album(self) -> str:
        return self.album or UNKNOWN_ALBUM


@dataclass(frozen=True)
class TagSpan:
    """Byte range of a track's start tag in the UTF-8 source."""

    start: int
    end: int


@dataclass(frozen=True)
class Descriptor:
    """A parsed descriptor: immutable source bytes plus the extracted tracks.

    ``spans`` is parallel to ``tracks`` (same ordinal positions).
    """

    source: bytes
    tracks: tuple[Track, ...]
    spans: tuple[TagSpan, ...]
    base_path_suggestion: str = ""
    _by_id: dict[str, Track] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {t.id: t for t in self.tracks})

    def get_track(self, track_id: str) -> Optional[Track]:
        return self._by_id.get(track_id)

    @property
    def track_ids(self) -> list[str]:
        return [track.id for track in self.tracks]


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing a descriptor; exactly one of descriptor/error is set."""

    descriptor: Optional[Descriptor] = None
    error: Optional[DescriptorParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self.descriptor.tracks if self.descriptor else ()
