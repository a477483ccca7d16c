"""
Library descriptor parsing and export.

Parses a Rekordbox-style XML collection into Track records and writes the
document back out with only the Location attribute of mapped tracks
rewritten. Every other byte of the source is carried over untouched.
"""

import re
from typing import Any, Mapping, Optional
from xml.parsers import expat
from xml.sax.saxutils import escape

from loguru import logger

from ..errors import DescriptorParseError, ExportPreconditionError
from ..mapping.models import TrackMapping
from .models import Descriptor, ParseResult, TagSpan, Track
from .paths import decode_location, encode_location, suggest_base_path

COLLECTION_TAG = "COLLECTION"
TRACK_TAG = "TRACK"

# Rekordbox attribute names
ATTR_ID = "TrackID"
ATTR_TITLE = "Name"
ATTR_ARTIST = "Artist"
ATTR_ALBUM = "Album"
ATTR_LOCATION = "Location"
ATTR_BIT_RATE = "BitRate"
ATTR_DURATION = "TotalTime"
ATTR_BPM = "AverageBpm"

# A complete start tag; expat has already validated the document
_START_TAG = re.compile(
    rb"<[^\s/>]+(?:\s+[^\s=/>]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*\s*/?>"
)
_ATTRIBUTE = re.compile(rb"([^\s=/>]+)(\s*=\s*)(?:\"([^\"]*)\"|'([^']*)')")
_TAG_CLOSE = re.compile(rb"\s*/?>$")


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None


class _CollectionReader:
    """expat handler collecting collection TRACK attributes and tag offsets."""

    def __init__(self, parser: Any):
        self.parser = parser
        self.stack: list[str] = []
        self.entries: list[tuple[dict[str, str], int]] = []

    def start(self, name: str, attrs: dict[str, str]) -> None:
        if name == TRACK_TAG and self.stack and self.stack[-1] == COLLECTION_TAG:
            self.entries.append((attrs, self.parser.CurrentByteIndex))
        self.stack.append(name)

    def end(self, name: str) -> None:
        self.stack.pop()


def _read_collection(text: str) -> list[tuple[dict[str, str], int]]:
    parser = expat.ParserCreate()
    reader = _CollectionReader(parser)
    parser.StartElementHandler = reader.start
    parser.EndElementHandler = reader.end
    # str input is fed as UTF-8, so byte offsets index text.encode("utf-8")
    parser.Parse(text, True)
    return reader.entries


def _build_track(attrs: dict[str, str], ordinal: int, seen_ids: set[str]) -> Track:
    native_id = (attrs.get(ATTR_ID) or "").strip()
    track_id = native_id
    if not track_id or track_id in seen_ids:
        if track_id:
            logger.warning(
                f"Duplicate {ATTR_ID} {track_id!r} at position {ordinal}, using positional id"
            )
        track_id = f"pos-{ordinal}"
        while track_id in seen_ids:
            track_id = f"{track_id}-dup"
    seen_ids.add(track_id)

    raw_location = attrs.get(ATTR_LOCATION)
    return Track(
        id=track_id,
        ordinal_index=ordinal,
        title=attrs.get(ATTR_TITLE, ""),
        artist=attrs.get(ATTR_ARTIST, ""),
        album=attrs.get(ATTR_ALBUM, ""),
        stored_location=decode_location(raw_location) if raw_location else "",
        raw_location=raw_location,
        bit_rate_kbps=_to_int(attrs.get(ATTR_BIT_RATE)),
        duration_seconds=_to_float(attrs.get(ATTR_DURATION)),
        bpm=_to_float(attrs.get(ATTR_BPM)),
        has_native_id=track_id == native_id,
    )


def parse_descriptor(text: str) -> ParseResult:
    """Parse descriptor XML into tracks.

    Never raises for malformed input: the failure is returned as
    ``ParseResult.error`` so callers can keep their previous state.

    Args:
        text: Full descriptor document

    Returns:
        ParseResult with either a Descriptor or a DescriptorParseError
    """
    try:
        entries = _read_collection(text)
    except expat.ExpatError as e:
        error = DescriptorParseError(
            f"Descriptor is not well-formed XML: {expat.ErrorString(e.code)}",
            line=e.lineno,
            column=e.offset,
        )
        logger.warning(str(error))
        return ParseResult(error=error)

    source = text.encode("utf-8")
    tracks: list[Track] = []
    spans: list[TagSpan] = []
    seen_ids: set[str] = set()

    for ordinal, (attrs, offset) in enumerate(entries):
        tag = _START_TAG.match(source, offset)
        if tag is None:
            # expat accepted the tag, so this means the offsets are out of step
            error = DescriptorParseError(f"Could not locate track entry {ordinal} in source")
            logger.warning(str(error))
            return ParseResult(error=error)
        tracks.append(_build_track(attrs, ordinal, seen_ids))
        spans.append(TagSpan(start=tag.start(), end=tag.end()))

    suggestion = suggest_base_path(tracks[0].stored_location) if tracks else ""
    descriptor = Descriptor(
        source=source,
        tracks=tuple(tracks),
        spans=tuple(spans),
        base_path_suggestion=suggestion,
    )
    logger.info(f"Parsed descriptor: {len(tracks)} tracks")
    return ParseResult(descriptor=descriptor)


def rewrite_location(start_tag: bytes, location: str) -> bytes:
    """Return ``start_tag`` with its Location attribute set to ``location``.

    The attribute keeps its position and quote character; a tag without
    one gets it appended after the last attribute.
    """
    for attr in _ATTRIBUTE.finditer(start_tag):
        if attr.group(1).decode("utf-8") != ATTR_LOCATION:
            continue
        quote = '"' if attr.group(3) is not None else "'"
        value_group = 3 if quote == '"' else 4
        escaped = escape(location, {quote: "&quot;" if quote == '"' else "&apos;"})
        return (
            start_tag[: attr.start(value_group)]
            + escaped.encode("utf-8")
            + start_tag[attr.end(value_group):]
        )

    close = _TAG_CLOSE.search(start_tag)
    escaped = escape(location, {'"': "&quot;"})
    addition = f' {ATTR_LOCATION}="{escaped}"'.encode("utf-8")
    return start_tag[: close.start()] + addition + start_tag[close.start():]


def export_descriptor(
    descriptor: Optional[Descriptor],
    mappings: Mapping[str, TrackMapping],
    base_path: str,
) -> str:
    """Serialize the descriptor with mapped tracks pointing at their new files.

    The retained Descriptor is never modified, so repeated exports with
    different mapping sets from one load are independent.

    Args:
        descriptor: Parsed descriptor (None if nothing was loaded)
        mappings: Track id -> mapping
        base_path: Root the rewritten locations resolve under

    Returns:
        The serialized document

    Raises:
        ExportPreconditionError: If no descriptor is loaded or base_path is blank
    """
    if descriptor is None:
        raise ExportPreconditionError("No descriptor has been loaded")
    if not base_path or not base_path.strip():
        raise ExportPreconditionError("A base path is required to export")

    source = descriptor.source
    pieces: list[bytes] = []
    cursor = 0
    rewritten = 0

    for track, span in zip(descriptor.tracks, descriptor.spans):
        mapping = mappings.get(track.id)
        if mapping is None:
            continue
        location = encode_location(base_path, mapping.relative_path)
        pieces.append(source[cursor:span.start])
        pieces.append(rewrite_location(source[span.start:span.end], location))
        cursor = span.end
        rewritten += 1

    pieces.append(source[cursor:])
    logger.info(f"Exported descriptor: {rewritten}/{len(descriptor.tracks)} locations rewritten")
    return b"".join(pieces).decode("utf-8")
