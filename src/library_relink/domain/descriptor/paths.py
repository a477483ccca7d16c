"""
Conversion between stored ``file://`` locations and plain paths.

Rekordbox writes locations in two forms: ``file://localhost/Users/dj/a.mp3``
and the bare ``file:///Users/dj/a.mp3`` / ``file://C:/Music/a.mp3``. Both
decode into the same plain-path space.
"""

import re
from urllib.parse import quote, unquote

from loguru import logger

from ..errors import LocationDecodeError

HOST_PREFIX = "file://localhost"
BARE_PREFIX = "file://"

# Characters encodeURI leaves alone on top of quote()'s unreserved set
URI_SAFE_CHARS = ";,/?:@&=+$!*'()#"

_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def strip_uri_prefix(location: str) -> str:
    """Remove a recognized local-file URI prefix, if any."""
    if location.startswith(HOST_PREFIX):
        return location[len(HOST_PREFIX):]
    if location.startswith(BARE_PREFIX):
        return location[len(BARE_PREFIX):]
    return location


def percent_decode(value: str) -> str:
    """Strictly percent-decode a URI component.

    Raises:
        LocationDecodeError: On a malformed escape or invalid UTF-8 sequence
    """
    if _BAD_ESCAPE.search(value):
        raise LocationDecodeError(f"Malformed percent escape in {value!r}")
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as e:
        raise LocationDecodeError(f"Invalid UTF-8 in {value!r}: {e}") from e


def decode_location(raw_location: str) -> str:
    """Convert a stored location into a plain filesystem path.

    Falls back to the prefix-stripped but undecoded string when the
    percent-decoding fails, so one bad entry never aborts a whole parse.

    Examples:
        >>> decode_location("file://localhost/Users/dj/My%20Track.mp3")
        '/Users/dj/My Track.mp3'
        >>> decode_location("file://C:/Music/100%.mp3")
        'C:/Music/100%.mp3'
    """
    stripped = strip_uri_prefix(raw_location or "")
    try:
        return percent_decode(stripped)
    except LocationDecodeError as e:
        logger.debug(f"Keeping undecoded location: {e}")
        return stripped


def join_location(base_path: str, relative_path: str) -> str:
    """Join a base path and a candidate relative path into a plain path."""
    base = strip_uri_prefix(base_path or "").replace("\\", "/").rstrip("/")
    relative = (relative_path or "").replace("\\", "/").lstrip("/")

    joined = f"{base}/{relative}" if base else relative
    if not _DRIVE_LETTER.match(joined) and not joined.startswith("/"):
        joined = "/" + joined
    return joined


def encode_location(base_path: str, relative_path: str) -> str:
    """Build the stored location for a file under ``base_path``.

    Absolute POSIX-style paths get the host-qualified prefix, drive-letter
    paths get the bare prefix. Undecodable file name bytes (surrogate
    escapes from a directory listing) are percent-encoded as the raw bytes.

    Examples:
        >>> encode_location("file://localhost/Users/dj/new", "a b.flac")
        'file://localhost/Users/dj/new/a%20b.flac'
        >>> encode_location("C:/Music/", "/Set/x.mp3")
        'file://C:/Music/Set/x.mp3'
    """
    joined = join_location(base_path, relative_path)
    prefix = HOST_PREFIX if joined.startswith("/") else BARE_PREFIX
    return quote(prefix + joined, safe=URI_SAFE_CHARS, errors="surrogateescape")


def suggest_base_path(decoded_location: str) -> str:
    """Directory part of a decoded location, or the whole path if it has none."""
    cut = max(decoded_location.rfind("/"), decoded_location.rfind("\\"))
    if cut > 0:
        return decoded_location[:cut]
    return decoded_location
