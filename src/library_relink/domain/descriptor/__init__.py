"""Descriptor domain - the DJ collection XML and its stored locations.

This domain handles:
- Track data models
- Location URI encoding/decoding
- Parsing and location-only export
"""

from .models import Descriptor, ParseResult, TagSpan, Track
from .parser import export_descriptor, parse_descriptor
from .paths import decode_location, encode_location, suggest_base_path

__all__ = [
    "Descriptor",
    "ParseResult",
    "TagSpan",
    "Track",
    "export_descriptor",
    "parse_descriptor",
    "decode_location",
    "encode_location",
    "suggest_base_path",
]
