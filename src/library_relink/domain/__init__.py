"""Domain layer: descriptor parsing, candidate matching and mapping state."""

from .errors import (
    DescriptorParseError,
    ExportPreconditionError,
    LocationDecodeError,
    RelinkError,
    UnknownTrackError,
)
from .session import DEFAULT_EXPORT_FILENAME, RelinkSession

__all__ = [
    "DescriptorParseError",
    "ExportPreconditionError",
    "LocationDecodeError",
    "RelinkError",
    "UnknownTrackError",
    "DEFAULT_EXPORT_FILENAME",
    "RelinkSession",
]
