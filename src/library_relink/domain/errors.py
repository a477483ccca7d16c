"""Relink-specific exceptions for error handling."""


class RelinkError(Exception):
    """Base exception for relink operations."""

    pass


class DescriptorParseError(RelinkError):
    """Raised when the library descriptor is not well-formed XML."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class LocationDecodeError(RelinkError):
    """Raised when a stored location cannot be percent-decoded."""

    pass


class ExportPreconditionError(RelinkError):
    """Raised when export is attempted without a descriptor or base path."""

    pass


class UnknownTrackError(RelinkError):
    """Raised when a mapping operation names a track that was never loaded."""

    def __init__(self, track_id: str):
        self.track_id = track_id
        super().__init__(f"Track {track_id!r} is not in the loaded descriptor")
