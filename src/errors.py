"""Error types for traffic pages."""

from enum import Enum


class TrafficError(Exception):
    """Base exception for pipeline errors."""


class FetchError(TrafficError):
    """Raised when the feed cannot be downloaded."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class DecodeErrorKind(str, Enum):
    """Classification of decode failures.

    - MALFORMED_DOCUMENT: feed is not well-formed or has no channel
    - INVALID_TIMESTAMP: an item's pubDate could not be parsed
    """

    MALFORMED_DOCUMENT = "MALFORMED_DOCUMENT"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"


class DecodeError(TrafficError):
    """Raised when the feed document cannot be decoded into entries."""

    def __init__(
        self,
        kind: DecodeErrorKind,
        message: str,
        item_index: int | None = None,
    ):
        """Initialize the decode error.

        Args:
            kind: Classification of the failure
            message: Human-readable error message
            item_index: Zero-based index of the failing item, if any
        """
        super().__init__(message)
        self.kind = kind
        self.item_index = item_index


class EmitError(TrafficError):
    """Raised when a single road page cannot be written."""

    def __init__(self, message: str, location: str):
        super().__init__(message)
        self.location = location


class OutputDirectoryError(TrafficError):
    """Raised when the output directory cannot be reset."""
