"""Exceptions and warnings raised by blobstream.

Every exception derives from [BlobStreamError][blobstream.errors.BlobStreamError]
and from the closest builtin, so callers can catch either.
"""

from __future__ import annotations


class BlobStreamError(Exception):
    """Base class for all blobstream errors."""


class InvalidConfigurationError(BlobStreamError, ValueError):
    """The stream configuration has the wrong shape or an invalid value."""


class InvalidSourceError(BlobStreamError, TypeError):
    """The object passed as a source does not implement the source protocol."""


class InvalidOffsetError(BlobStreamError, ValueError):
    """A seek target lies outside the valid range."""


class ChunkOutOfRangeError(BlobStreamError, IndexError):
    """A chunk index lies outside the chunk table."""

    def __init__(self, index: int, chunk_count: int) -> None:
        super().__init__(
            f"Chunk index {index} is out of range for a table of {chunk_count} chunks"
        )
        self.index = index
        self.chunk_count = chunk_count


class SourceReadError(BlobStreamError, OSError):
    """The underlying source failed to deliver a chunk."""


class InvalidArgumentError(BlobStreamError, ValueError):
    """A read was called with a malformed buffer, offset or length."""


class StreamClosedError(BlobStreamError, ValueError):
    """An operation was attempted on a closed stream."""


class UnknownConfigurationKeyWarning(UserWarning):
    """A configuration mapping contained a key that has no effect."""


class TruncatedReadWarning(UserWarning):
    """A multi-line read reached the end of the stream early."""


class UndrainedStreamWarning(UserWarning):
    """A stream configured with ``read_all`` was closed before reaching EOF."""


__all__ = [
    "BlobStreamError",
    "ChunkOutOfRangeError",
    "InvalidArgumentError",
    "InvalidConfigurationError",
    "InvalidOffsetError",
    "InvalidSourceError",
    "SourceReadError",
    "StreamClosedError",
    "TruncatedReadWarning",
    "UndrainedStreamWarning",
    "UnknownConfigurationKeyWarning",
]
