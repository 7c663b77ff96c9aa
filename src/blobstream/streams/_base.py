"""State and I/O-free helpers shared by the sync and async streams."""

from __future__ import annotations

import io
import warnings
from typing import TYPE_CHECKING

from blobstream.chunks import ChunkCache, ChunkTable, Cursor
from blobstream.config import DEFAULT_FILE_NAME
from blobstream.errors import (
    InvalidArgumentError,
    InvalidOffsetError,
    StreamClosedError,
    UndrainedStreamWarning,
)

if TYPE_CHECKING:
    from blobstream.config import StreamConfig, StreamKind
    from blobstream.protocols import AsyncSource, Source

LINE_FEED = 0x0A


class StreamBase:
    """
    Chunk table, cache and cursor of one stream instance.

    Subclasses add the operations that may need to load a chunk; everything
    here works on the chunk that is already resident.
    """

    def __init__(
        self, source: Source | AsyncSource, length: int, config: StreamConfig
    ) -> None:
        self._config = config
        self._source: Source | AsyncSource | None = source
        self._table = ChunkTable(length, config.chunk_size)
        self._cache = ChunkCache(source, self._table)
        self._cursor = Cursor(self._table)
        self._file_name = _display_name(source, config.default_file_name)

    @property
    def config(self) -> StreamConfig:
        return self._config

    @property
    def kind(self) -> StreamKind:
        return self._config.type

    @property
    def length(self) -> int:
        """Total number of bytes in the source."""
        return self._table.length

    @property
    def chunk_size(self) -> int:
        return self._table.chunk_size

    @property
    def chunk_count(self) -> int:
        return self._table.chunk_count

    @property
    def chunk_index(self) -> int:
        """Index of the chunk the cursor is in."""
        return self._cursor.chunk_index

    @property
    def closed(self) -> bool:
        return self._cache.closed

    @property
    def eof(self) -> bool:
        """Whether the read position has reached the end of the source."""
        return self._cursor.at_eof

    @property
    def file_name(self) -> str:
        """
        Display name of the stream.

        An explicitly configured ``default_file_name`` wins; otherwise the
        source's own name is used when it has one.
        """
        return self._file_name

    def readable(self) -> bool:
        return self._config.readable

    def writable(self) -> bool:
        return False

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        """
        Return the current stream position.

        Returns
        -------
        int
            Current position in bytes from start of the source.
        """
        return self._cursor.tell()

    def seek_local(self, offset: int) -> int:
        """
        Move within the currently cached chunk without loading anything.

        Parameters
        ----------
        offset
            Position within the chunk, from 0 to ``chunk_size`` inclusive.

        Returns
        -------
        int
            The new absolute position.

        Raises
        ------
        InvalidOffsetError
            If `offset` is outside ``[0, chunk_size]``.
        """
        self._check_open()
        self._cursor.check_local(offset)
        self._cursor.position = offset
        return self._cursor.tell()

    def close(self) -> None:
        """Close the stream, releasing the source and the cached chunk."""
        if self.closed:
            return
        if self._config.read_all and not self.eof:
            warnings.warn(
                f"Stream {self.file_name!r} was closed at offset {self.tell()} "
                f"of {self.length} although read_all is set",
                UndrainedStreamWarning,
                stacklevel=2,
            )
        self._cache.close()
        source, self._source = self._source, None
        close_source = getattr(source, "close", None)
        if callable(close_source):
            close_source()

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"position={self.tell()}"
        return (
            f"{type(self).__name__}(name={self.file_name!r}, length={self.length}, "
            f"chunk_size={self.chunk_size}, {state})"
        )

    # Helpers below never load a chunk. Callers make sure the cursor is not
    # exhausted before using them.

    def _check_open(self) -> None:
        if self.closed:
            raise StreamClosedError("I/O operation on closed stream")

    def _resolve_target(self, offset: int, whence: int) -> tuple[int, int]:
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise InvalidOffsetError(f"Offset must be an integer, got {offset!r}")
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self.tell() + offset
        elif whence == io.SEEK_END:
            target = self.length + offset
        else:
            raise InvalidOffsetError(f"Invalid whence value: {whence}")
        return self._cursor.locate(target)

    def _needs_load(self, chunk_index: int) -> bool:
        # An empty source has no chunks to load.
        return self._table.chunk_count > 0 and chunk_index != self._cache.index

    def _take(self, view: memoryview | None, want: int) -> int:
        """
        Consume up to `want` bytes of the resident chunk.

        Copies them into `view` when given, otherwise only advances.
        """
        data = self._cache.data
        position = self._cursor.position
        n = max(0, min(want, len(data) - position))
        if view is not None:
            view[:n] = data[position : position + n]
        self._cursor.position = position + n
        return n

    def _take_line(self) -> tuple[bytes, bool]:
        """
        Consume the resident chunk up to and including the next line feed.

        Returns the bytes before the line feed and whether one was found.
        """
        data = self._cache.data
        position = self._cursor.position
        found = data.find(LINE_FEED, position)
        if found == -1:
            segment = data[position:]
            self._cursor.position = max(position, len(data))
            return segment, False
        self._cursor.position = found + 1
        return data[position:found], True


def _display_name(source: object, configured: str) -> str:
    if configured != DEFAULT_FILE_NAME:
        return configured
    return getattr(source, "name", None) or configured


def writable_view(buffer: object) -> memoryview:
    """Return a writable byte view of `buffer` or raise InvalidArgumentError."""
    try:
        view = memoryview(buffer)
    except TypeError as e:
        raise InvalidArgumentError(
            f"Expected a writable bytes-like buffer, got {type(buffer).__name__}"
        ) from e
    if view.readonly:
        raise InvalidArgumentError("Buffer is read-only")
    if view.format != "B" or view.ndim != 1:
        try:
            view = view.cast("B")
        except TypeError as e:
            raise InvalidArgumentError("Buffer must be C-contiguous") from e
    return view


def check_range(view: memoryview, offset: int, length: int) -> None:
    for name, value in (("offset", offset), ("length", length)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
        if value < 0:
            raise InvalidArgumentError(f"{name} must be non-negative, got {value}")
    if offset + length > len(view):
        raise InvalidArgumentError(
            f"Range [{offset}, {offset + length}) exceeds buffer of {len(view)} bytes"
        )


def check_count(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(
            f"{name} must be a non-negative integer, got {value!r}"
        )


__all__ = ["StreamBase"]
