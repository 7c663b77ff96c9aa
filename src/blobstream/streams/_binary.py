"""Synchronous chunked binary stream."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from blobstream.config import StreamConfig, StreamKind
from blobstream.errors import BlobStreamError, SourceReadError
from blobstream.sources import as_source
from blobstream.streams._base import (
    StreamBase,
    check_count,
    check_range,
    writable_view,
)

if TYPE_CHECKING:
    from collections.abc import Buffer

    from blobstream.protocols import Source


class FileStream(StreamBase):
    """
    A random-access binary reader that keeps one chunk of its source in memory.

    The source is divided into fixed-size chunks. Only the chunk under the
    cursor is resident; reading past its end loads the next one, and seeking
    to another chunk replaces it. Reads never fetch more than one chunk per
    request, so memory use is bounded by ``chunk_size`` regardless of the
    source size.

    When to Use
    -----------
    Use FileStream when:

    - **Byte-level parsing**: Walking a large binary format one byte or one
      small record at a time.
    - **Bounded memory**: Only ``chunk_size`` bytes are ever held.
    - **Forward reading with occasional jumps**: Sequential reads cross chunk
      boundaries transparently; seeks reload at most one chunk.

    See Also
    --------

    - [TextFileStream][blobstream.streams.TextFileStream] : Adds line reading.
    - [AsyncFileStream][blobstream.streams.AsyncFileStream] : Same operations
      over an async source.
    """

    KIND = StreamKind.BINARY

    def __init__(
        self,
        source: Source | Buffer,
        config: StreamConfig | Mapping[str, Any] | None = None,
    ) -> None:
        """
        Open a stream over `source` and load its first chunk.

        Parameters
        ----------
        source
            Any [Source][blobstream.protocols.Source], or bytes-like data.
        config
            A [StreamConfig][blobstream.config.StreamConfig], a mapping of
            config fields, or None for defaults.

        Raises
        ------
        InvalidConfigurationError
            If `config` is invalid.
        InvalidSourceError
            If `source` is not a source.
        SourceReadError
            If the source length or first chunk cannot be read.
        """
        config = StreamConfig.coerce(config)
        if config.type is not self.KIND:
            config = dataclasses.replace(config, type=self.KIND)
        source = as_source(source)
        try:
            length = source.length
        except BlobStreamError:
            raise
        except Exception as e:
            raise SourceReadError("Error reading the length of the source") from e
        super().__init__(source, length, config)
        if self._table.chunk_count > 0:
            self._cache.load(0)

    def seek(self, offset: int, whence: int = 0, /) -> int:
        """
        Move the stream position, loading the target chunk if needed.

        Parameters
        ----------
        offset
            Position offset.
        whence
            Reference point: 0=start (SEEK_SET), 1=current (SEEK_CUR), 2=end (SEEK_END).

        Returns
        -------
        int
            The new absolute position.

        Raises
        ------
        InvalidOffsetError
            If the resulting position is outside ``[0, length]``.
        SourceReadError
            If loading the target chunk fails. The position is unchanged.
        """
        self._check_open()
        chunk_index, position = self._resolve_target(offset, whence)
        if self._needs_load(chunk_index):
            self._cache.load(chunk_index)
        self._cursor.move(chunk_index, position)
        return self.tell()

    def read_byte(self) -> int | None:
        """
        Read a single byte.

        Returns
        -------
        int | None
            The byte value, or None at EOF.
        """
        self._check_open()
        if self.eof:
            return None
        if self._cursor.exhausted:
            self._advance()
        position = self._cursor.position
        self._cursor.position = position + 1
        return self._cache.data[position]

    def read_into(self, buffer: Buffer) -> int:
        """
        Fill `buffer` from the stream until it is full or EOF is reached.

        Returns
        -------
        int
            Number of bytes written to `buffer`.
        """
        self._check_open()
        view = writable_view(buffer)
        return self._fill(view, len(view))

    def read_into_range(self, buffer: Buffer, offset: int, length: int) -> int:
        """
        Read at most `length` bytes into ``buffer[offset:offset + length]``.

        Bytes of `buffer` outside that range are never touched.

        Returns
        -------
        int
            Number of bytes written; less than `length` only at EOF.

        Raises
        ------
        InvalidArgumentError
            If `offset` or `length` is negative, the range exceeds the buffer,
            or the buffer is not writable.
        """
        self._check_open()
        view = writable_view(buffer)
        check_range(view, offset, length)
        return self._fill(view[offset : offset + length], length)

    def readinto(self, buffer: Buffer, /) -> int:
        """File-like alias of [read_into][blobstream.streams.FileStream.read_into]."""
        return self.read_into(buffer)

    def read(self, size: int = -1, /) -> bytes:
        """
        Read up to `size` bytes from the stream.

        Parameters
        ----------
        size
            Number of bytes to read. If -1, read from current position to end.

        Returns
        -------
        bytes
            The data read from the stream.
        """
        self._check_open()
        remaining = max(0, self.length - self.tell())
        if size is None or size < 0 or size > remaining:
            size = remaining
        buffer = bytearray(size)
        n = self._fill(memoryview(buffer), size)
        return bytes(buffer[:n])

    def readall(self) -> bytes:
        """Read from the current position to the end of the stream."""
        return self.read(-1)

    def skip(self, n: int) -> int:
        """
        Advance up to `n` bytes without copying them.

        Returns
        -------
        int
            Number of bytes skipped; less than `n` only at EOF.
        """
        self._check_open()
        check_count("n", n)
        return self._fill(None, n)

    def _advance(self) -> None:
        next_index = self._cursor.chunk_index + 1
        self._cache.load(next_index)
        self._cursor.move(next_index, 0)

    def _fill(self, view: memoryview | None, want: int) -> int:
        total = 0
        while total < want and not self.eof:
            if self._cursor.exhausted:
                self._advance()
            target = view[total:] if view is not None else None
            total += self._take(target, want - total)
        return total

    def __enter__(self) -> FileStream:
        """Enter the context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the context manager and close the stream."""
        self.close()


__all__ = ["FileStream"]
