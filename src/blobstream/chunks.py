"""Chunk table, single-slot chunk cache and read cursor."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from blobstream.errors import (
    BlobStreamError,
    ChunkOutOfRangeError,
    InvalidOffsetError,
    SourceReadError,
    StreamClosedError,
)

if TYPE_CHECKING:
    from blobstream.protocols import AsyncSource, Source


@dataclass(frozen=True)
class ChunkTable:
    """
    Division of a source into fixed-size chunks.

    Chunk ``i`` covers ``[i * chunk_size, min((i + 1) * chunk_size, length))``.
    Only the last chunk may be shorter than `chunk_size`; the ranges partition
    ``[0, length)`` exactly.
    """

    length: int
    chunk_size: int

    @property
    def chunk_count(self) -> int:
        return -(-self.length // self.chunk_size)

    def index_of(self, offset: int) -> int:
        """Index of the chunk containing byte `offset`."""
        return offset // self.chunk_size

    def range(self, index: int) -> tuple[int, int]:
        """
        Half-open byte range of chunk `index`.

        Raises
        ------
        ChunkOutOfRangeError
            If `index` is not in ``[0, chunk_count)``.
        """
        if not 0 <= index < self.chunk_count:
            raise ChunkOutOfRangeError(index, self.chunk_count)
        start = index * self.chunk_size
        return start, min(start + self.chunk_size, self.length)

    def ranges(self) -> list[tuple[int, int]]:
        return [self.range(i) for i in range(self.chunk_count)]


class ChunkCache:
    """
    Holds exactly one materialized chunk of a source.

    The slot is replaced wholesale: a load either makes the new chunk fully
    resident or leaves the previous one in place.
    """

    def __init__(self, source: Source | AsyncSource, table: ChunkTable) -> None:
        self._source = source
        self._table = table
        self.index: int | None = None
        self.data = b""
        self.closed = False
        # One load in flight at a time for async streams
        self._lock = asyncio.Lock()

    def load(self, index: int) -> None:
        """
        Fetch chunk `index` from the source and make it resident.

        Raises
        ------
        ChunkOutOfRangeError
            If `index` is outside the chunk table.
        SourceReadError
            If the source fails or returns the wrong number of bytes.
        StreamClosedError
            If the cache has been closed.
        """
        self._check_open()
        start, end = self._table.range(index)
        try:
            data = self._source.slice(start, end)
        except BlobStreamError:
            raise
        except Exception as e:
            raise SourceReadError(f"Error reading chunk {index} from source") from e
        self._commit(index, start, end, data)

    async def load_async(self, index: int) -> None:
        """
        Async variant of [load][blobstream.chunks.ChunkCache.load].

        If the cache is closed while the slice is pending, the result is
        discarded and StreamClosedError is raised.
        """
        self._check_open()
        start, end = self._table.range(index)
        async with self._lock:
            self._check_open()
            try:
                data = await self._source.slice_async(start, end)
            except BlobStreamError:
                raise
            except Exception as e:
                raise SourceReadError(
                    f"Error reading chunk {index} from source"
                ) from e
            self._commit(index, start, end, data)

    def _commit(self, index: int, start: int, end: int, data: bytes) -> None:
        if self.closed:
            raise StreamClosedError(
                f"Stream was closed while chunk {index} was loading"
            )
        if len(data) != end - start:
            raise SourceReadError(
                f"Short read for chunk {index}: expected {end - start} bytes, "
                f"got {len(data)}"
            )
        self.index = index
        self.data = bytes(data)

    def _check_open(self) -> None:
        if self.closed:
            raise StreamClosedError("I/O operation on closed stream")

    def close(self) -> None:
        """Release the cached bytes. Pending async loads are discarded."""
        self.closed = True
        self.index = None
        self.data = b""


class Cursor:
    """
    Read position as a chunk index and a position within that chunk.

    ``position == chunk_size`` is a valid resting state meaning the current
    chunk is exhausted and the next read must load the following chunk.
    """

    def __init__(self, table: ChunkTable) -> None:
        self._table = table
        self.chunk_index = 0
        self.position = 0

    def tell(self) -> int:
        return self.chunk_index * self._table.chunk_size + self.position

    @property
    def at_eof(self) -> bool:
        return self.tell() >= self._table.length

    @property
    def exhausted(self) -> bool:
        """Whether the current chunk has been read to its end."""
        return self.position >= self._table.chunk_size

    def locate(self, offset: int) -> tuple[int, int]:
        """
        Chunk index and local position for an absolute `offset`.

        Seeking to the very end of a source whose length is a multiple of the
        chunk size lands on the end of the last chunk rather than on a chunk
        past the table.

        Raises
        ------
        InvalidOffsetError
            If `offset` is not in ``[0, length]``.
        """
        length = self._table.length
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise InvalidOffsetError(f"Offset must be an integer, got {offset!r}")
        if not 0 <= offset <= length:
            raise InvalidOffsetError(
                f"Attempted to seek to an invalid offset: {offset} "
                f"(valid range is 0 to {length})"
            )
        chunk_size = self._table.chunk_size
        if offset == length and length > 0 and length % chunk_size == 0:
            return self._table.chunk_count - 1, chunk_size
        return divmod(offset, chunk_size)

    def check_local(self, offset: int) -> None:
        """Validate a position within the current chunk."""
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise InvalidOffsetError(f"Offset must be an integer, got {offset!r}")
        if not 0 <= offset <= self._table.chunk_size:
            raise InvalidOffsetError(
                f"Attempted to seek to an invalid local offset: {offset} "
                f"(valid range is 0 to {self._table.chunk_size})"
            )

    def move(self, chunk_index: int, position: int) -> None:
        self.chunk_index = chunk_index
        self.position = position


__all__ = ["ChunkCache", "ChunkTable", "Cursor"]
