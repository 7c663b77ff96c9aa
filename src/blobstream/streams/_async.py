"""Asynchronous chunked streams.

Every operation that needs a chunk which is not resident awaits the load
before it returns, so no read ever observes a partially loaded cache.
"""

from __future__ import annotations

import dataclasses
import warnings
from collections.abc import AsyncIterator, Mapping
from typing import TYPE_CHECKING, Any

from blobstream.config import StreamConfig, StreamKind
from blobstream.errors import BlobStreamError, SourceReadError, TruncatedReadWarning
from blobstream.sources import as_source
from blobstream.streams._base import (
    StreamBase,
    check_count,
    check_range,
    writable_view,
)
from blobstream.streams._text import TEXT_ENCODING

if TYPE_CHECKING:
    from collections.abc import Buffer

    from blobstream.protocols import AsyncSource


class AsyncFileStream(StreamBase):
    """
    Async counterpart of [FileStream][blobstream.streams.FileStream].

    Create instances with [open][blobstream.streams.AsyncFileStream.open],
    which awaits the first chunk:

    ```python
    async with await AsyncFileStream.open(StoreSource(store, "big.bin")) as stream:
        header = await stream.read(16)
    ```

    Closing the stream while a chunk load is pending discards the loaded data;
    the awaiting operation raises
    [StreamClosedError][blobstream.errors.StreamClosedError].
    """

    KIND = StreamKind.BINARY

    @classmethod
    async def open(
        cls,
        source: AsyncSource | Buffer,
        config: StreamConfig | Mapping[str, Any] | None = None,
    ):
        """
        Open a stream over `source` and load its first chunk.

        Parameters
        ----------
        source
            Any [AsyncSource][blobstream.protocols.AsyncSource], or bytes-like data.
        config
            A [StreamConfig][blobstream.config.StreamConfig], a mapping of
            config fields, or None for defaults.
        """
        config = StreamConfig.coerce(config)
        if config.type is not cls.KIND:
            config = dataclasses.replace(config, type=cls.KIND)
        source = as_source(source, asynchronous=True)
        try:
            length = await source.length_async()
        except BlobStreamError:
            raise
        except Exception as e:
            raise SourceReadError("Error reading the length of the source") from e
        stream = cls(source, length, config)
        if stream.chunk_count > 0:
            await stream._cache.load_async(0)
        return stream

    async def seek(self, offset: int, whence: int = 0, /) -> int:
        """Move the stream position, awaiting the target chunk if needed."""
        self._check_open()
        chunk_index, position = self._resolve_target(offset, whence)
        if self._needs_load(chunk_index):
            await self._cache.load_async(chunk_index)
        self._cursor.move(chunk_index, position)
        return self.tell()

    async def read_byte(self) -> int | None:
        """Read a single byte, or return None at EOF."""
        self._check_open()
        if self.eof:
            return None
        if self._cursor.exhausted:
            await self._advance()
        position = self._cursor.position
        self._cursor.position = position + 1
        return self._cache.data[position]

    async def read_into(self, buffer: Buffer) -> int:
        """Fill `buffer` until it is full or EOF is reached."""
        self._check_open()
        view = writable_view(buffer)
        return await self._fill(view, len(view))

    async def read_into_range(self, buffer: Buffer, offset: int, length: int) -> int:
        """Read at most `length` bytes into ``buffer[offset:offset + length]``."""
        self._check_open()
        view = writable_view(buffer)
        check_range(view, offset, length)
        return await self._fill(view[offset : offset + length], length)

    async def read(self, size: int = -1, /) -> bytes:
        """Read up to `size` bytes; -1 reads to the end."""
        self._check_open()
        remaining = max(0, self.length - self.tell())
        if size is None or size < 0 or size > remaining:
            size = remaining
        buffer = bytearray(size)
        n = await self._fill(memoryview(buffer), size)
        return bytes(buffer[:n])

    async def readall(self) -> bytes:
        return await self.read(-1)

    async def skip(self, n: int) -> int:
        """Advance up to `n` bytes; returns the number skipped."""
        self._check_open()
        check_count("n", n)
        return await self._fill(None, n)

    async def _advance(self) -> None:
        next_index = self._cursor.chunk_index + 1
        await self._cache.load_async(next_index)
        self._cursor.move(next_index, 0)

    async def _fill(self, view: memoryview | None, want: int) -> int:
        total = 0
        while total < want and not self.eof:
            if self._cursor.exhausted:
                await self._advance()
            target = view[total:] if view is not None else None
            total += self._take(target, want - total)
        return total

    async def __aenter__(self) -> AsyncFileStream:
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager and close the stream."""
        self.close()


class AsyncTextFileStream(AsyncFileStream):
    """Async counterpart of [TextFileStream][blobstream.streams.TextFileStream]."""

    KIND = StreamKind.TEXT

    line_number = 0
    line_truncated = False

    async def read_line(self) -> str:
        """Read up to and excluding the next line feed, or to EOF."""
        self._check_open()
        parts = []
        truncated = True
        while not self.eof:
            if self._cursor.exhausted:
                await self._advance()
            segment, found = self._take_line()
            parts.append(segment)
            if found:
                truncated = False
                break
        self.line_number += 1
        self.line_truncated = truncated
        return b"".join(parts).decode(TEXT_ENCODING)

    async def read_lines(self, n: int) -> str:
        """Read up to `n` lines joined with ``"\\n"``, warning if EOF cuts it short."""
        self._check_open()
        check_count("n", n)
        lines = []
        for _ in range(n):
            line = await self.read_line()
            if self.line_truncated:
                if line:
                    lines.append(line)
                warnings.warn(
                    f"Reached end of stream before reading {n} complete lines",
                    TruncatedReadWarning,
                    stacklevel=2,
                )
                break
            lines.append(line)
        return "\n".join(lines)

    async def iter_lines(self) -> AsyncIterator[str]:
        while not self.eof:
            yield await self.read_line()

    def __aiter__(self) -> AsyncIterator[str]:
        return self.iter_lines()


__all__ = ["AsyncFileStream", "AsyncTextFileStream"]
