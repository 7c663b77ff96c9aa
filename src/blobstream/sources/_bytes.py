"""In-memory byte source."""

from __future__ import annotations

from typing import TYPE_CHECKING

from blobstream.errors import InvalidSourceError
from blobstream.protocols import AsyncSource, Source

if TYPE_CHECKING:
    from collections.abc import Buffer


class BytesSource:
    """
    A source backed by an in-memory buffer.

    The buffer is copied once into an immutable ``bytes`` object, so later
    changes to a ``bytearray`` passed in are not observed.

    Implements both [Source][blobstream.protocols.Source] and
    [AsyncSource][blobstream.protocols.AsyncSource].
    """

    def __init__(self, data: Buffer, name: str | None = None) -> None:
        self._data = bytes(data)
        self.name = name

    @property
    def length(self) -> int:
        return len(self._data)

    def slice(self, start: int, end: int) -> bytes:
        return self._data[start:end]

    async def length_async(self) -> int:
        return len(self._data)

    async def slice_async(self, start: int, end: int) -> bytes:
        return self._data[start:end]

    def __repr__(self) -> str:
        return f"BytesSource(length={len(self._data)}, name={self.name!r})"


def as_source(obj: object, *, asynchronous: bool = False) -> Source | AsyncSource:
    """
    Coerce `obj` into a source.

    Parameters
    ----------
    obj
        A [Source][blobstream.protocols.Source] (or
        [AsyncSource][blobstream.protocols.AsyncSource] when `asynchronous`),
        or a ``bytes``, ``bytearray`` or ``memoryview``, which is wrapped in a
        [BytesSource][blobstream.sources.BytesSource].
    asynchronous
        Require the async source protocol instead of the sync one.

    Raises
    ------
    InvalidSourceError
        If `obj` is neither a source nor bytes-like.
    """
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BytesSource(obj)
    protocol = AsyncSource if asynchronous else Source
    if isinstance(obj, protocol):
        return obj
    raise InvalidSourceError(
        f"Invalid parameter for source: {type(obj).__name__} does not implement "
        f"{protocol.__name__}"
    )


__all__ = ["BytesSource", "as_source"]
