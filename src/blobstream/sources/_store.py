"""Byte source backed by a file in an object store."""

from __future__ import annotations

import posixpath
from typing import Any, Protocol
from urllib.parse import urlparse

from obspec import GetRange, GetRangeAsync, Head, HeadAsync
from obstore.store import from_url


class StoreSource:
    """
    A source that fetches byte ranges from a file in an object store.

    Each chunk the stream loads becomes one [`get_range()`][obspec.GetRange]
    request (or [`get_range_async()`][obspec.GetRangeAsync] for async streams).
    The file size comes from `size` if given, otherwise from a lazy
    [`head()`][obspec.Head] request.

    Examples
    --------

    ```python
    from obstore.store import MemoryStore
    from blobstream import open_stream
    from blobstream.sources import StoreSource

    store = MemoryStore()
    store.put("data.txt", b"abc\\ndef\\n")
    with open_stream(StoreSource(store, "data.txt"), {"type": "text"}) as stream:
        assert stream.read_line() == "abc"
    ```
    """

    class Store(GetRange, Head, Protocol):
        """
        Store protocol required for synchronous reads.

        Combines [GetRange][obspec.GetRange] and [Head][obspec.Head] from obspec.
        """

        pass

    class AsyncStore(GetRangeAsync, HeadAsync, Protocol):
        """
        Store protocol required for asynchronous reads.

        Combines [GetRangeAsync][obspec.GetRangeAsync] and
        [HeadAsync][obspec.HeadAsync] from obspec.
        """

        pass

    def __init__(
        self,
        store: StoreSource.Store | StoreSource.AsyncStore,
        path: str,
        size: int | None = None,
    ) -> None:
        """
        Create a source for one file in a store.

        Parameters
        ----------
        store
            Any object implementing [GetRange][obspec.GetRange] and
            [Head][obspec.Head], or their async counterparts for use with
            async streams.
        path
            The path to the file within the store.
        size
            File size in bytes. Pass this to skip the HEAD request if you
            already know the file size.
        """
        self._store = store
        self._path = path
        self._size = size
        self.name = posixpath.basename(path) or None

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> StoreSource:
        """
        Create a source from a full URL such as ``s3://bucket/key``.

        The store is built with obstore's `from_url` on the directory part of
        the URL; `kwargs` are forwarded to it.
        """
        parsed = urlparse(url)
        prefix, _, name = parsed.path.rpartition("/")
        store_url = parsed._replace(path=prefix or "/").geturl()
        return cls(from_url(store_url, **kwargs), name)

    @property
    def path(self) -> str:
        return self._path

    @property
    def length(self) -> int:
        """File size, fetched via a head() call on first access."""
        if self._size is None:
            self._size = self._store.head(self._path)["size"]
        return self._size

    async def length_async(self) -> int:
        """File size, fetched via a head_async() call on first access."""
        if self._size is None:
            meta = await self._store.head_async(self._path)
            self._size = meta["size"]
        return self._size

    def slice(self, start: int, end: int) -> bytes:
        end = min(end, self.length)
        # Object stores reject empty ranges
        if end <= start:
            return b""
        return bytes(self._store.get_range(self._path, start=start, end=end))

    async def slice_async(self, start: int, end: int) -> bytes:
        end = min(end, await self.length_async())
        if end <= start:
            return b""
        data = await self._store.get_range_async(self._path, start=start, end=end)
        return bytes(data)

    def __repr__(self) -> str:
        return f"StoreSource({self._store!r}, {self._path!r})"


__all__ = ["StoreSource"]
