"""Core protocol definitions for byte sources and readers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Source(Protocol):
    """
    An immutable byte range of known total length.

    A source is exclusively owned by the stream reading it. Streams only ever
    call `slice` with ``0 <= start <= end``; implementations clamp `end` to
    `length` and must return exactly ``min(end, length) - start`` bytes.

    Implementations may additionally provide a ``name`` attribute, used as the
    stream's display name, and a ``close()`` method, called when the owning
    stream is closed.

    Examples
    --------

    ```python
    from blobstream import FileStream
    from blobstream.sources import BytesSource

    stream = FileStream(BytesSource(b"hello"))
    assert stream.read_byte() == ord("h")
    ```
    """

    @property
    def length(self) -> int:
        """Total number of bytes in the source."""
        ...

    def slice(self, start: int, end: int) -> bytes:
        """
        Return the bytes in ``[start, min(end, length))``.

        Parameters
        ----------
        start
            Offset of the first byte.
        end
            Offset one past the last byte, clamped to `length`.

        Returns
        -------
        bytes
            The requested range.
        """
        ...


@runtime_checkable
class AsyncSource(Protocol):
    """
    Async counterpart of [Source][blobstream.protocols.Source].

    Used by [AsyncFileStream][blobstream.streams.AsyncFileStream], which awaits
    every chunk load before the read that needed it proceeds.
    """

    async def length_async(self) -> int:
        """Total number of bytes in the source."""
        ...

    async def slice_async(self, start: int, end: int) -> bytes:
        """Return the bytes in ``[start, min(end, length))``."""
        ...


@runtime_checkable
class ReadableFile(Protocol):
    """
    Protocol for read-only file-like objects.

    This protocol defines the minimal interface needed to read from a file-like
    object, compatible with libraries that expect file handles (e.g., h5py, zarr).
    [`FileStream`][blobstream.streams.FileStream] and
    [`TextFileStream`][blobstream.streams.TextFileStream] both implement it.

    !!! Warning
        It's recommended to define your own protocols. This protocol may change without warning.
    """

    def read(self, size: int = -1, /) -> bytes:
        """
        Read up to `size` bytes from the file.

        Parameters
        ----------
        size
            Number of bytes to read. If -1, read until EOF.

        Returns
        -------
        bytes
            The data read from the file.
        """
        ...

    def seek(self, offset: int, whence: int = 0, /) -> int:
        """
        Move to a new file position.

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
        """
        ...

    def tell(self) -> int:
        """
        Return the current file position.

        Returns
        -------
        int
            Current position in bytes from start of file.
        """
        ...


__all__ = ["AsyncSource", "ReadableFile", "Source"]
