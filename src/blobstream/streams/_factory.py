"""Pick the stream class for a configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from blobstream.config import StreamConfig, StreamKind
from blobstream.streams._async import AsyncFileStream, AsyncTextFileStream
from blobstream.streams._binary import FileStream
from blobstream.streams._text import TextFileStream

if TYPE_CHECKING:
    from collections.abc import Buffer

    from blobstream.protocols import AsyncSource, Source

STREAM_CLASSES: dict[StreamKind, type[FileStream]] = {
    StreamKind.BINARY: FileStream,
    StreamKind.TEXT: TextFileStream,
}

ASYNC_STREAM_CLASSES: dict[StreamKind, type[AsyncFileStream]] = {
    StreamKind.BINARY: AsyncFileStream,
    StreamKind.TEXT: AsyncTextFileStream,
}


def open_stream(
    source: Source | Buffer,
    config: StreamConfig | Mapping[str, Any] | None = None,
) -> FileStream:
    """
    Open a stream over `source`.

    Returns a [TextFileStream][blobstream.streams.TextFileStream] when the
    config's ``type`` is ``"text"`` and a
    [FileStream][blobstream.streams.FileStream] otherwise.

    Examples
    --------

    ```python
    from blobstream import open_stream

    with open_stream(b"abc\\ndef\\n", {"type": "text", "chunk_size": 4}) as stream:
        assert stream.read_lines(2) == "abc\\ndef"
    ```
    """
    config = StreamConfig.coerce(config)
    return STREAM_CLASSES[config.type](source, config)


async def open_stream_async(
    source: AsyncSource | Buffer,
    config: StreamConfig | Mapping[str, Any] | None = None,
) -> AsyncFileStream:
    """Async counterpart of [open_stream][blobstream.open_stream]."""
    config = StreamConfig.coerce(config)
    return await ASYNC_STREAM_CLASSES[config.type].open(source, config)


__all__ = ["open_stream", "open_stream_async"]
