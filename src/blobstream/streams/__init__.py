"""Chunked streams over byte sources.

This module provides readers that materialize one chunk of a source at a time
and expose byte, buffer and line reads together with absolute seeking.
"""

from blobstream.streams._async import AsyncFileStream, AsyncTextFileStream
from blobstream.streams._binary import FileStream
from blobstream.streams._factory import open_stream, open_stream_async
from blobstream.streams._text import TextFileStream

__all__ = [
    "AsyncFileStream",
    "AsyncTextFileStream",
    "FileStream",
    "TextFileStream",
    "open_stream",
    "open_stream_async",
]
