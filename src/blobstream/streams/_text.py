"""Synchronous chunked text stream with line reading."""

from __future__ import annotations

import warnings
from collections.abc import Iterator

from blobstream.config import StreamKind
from blobstream.errors import TruncatedReadWarning
from blobstream.streams._base import check_count
from blobstream.streams._binary import FileStream

# Bytes map one-to-one onto code points 0-255.
TEXT_ENCODING = "latin-1"


class TextFileStream(FileStream):
    """
    A [FileStream][blobstream.streams.FileStream] that can also read lines.

    Lines are terminated by a single line feed (``0x0A``), which is stripped.
    No character decoding is performed: every byte becomes the character with
    the same code point. Lines may span any number of chunks.
    """

    KIND = StreamKind.TEXT

    line_number = 0
    """Number of lines read so far."""

    line_truncated = False
    """Whether the last line read ended at EOF without a line feed."""

    def read_line(self) -> str:
        """
        Read up to and excluding the next line feed.

        If EOF comes first, the text read so far is returned (possibly empty)
        and [line_truncated][blobstream.streams.TextFileStream.line_truncated]
        is set.
        """
        self._check_open()
        parts = []
        truncated = True
        while not self.eof:
            if self._cursor.exhausted:
                self._advance()
            segment, found = self._take_line()
            parts.append(segment)
            if found:
                truncated = False
                break
        self.line_number += 1
        self.line_truncated = truncated
        return b"".join(parts).decode(TEXT_ENCODING)

    def read_lines(self, n: int) -> str:
        """
        Read up to `n` lines and join them with ``"\\n"``.

        Reading stops at the first line cut short by EOF. A non-empty partial
        line is kept in the result, an empty one is dropped, and a
        [TruncatedReadWarning][blobstream.errors.TruncatedReadWarning] is issued.
        """
        self._check_open()
        check_count("n", n)
        lines = []
        for _ in range(n):
            line = self.read_line()
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

    def iter_lines(self) -> Iterator[str]:
        """Yield lines until EOF; a final line without terminator is included."""
        while not self.eof:
            yield self.read_line()

    def __iter__(self) -> Iterator[str]:
        return self.iter_lines()

    def __enter__(self) -> TextFileStream:
        """Enter the context manager."""
        return self


__all__ = ["TextFileStream"]
