"""Request tracing utilities for blobstream.

This module provides a wrapper to trace the chunk loads a stream makes against
its source, useful for debugging, profiling, and spotting chunks that are
loaded more than once because the stream seeks back and forth.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Literal

from blobstream.protocols import AsyncSource, Source

Method = Literal["slice", "slice_async"]

_COLUMNS = [
    "path",
    "start",
    "end",
    "length",
    "timestamp",
    "duration",
    "method",
    "error",
]


@dataclass(frozen=True)
class RequestRecord:
    """One ``slice`` call made against a source.

    ``end`` is the exclusive end that was asked for; the source may return
    fewer bytes when the range runs past its end. ``error`` holds the
    exception class name when the call raised.
    """

    path: str
    start: int
    end: int
    timestamp: float
    duration: float | None = None
    method: Method = "slice"
    error: str | None = None

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def key(self) -> tuple[str, int, int]:
        """Identity of the byte range, shared by repeated loads of one chunk."""
        return (self.path, self.start, self.end)


@dataclass
class RequestTrace:
    """Chunk loads recorded by one or more TracingSource wrappers."""

    requests: list[RequestRecord] = field(default_factory=list)

    def add(self, record: RequestRecord) -> None:
        self.requests.append(record)

    def clear(self) -> None:
        self.requests.clear()

    def to_dataframe(self):
        """Convert to a pandas DataFrame with one row per load."""
        import pandas as pd

        rows = [{name: getattr(r, name) for name in _COLUMNS} for r in self.requests]
        return pd.DataFrame(rows, columns=_COLUMNS)

    @property
    def total_bytes(self) -> int:
        return sum(r.length for r in self.requests)

    @property
    def total_requests(self) -> int:
        return len(self.requests)

    @property
    def reloads(self) -> int:
        """Number of loads of a range that had already been loaded before."""
        return self.total_requests - len({r.key for r in self.requests})

    def summary(self) -> dict[str, Any]:
        """
        Summarize the recorded loads.

        Returns
        -------
        dict
            ``total_requests``, ``total_bytes``, ``reloads``, ``failed`` and
            ``by_method`` (load count per method). When anything was recorded,
            also ``largest_load`` in bytes and ``total_duration`` in seconds.
        """
        summary: dict[str, Any] = {
            "total_requests": self.total_requests,
            "total_bytes": self.total_bytes,
            "reloads": self.reloads,
            "failed": sum(r.error is not None for r in self.requests),
            "by_method": dict(Counter(r.method for r in self.requests)),
        }
        if self.requests:
            summary["largest_load"] = max(r.length for r in self.requests)
            summary["total_duration"] = sum(r.duration or 0.0 for r in self.requests)
        return summary


class TracingSource:
    """
    A wrapper that records every chunk load made against an underlying source.

    Implements [Source][blobstream.protocols.Source] and
    [AsyncSource][blobstream.protocols.AsyncSource] by delegation. Length
    lookups are not recorded.

    Examples
    --------
    ```python
    from blobstream import FileStream
    from blobstream.sources import BytesSource
    from blobstream.wrappers import RequestTrace, TracingSource

    trace = RequestTrace()
    source = TracingSource(BytesSource(b"0123456789"), trace)
    stream = FileStream(source, {"chunk_size": 4})
    stream.read(10)
    assert trace.total_requests == 3  # one per chunk
    stream.seek(0)
    stream.read(1)
    assert trace.reloads == 1  # chunk 0 was evicted and loaded again
    ```
    """

    def __init__(
        self,
        source: Source | AsyncSource,
        trace: RequestTrace,
        *,
        on_request: Callable[[RequestRecord], None] | None = None,
        path: str | None = None,
    ) -> None:
        """
        Create a tracing wrapper around a source.

        Parameters
        ----------
        source
            Any [Source][blobstream.protocols.Source] or
            [AsyncSource][blobstream.protocols.AsyncSource].
        trace
            RequestTrace the loads are appended to.
        on_request
            Optional callback called with each finished record.
        path
            Label stored on each record. Defaults to the source's ``path`` or
            ``name`` attribute.
        """
        self._source = source
        self._trace = trace
        self._on_request = on_request
        if path is None:
            path = getattr(source, "path", None) or getattr(source, "name", None) or ""
        self._path = path

    def __getattr__(self, name: str) -> Any:
        """Forward unknown attributes to the underlying source.

        This keeps TracingSource transparent for optional attributes such as
        ``name`` and ``close()``.
        """
        return getattr(self._source, name)

    @contextmanager
    def _record(
        self, method: Method, start: int, end: int
    ) -> Generator[None, None, None]:
        """Time one load and append its record, also when the load raises."""
        error = None
        start_time = time.time()
        try:
            yield
        except Exception as e:
            error = type(e).__name__
            raise
        finally:
            record = RequestRecord(
                path=self._path,
                start=start,
                end=end,
                timestamp=start_time,
                duration=time.time() - start_time,
                method=method,
                error=error,
            )
            self._trace.add(record)
            if self._on_request:
                self._on_request(record)

    @property
    def length(self) -> int:
        return self._source.length

    async def length_async(self) -> int:
        return await self._source.length_async()

    def slice(self, start: int, end: int) -> bytes:
        """Get a byte range (delegates to underlying source)."""
        with self._record("slice", start, end):
            return self._source.slice(start, end)

    async def slice_async(self, start: int, end: int) -> bytes:
        """Get a byte range async (delegates to underlying source)."""
        with self._record("slice_async", start, end):
            return await self._source.slice_async(start, end)


__all__ = [
    "RequestRecord",
    "RequestTrace",
    "TracingSource",
]
