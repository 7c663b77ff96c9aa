"""Tests for TracingSource, RequestTrace, and RequestRecord."""

import time

import pytest

from blobstream import FileStream
from blobstream.protocols import AsyncSource, Source
from blobstream.sources import BytesSource, StoreSource
from blobstream.wrappers import RequestRecord, RequestTrace, TracingSource

from .mocks import ClosableSource, FailingSource


# --- RequestRecord Tests ---


def make_record(start, end, path="test.txt", **kwargs):
    return RequestRecord(
        path=path, start=start, end=end, timestamp=time.time(), **kwargs
    )


def test_request_record_fields():
    rec = RequestRecord(
        path="test.txt",
        start=100,
        end=150,
        timestamp=1234567890.0,
        duration=0.5,
        method="slice_async",
    )

    assert rec.length == 50
    assert rec.key == ("test.txt", 100, 150)
    assert rec.duration == 0.5
    assert rec.method == "slice_async"
    assert rec.error is None


# --- RequestTrace Tests ---


def test_trace_clear():
    trace = RequestTrace()
    trace.add(make_record(0, 100))
    trace.add(make_record(100, 200))

    assert trace.total_requests == 2
    trace.clear()
    assert trace.total_requests == 0


def test_trace_totals():
    trace = RequestTrace()
    trace.add(make_record(0, 100))
    trace.add(make_record(100, 300))
    trace.add(make_record(300, 350))

    assert trace.total_bytes == 350
    assert trace.total_requests == 3


def test_trace_reloads():
    """Loading the same range again, for the same path, counts as a reload."""
    trace = RequestTrace()
    trace.add(make_record(0, 4))
    trace.add(make_record(4, 8))
    trace.add(make_record(0, 4))
    trace.add(make_record(0, 4, path="other.txt"))

    assert trace.reloads == 1


def test_trace_summary():
    trace = RequestTrace()
    assert trace.summary() == {
        "total_requests": 0,
        "total_bytes": 0,
        "reloads": 0,
        "failed": 0,
        "by_method": {},
    }

    trace.add(make_record(0, 100, duration=0.25))
    trace.add(make_record(0, 300, method="slice_async", duration=0.5, error="OSError"))
    trace.add(make_record(0, 100))

    summary = trace.summary()
    assert summary["total_requests"] == 3
    assert summary["total_bytes"] == 500
    assert summary["reloads"] == 1
    assert summary["failed"] == 1
    assert summary["by_method"] == {"slice": 2, "slice_async": 1}
    assert summary["largest_load"] == 300
    assert summary["total_duration"] == 0.75


def test_trace_to_dataframe():
    pytest.importorskip("pandas")
    trace = RequestTrace()
    assert trace.to_dataframe().empty

    trace.add(RequestRecord(path="a", start=0, end=4, timestamp=1.0, duration=0.1))
    df = trace.to_dataframe()
    assert list(df.columns) == [
        "path",
        "start",
        "end",
        "length",
        "timestamp",
        "duration",
        "method",
        "error",
    ]
    assert df.iloc[0]["length"] == 4


# --- TracingSource Tests ---


def test_tracing_source_is_transparent():
    traced = TracingSource(BytesSource(b"0123456789", name="digits"), RequestTrace())

    assert isinstance(traced, Source)
    assert isinstance(traced, AsyncSource)
    assert traced.length == 10
    assert traced.name == "digits"
    assert traced.slice(2, 4) == b"23"


def test_tracing_slice_records_range():
    trace = RequestTrace()
    traced = TracingSource(BytesSource(b"0123456789"), trace, path="digits.bin")

    traced.slice(4, 8)

    record = trace.requests[0]
    assert record.path == "digits.bin"
    assert record.start == 4
    assert record.length == 4
    assert record.end == 8
    assert record.method == "slice"
    assert record.duration is not None and record.duration >= 0


def test_tracing_path_defaults_to_store_path(memstore):
    trace = RequestTrace()
    traced = TracingSource(StoreSource(memstore, "data/digits.bin"), trace)

    traced.slice(0, 2)
    assert trace.requests[0].path == "data/digits.bin"


@pytest.mark.asyncio
async def test_tracing_slice_async():
    trace = RequestTrace()
    traced = TracingSource(BytesSource(b"0123456789"), trace)

    assert await traced.length_async() == 10
    assert await traced.slice_async(8, 12) == b"89"
    assert trace.total_requests == 1
    assert trace.requests[0].method == "slice_async"


def test_on_request_callback():
    """Callback invoked for each request."""
    trace = RequestTrace()
    callback_records = []
    traced = TracingSource(
        BytesSource(b"hello world"), trace, on_request=callback_records.append
    )

    traced.slice(0, 5)
    traced.slice(5, 11)

    assert [r.start for r in callback_records] == [0, 5]


def test_records_on_exception():
    """Requests are recorded even when the source raises."""
    trace = RequestTrace()
    traced = TracingSource(FailingSource(b"0123", fail_starts={0}), trace)

    with pytest.raises(IOError):
        traced.slice(0, 4)

    assert trace.total_requests == 1
    assert trace.requests[0].duration is not None
    assert trace.requests[0].error == "OSError"
    assert trace.summary()["failed"] == 1


def test_close_forwarded_through_stream():
    source = ClosableSource(b"0123")
    stream = FileStream(TracingSource(source, RequestTrace()))

    stream.close()
    assert source.closed


def test_sequential_read_one_request_per_chunk():
    """Reading a stream front to back fetches each chunk exactly once."""
    trace = RequestTrace()
    stream = FileStream(
        TracingSource(BytesSource(bytes(10)), trace), {"chunk_size": 4}
    )

    stream.read()
    assert [(r.start, r.length) for r in trace.requests] == [(0, 4), (4, 4), (8, 2)]
    assert trace.total_bytes == 10


def test_seeking_back_counts_as_reload():
    trace = RequestTrace()
    stream = FileStream(
        TracingSource(BytesSource(bytes(10)), trace), {"chunk_size": 4}
    )

    stream.read()
    stream.seek(0)

    assert trace.total_requests == 4
    assert trace.reloads == 1
