"""Tests for ChunkTable, ChunkCache and Cursor."""

import pytest

from blobstream.chunks import ChunkCache, ChunkTable, Cursor
from blobstream.errors import (
    ChunkOutOfRangeError,
    InvalidOffsetError,
    SourceReadError,
    StreamClosedError,
)
from blobstream.sources import BytesSource

from .mocks import FailingSource, ShortReadSource


# =============================================================================
# ChunkTable
# =============================================================================


def test_chunk_table_partial_last_chunk():
    """2500 bytes in 1024-byte chunks gives three chunks, the last one short."""
    table = ChunkTable(length=2500, chunk_size=1024)

    assert table.chunk_count == 3
    assert table.ranges() == [(0, 1024), (1024, 2048), (2048, 2500)]


@pytest.mark.parametrize(
    ("length", "chunk_size", "expected_count"),
    [(0, 4, 0), (3, 4, 1), (4, 4, 1), (12, 4, 3), (10, 4, 3), (5, 1, 5)],
)
def test_chunk_table_partitions_length(length, chunk_size, expected_count):
    """Chunk ranges are contiguous, non-overlapping and cover [0, length)."""
    table = ChunkTable(length, chunk_size)
    ranges = table.ranges()

    assert table.chunk_count == expected_count
    covered = 0
    for start, end in ranges:
        assert start == covered
        assert 0 < end - start <= chunk_size
        covered = end
    assert covered == length


def test_chunk_table_index_out_of_range():
    table = ChunkTable(length=10, chunk_size=4)

    with pytest.raises(ChunkOutOfRangeError) as exc_info:
        table.range(3)
    assert exc_info.value.index == 3
    assert exc_info.value.chunk_count == 3

    with pytest.raises(IndexError):
        table.range(-1)


def test_chunk_table_index_of():
    table = ChunkTable(length=10, chunk_size=4)

    assert [table.index_of(o) for o in range(10)] == [0, 0, 0, 0, 1, 1, 1, 1, 2, 2]


# =============================================================================
# ChunkCache
# =============================================================================


def test_chunk_cache_starts_empty():
    cache = ChunkCache(BytesSource(b"0123456789"), ChunkTable(10, 4))

    assert cache.index is None
    assert cache.data == b""


def test_chunk_cache_load_replaces_slot():
    cache = ChunkCache(BytesSource(b"0123456789"), ChunkTable(10, 4))

    cache.load(1)
    assert cache.index == 1
    assert cache.data == b"4567"

    cache.load(2)
    assert cache.index == 2
    assert cache.data == b"89"


def test_chunk_cache_load_out_of_range():
    cache = ChunkCache(BytesSource(b"0123456789"), ChunkTable(10, 4))
    cache.load(0)

    with pytest.raises(ChunkOutOfRangeError):
        cache.load(3)
    assert cache.index == 0
    assert cache.data == b"0123"


def test_chunk_cache_failure_keeps_previous_chunk():
    """A failed load leaves the previously resident chunk in place."""
    cache = ChunkCache(FailingSource(b"0123456789", fail_starts={4}), ChunkTable(10, 4))
    cache.load(0)

    with pytest.raises(SourceReadError) as exc_info:
        cache.load(1)
    assert isinstance(exc_info.value.__cause__, IOError)
    assert cache.index == 0
    assert cache.data == b"0123"


def test_chunk_cache_short_read_is_an_error():
    cache = ChunkCache(ShortReadSource(b"0123456789"), ChunkTable(10, 4))

    with pytest.raises(SourceReadError, match="Short read"):
        cache.load(0)
    assert cache.index is None


def test_chunk_cache_closed():
    cache = ChunkCache(BytesSource(b"0123456789"), ChunkTable(10, 4))
    cache.load(0)

    cache.close()
    assert cache.closed
    assert cache.data == b""
    with pytest.raises(StreamClosedError):
        cache.load(1)


@pytest.mark.asyncio
async def test_chunk_cache_load_async():
    cache = ChunkCache(BytesSource(b"0123456789"), ChunkTable(10, 4))

    await cache.load_async(2)
    assert cache.index == 2
    assert cache.data == b"89"


# =============================================================================
# Cursor
# =============================================================================


def test_cursor_locate():
    cursor = Cursor(ChunkTable(10, 4))

    assert cursor.locate(0) == (0, 0)
    assert cursor.locate(5) == (1, 1)
    assert cursor.locate(8) == (2, 0)
    assert cursor.locate(10) == (2, 2)


def test_cursor_locate_end_of_exact_multiple():
    """The end of a source that fills its last chunk stays on that chunk."""
    cursor = Cursor(ChunkTable(12, 4))

    assert cursor.locate(12) == (2, 4)


@pytest.mark.parametrize("offset", [-1, 11, 1.5, True])
def test_cursor_locate_invalid(offset):
    cursor = Cursor(ChunkTable(10, 4))

    with pytest.raises(InvalidOffsetError):
        cursor.locate(offset)


def test_cursor_tell_and_eof():
    cursor = Cursor(ChunkTable(10, 4))

    cursor.move(1, 4)
    assert cursor.tell() == 8
    assert cursor.exhausted
    assert not cursor.at_eof

    cursor.move(2, 2)
    assert cursor.tell() == 10
    assert cursor.at_eof


def test_cursor_empty_table_is_at_eof():
    cursor = Cursor(ChunkTable(0, 4))

    assert cursor.tell() == 0
    assert cursor.at_eof
    assert cursor.locate(0) == (0, 0)
