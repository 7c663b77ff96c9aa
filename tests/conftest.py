import pytest
from obstore.store import MemoryStore

DIGITS = b"0123456789"


@pytest.fixture
def digits() -> bytes:
    return DIGITS


@pytest.fixture
def memstore() -> MemoryStore:
    """A MemoryStore holding a small binary file and a small text file."""
    store = MemoryStore()
    store.put("data/digits.bin", DIGITS)
    store.put("data/lines.txt", b"abc\ndef\nghi")
    store.put("data/empty.bin", b"")
    return store
