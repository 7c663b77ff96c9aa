"""Byte sources that streams can read from.

A source is anything implementing [Source][blobstream.protocols.Source]: an
in-memory blob, or a file in any obspec-compatible object store.
"""

from blobstream.sources._bytes import BytesSource, as_source
from blobstream.sources._store import StoreSource

__all__ = ["BytesSource", "StoreSource", "as_source"]
