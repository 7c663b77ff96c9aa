"""Protocols for byte sources and file-like readers.

This module defines the core protocols used throughout blobstream.
"""

from blobstream.protocols._protocols import AsyncSource, ReadableFile, Source

__all__ = ["AsyncSource", "ReadableFile", "Source"]
