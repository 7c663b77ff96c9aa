"""Source wrappers that add functionality to underlying sources.

This module provides transparent wrapper classes that add request tracing to
any Source.
"""

from blobstream.wrappers._tracing import (
    RequestRecord,
    RequestTrace,
    TracingSource,
)

__all__ = [
    "TracingSource",
    "RequestTrace",
    "RequestRecord",
]
