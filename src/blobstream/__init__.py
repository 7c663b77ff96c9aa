from ._version import __version__
from .config import StreamConfig, StreamKind
from .errors import (
    BlobStreamError,
    ChunkOutOfRangeError,
    InvalidArgumentError,
    InvalidConfigurationError,
    InvalidOffsetError,
    InvalidSourceError,
    SourceReadError,
    StreamClosedError,
    TruncatedReadWarning,
    UndrainedStreamWarning,
    UnknownConfigurationKeyWarning,
)
from .streams import (
    AsyncFileStream,
    AsyncTextFileStream,
    FileStream,
    TextFileStream,
    open_stream,
    open_stream_async,
)

__all__ = [
    "__version__",
    "AsyncFileStream",
    "AsyncTextFileStream",
    "BlobStreamError",
    "ChunkOutOfRangeError",
    "FileStream",
    "InvalidArgumentError",
    "InvalidConfigurationError",
    "InvalidOffsetError",
    "InvalidSourceError",
    "SourceReadError",
    "StreamClosedError",
    "StreamConfig",
    "StreamKind",
    "TextFileStream",
    "TruncatedReadWarning",
    "UndrainedStreamWarning",
    "UnknownConfigurationKeyWarning",
    "open_stream",
    "open_stream_async",
]
