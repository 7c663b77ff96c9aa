"""Stream configuration."""

from __future__ import annotations

import enum
import warnings
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from blobstream.errors import (
    InvalidConfigurationError,
    UnknownConfigurationKeyWarning,
)

KILOBYTE = 1024

DEFAULT_CHUNK_SIZE = KILOBYTE
DEFAULT_FILE_NAME = "file"

# Single-letter mode flags accepted in compact mode strings such as "r".
_MODE_LETTERS = {"r": "read", "w": "write"}
_KNOWN_MODES = frozenset(_MODE_LETTERS.values())

# camelCase spellings of the original configuration surface
_KEY_ALIASES = {
    "chunkSize": "chunk_size",
    "readAll": "read_all",
    "defaultFileName": "default_file_name",
}

# Keys of the original configuration surface that have no effect here
_IGNORED_KEYS = frozenset({"splitPattern", "split_pattern"})


class StreamKind(enum.Enum):
    """The kind of stream to build, chosen once at construction."""

    BINARY = "binary"
    TEXT = "text"


@dataclass(frozen=True)
class StreamConfig:
    """
    Immutable configuration for a stream.

    Attributes
    ----------
    chunk_size
        Number of bytes materialized per chunk. Must be at least 1.
    mode
        Capability tags. Must contain ``"read"``.
    type
        Whether the stream is binary or text (adds line reading).
    read_all
        Whether consumers are expected to drain the stream to EOF. Closing
        such a stream early issues an
        [UndrainedStreamWarning][blobstream.errors.UndrainedStreamWarning].
    default_file_name
        Display name used when the source does not provide one.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    mode: frozenset[str] = field(default_factory=lambda: frozenset({"read"}))
    type: StreamKind = StreamKind.BINARY
    read_all: bool = False
    default_file_name: str = DEFAULT_FILE_NAME

    def __post_init__(self) -> None:
        # bool is an int subclass, so reject it explicitly.
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
            raise InvalidConfigurationError(
                f"chunk_size must be an integer, got {self.chunk_size!r}"
            )
        if self.chunk_size < 1:
            raise InvalidConfigurationError(
                f"chunk_size must be at least 1, got {self.chunk_size}"
            )
        object.__setattr__(self, "mode", _parse_mode(self.mode))
        object.__setattr__(self, "type", _parse_kind(self.type))
        if not isinstance(self.read_all, bool):
            raise InvalidConfigurationError(
                f"read_all must be a bool, got {self.read_all!r}"
            )
        if not isinstance(self.default_file_name, str):
            raise InvalidConfigurationError(
                f"default_file_name must be a string, got {self.default_file_name!r}"
            )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> StreamConfig:
        """
        Build a config from a mapping, filling unspecified fields with defaults.

        Keys may be snake_case or the camelCase names ``chunkSize``,
        ``readAll`` and ``defaultFileName``. ``splitPattern`` is accepted and
        ignored; any other unknown key is ignored with an
        ``UnknownConfigurationKeyWarning``.

        Raises
        ------
        InvalidConfigurationError
            If a key is given twice or a value is invalid.
        """
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                if key not in _IGNORED_KEYS:
                    warnings.warn(
                        f"Ignoring unknown configuration key: {key!r}",
                        UnknownConfigurationKeyWarning,
                        stacklevel=3,
                    )
                continue
            if name in kwargs:
                raise InvalidConfigurationError(
                    f"Configuration key {name!r} given more than once"
                )
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def coerce(cls, value: StreamConfig | Mapping[str, Any] | None) -> StreamConfig:
        """
        Normalize a user-supplied configuration value.

        Parameters
        ----------
        value
            ``None`` for defaults, an existing StreamConfig, or a mapping.

        Raises
        ------
        InvalidConfigurationError
            If `value` is none of the accepted shapes.
        """
        if value is None:
            return cls()
        if isinstance(value, StreamConfig):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        raise InvalidConfigurationError(
            f"Invalid parameter for configuration: expected a mapping or None, "
            f"got {type(value).__name__}"
        )

    @property
    def readable(self) -> bool:
        return "read" in self.mode

    @property
    def writable(self) -> bool:
        return "write" in self.mode


def _parse_mode(mode: str | Iterable[str]) -> frozenset[str]:
    if isinstance(mode, str):
        try:
            tags = frozenset(_MODE_LETTERS[letter] for letter in mode)
        except KeyError as e:
            raise InvalidConfigurationError(f"Invalid mode string: {mode!r}") from e
    elif isinstance(mode, Iterable):
        try:
            tags = frozenset(mode)
        except TypeError as e:
            raise InvalidConfigurationError(f"Invalid mode: {mode!r}") from e
    else:
        raise InvalidConfigurationError(f"Invalid mode: {mode!r}")

    unknown = tags - _KNOWN_MODES
    if unknown:
        tags_repr = ", ".join(sorted(map(repr, unknown)))
        raise InvalidConfigurationError(f"Unknown mode tags: {tags_repr}")
    if "read" not in tags:
        raise InvalidConfigurationError("mode must include 'read'")
    if "write" in tags:
        raise InvalidConfigurationError("Write mode is not supported")
    return tags


def _parse_kind(kind: StreamKind | str) -> StreamKind:
    try:
        return StreamKind(kind)
    except ValueError as e:
        raise InvalidConfigurationError(
            f"type must be 'binary' or 'text', got {kind!r}"
        ) from e


__all__ = ["DEFAULT_CHUNK_SIZE", "StreamConfig", "StreamKind"]
