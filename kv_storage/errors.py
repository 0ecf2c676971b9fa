"""Exception hierarchy shared by storages, queries and backends."""

from __future__ import annotations


class StorageError(Exception):
    """Base class for every error raised by kv-storage."""


class InvalidArgumentError(StorageError, ValueError):
    """An argument has the wrong shape or an unusable value."""


class InvalidQueryError(InvalidArgumentError):
    """A query is configured with values it cannot evaluate."""


class UnsupportedOperationError(StorageError, NotImplementedError):
    """A storage does not implement a requested query feature."""

    def __init__(self, feature: str) -> None:
        super().__init__(f"unsupported query feature: {feature}")
        self.feature = feature


class BackendError(StorageError, RuntimeError):
    """The physical store is unavailable or misconfigured."""


class SerializationError(BackendError):
    """A record could not be encoded for, or decoded from, the backend."""


class ConfigError(StorageError):
    """Storage configuration is invalid."""
