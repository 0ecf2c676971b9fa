"""kv-storage - named, typed key/value collections with listeners and queries."""

from ._version import version as __version__
from .backends import Backend, InMemoryAsyncBackend, NatsBackend, PostgresBackend, RedisBackend
from .codec import JsonCodec, root_type_of
from .config import StorageConfig
from .errors import (
    BackendError,
    ConfigError,
    InvalidArgumentError,
    InvalidQueryError,
    SerializationError,
    StorageError,
    UnsupportedOperationError,
)
from .factory import create_storage_service
from .query import AttributeFilter, AttributeSort, FilterCondition, Query, SortDirection
from .storage import (
    InMemoryStorage,
    InMemoryStorageService,
    RemoteStorage,
    RemoteStorageService,
    Storage,
    StorageService,
)


__all__ = [
    "AttributeFilter",
    "AttributeSort",
    "Backend",
    "BackendError",
    "ConfigError",
    "FilterCondition",
    "InMemoryAsyncBackend",
    "InMemoryStorage",
    "InMemoryStorageService",
    "InvalidArgumentError",
    "InvalidQueryError",
    "JsonCodec",
    "NatsBackend",
    "PostgresBackend",
    "Query",
    "RedisBackend",
    "RemoteStorage",
    "RemoteStorageService",
    "SerializationError",
    "SortDirection",
    "Storage",
    "StorageConfig",
    "StorageError",
    "StorageService",
    "UnsupportedOperationError",
    "__version__",
    "create_storage_service",
    "root_type_of",
]
