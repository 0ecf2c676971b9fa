"""Build the storage service selected by configuration."""

from __future__ import annotations

import logging
from typing import assert_never

from kv_storage.backends import Backend, NatsBackend, PostgresBackend, RedisBackend
from kv_storage.config import StorageConfig
from kv_storage.errors import ConfigError
from kv_storage.storage import InMemoryStorageService, RemoteStorageService, StorageService


logger = logging.getLogger(__name__)


def create_backend(config: StorageConfig) -> Backend:
    """Return the raw KV backend for a remote ``config.backend``."""
    match config.backend:
        case "postgres":
            return PostgresBackend(
                dsn=config.postgres.dsn,
                table=config.postgres.table,
                create_table=config.postgres.create_table,
            )
        case "redis":
            return RedisBackend(url=config.redis.url)
        case "nats":
            return NatsBackend(
                url=config.nats.url,
                bucket=config.nats.bucket,
                create_bucket=config.nats.create_bucket,
            )
        case "in-memory":
            msg = "the in-memory storage service does not use a raw KV backend"
            raise ConfigError(msg)
        case _:
            assert_never(config.backend)


def create_storage_service(config: StorageConfig | None = None) -> StorageService:
    """Create the storage service for the configured backend.

    Called once at process start; the caller owns the returned service and
    must ``close()`` it on shutdown.
    """
    if config is None:
        config = StorageConfig.load()

    if config.backend == "in-memory":
        service: StorageService = InMemoryStorageService()
    else:
        service = RemoteStorageService(create_backend(config), sep=config.key_separator)
    logger.info("using %s storage backend", config.backend)
    return service
