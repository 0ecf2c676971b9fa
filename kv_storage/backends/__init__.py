"""Raw key/value backends behind remote storages."""

from .in_memory import InMemoryAsyncBackend
from .nats import NatsBackend
from .postgres import PostgresBackend
from .protocol import Backend
from .redis import RedisBackend


__all__ = ["Backend", "InMemoryAsyncBackend", "NatsBackend", "PostgresBackend", "RedisBackend"]
