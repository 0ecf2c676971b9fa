"""Named collections and the registries that own them."""

from .bridge import AsyncLoopBridge
from .in_memory import InMemoryStorage
from .protocol import Storage
from .remote import RemoteStorage
from .service import InMemoryStorageService, RemoteStorageService, StorageService


__all__ = [
    "AsyncLoopBridge",
    "InMemoryStorage",
    "InMemoryStorageService",
    "RemoteStorage",
    "RemoteStorageService",
    "Storage",
    "StorageService",
]
