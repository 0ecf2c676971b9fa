"""Registries handing out one storage per collection name."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Self, TypeVar, overload

from kv_storage.codec import JsonCodec, root_type_of
from kv_storage.errors import InvalidArgumentError, StorageError

from .bridge import AsyncLoopBridge
from .in_memory import InMemoryStorage
from .remote import RemoteStorage


if TYPE_CHECKING:
    from types import TracebackType

    from kv_storage.backends import Backend

    from .protocol import Storage


_T = TypeVar("_T")

logger = logging.getLogger(__name__)


class StorageService(ABC):
    """Registry of named storages.

    Lookups are keyed purely by name: the first call for a name creates the
    storage, every later call returns that same instance no matter which
    value type or root type it passes. Creation is atomic, so concurrent
    first lookups never produce two storages for one name.
    """

    def __init__(self) -> None:
        super().__init__()
        self._caches: dict[str, Storage[str, Any]] = {}
        self._lock = threading.Lock()
        self._closed = False

    @abstractmethod
    def _create_cache(self, name: str, value_type: Any, root_type: str) -> Storage[str, Any]:
        """Build a new storage for ``name``."""

    def _release(self) -> None:  # noqa: B027
        """Free backend resources once the service is closed."""

    @overload
    def get_cache(self, name: str) -> Storage[str, str]: ...

    @overload
    def get_cache(self, name: str, value_type: type[_T]) -> Storage[str, _T]: ...

    def get_cache(self, name: str, value_type: Any = str) -> Storage[str, Any]:
        """Return the storage called ``name``, tagging its root type from ``value_type``."""
        return self._get_or_create_cache(name, value_type, root_type_of(value_type))

    def get_cache_with_data_format(self, name: str, value_type: type[_T], root_type: str) -> Storage[str, _T]:
        """Return the storage called ``name`` with an explicit root type tag."""
        return self._get_or_create_cache(name, value_type, root_type)

    def _get_or_create_cache(self, name: str, value_type: Any, root_type: str) -> Storage[str, Any]:
        if not isinstance(name, str) or not name:
            msg = "cache name must be a non-empty string"
            raise InvalidArgumentError(msg)
        with self._lock:
            if self._closed:
                msg = f"{self.__class__.__name__} is closed"
                raise StorageError(msg)
            cache = self._caches.get(name)
            if cache is None:
                cache = self._create_cache(name, value_type, root_type)
                self._caches[name] = cache
                logger.info("created cache '%s' with root type %s", name, root_type)
            return cache

    def cache_names(self) -> list[str]:
        with self._lock:
            return list(self._caches)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Drop every storage and release backend resources."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._caches.clear()
        self._release()
        logger.info("closed %s", self.__class__.__name__)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class InMemoryStorageService(StorageService):
    """Registry of dict-backed storages living in this process."""

    def _create_cache(self, name: str, value_type: Any, root_type: str) -> Storage[str, Any]:
        return InMemoryStorage(name, root_type)


class RemoteStorageService(StorageService):
    """Registry of storages persisted through one shared raw KV backend.

    The service owns the backend: ``close()`` closes it and then stops the
    event-loop thread used to drive it.
    """

    def __init__(self, backend: Backend, *, sep: str = ":") -> None:
        super().__init__()
        self._backend = backend
        self._sep = sep
        self._bridge = AsyncLoopBridge(name="kv-storage-remote")

    @property
    def backend(self) -> Backend:
        return self._backend

    def _create_cache(self, name: str, value_type: Any, root_type: str) -> Storage[str, Any]:
        return RemoteStorage(name, root_type, self._backend, self._bridge, JsonCodec(value_type), sep=self._sep)

    def _release(self) -> None:
        try:
            self._bridge.run(self._backend.close())
        finally:
            self._bridge.close()
