"""Collection contract shared by every storage backend.

Mutation ordering and listener dispatch live here so that every backend
reproduces them identically; backends only supply the primitive hooks.

Listener contract
-----------------
``put(key, value)``
    The value is first converted to its stored form; a value the backend
    cannot store fails here and no listener runs. When ``key`` already
    holds a value, every updated listener is called with the *previous*
    value. Then every created listener is called with the new value,
    whether the put inserted or updated. Only then is the value written.
``remove(key)``
    When ``key`` is present, every removed listener is called with ``key``
    before the entry is deleted. Absent keys fire nothing.
``clear()``
    Fires no listener.

Listeners run synchronously, in registration order, on the mutating thread
while the collection lock is held. If a listener raises, the exception
propagates and the write is not performed.
"""

from __future__ import annotations

import logging
import threading
from abc import abstractmethod
from collections.abc import Callable, Iterator, MutableMapping
from typing import Any, ClassVar, Generic, TypeVar, overload, override

from kv_storage.errors import InvalidArgumentError
from kv_storage.query import ALL_CONDITIONS, FilterCondition, Query


_K = TypeVar("_K")
_V = TypeVar("_V")
_D = TypeVar("_D")

logger = logging.getLogger(__name__)


class Storage(MutableMapping[_K, _V], Generic[_K, _V]):
    """Named, typed key/value collection with change listeners and queries."""

    supported_conditions: ClassVar[frozenset[FilterCondition]] = ALL_CONDITIONS
    supports_sort: ClassVar[bool] = True

    def __init__(self, name: str, root_type: str) -> None:
        super().__init__()
        if not name:
            msg = "storage name must not be empty"
            raise InvalidArgumentError(msg)
        self._name = name
        self._root_type = root_type
        self._lock = threading.RLock()
        self._created_listeners: list[Callable[[_V], Any]] = []
        self._updated_listeners: list[Callable[[_V], Any]] = []
        self._removed_listeners: list[Callable[[_K], Any]] = []

    @abstractmethod
    def _load(self, key: _K) -> _V | None:
        """Return the stored value for key, or None when key does not exist."""

    def _prepare(self, value: _V) -> Any:
        """Return the form of value that ``_store`` writes.

        Runs before any listener, so a value that cannot be stored fails
        the put without notifying anyone.
        """
        return value

    @abstractmethod
    def _store(self, key: _K, value: Any) -> None:
        """Write the prepared value for key."""

    @abstractmethod
    def _discard(self, key: _K) -> None:
        """Delete key if present."""

    @abstractmethod
    def _purge(self) -> None:
        """Delete every entry of this collection."""

    @abstractmethod
    def _snapshot(self) -> list[tuple[_K, _V]]:
        """Return every (key, value) pair in a deterministic order."""

    @property
    def name(self) -> str:
        return self._name

    @property
    def root_type(self) -> str:
        return self._root_type

    def get_root_type(self) -> str:
        return self._root_type

    @overload
    def get(self, key: _K, default: None = None) -> _V | None: ...

    @overload
    def get(self, key: _K, default: _V | _D) -> _V | _D: ...

    @override
    def get(self, key: _K, default: Any = None) -> Any:
        """Return the value for key, or ``default`` when absent."""
        with self._lock:
            value = self._load(key)
        return default if value is None else value

    def contains_key(self, key: _K) -> bool:
        with self._lock:
            return self._load(key) is not None

    def put(self, key: _K, value: _V) -> _V | None:
        """Store value under key, notifying listeners first.

        Returns the previous value, or None when key was new.
        """
        if value is None:
            msg = f"cannot store None under key {key!r} in storage '{self._name}'"
            raise InvalidArgumentError(msg)
        with self._lock:
            previous = self._load(key)
            prepared = self._prepare(value)
            if previous is not None:
                for updated_listener in self._updated_listeners:
                    updated_listener(previous)
            for created_listener in self._created_listeners:
                created_listener(value)
            self._store(key, prepared)
        logger.debug("storage '%s': %s key %r", self._name, "updated" if previous is not None else "created", key)
        return previous

    def remove(self, key: _K) -> _V | None:
        """Remove key and return its value, or None when key was absent."""
        with self._lock:
            previous = self._load(key)
            if previous is None:
                return None
            for removed_listener in self._removed_listeners:
                removed_listener(key)
            self._discard(key)
        logger.debug("storage '%s': removed key %r", self._name, key)
        return previous

    @override
    def clear(self) -> None:
        """Remove every entry without notifying listeners."""
        with self._lock:
            self._purge()
        logger.debug("storage '%s': cleared", self._name)

    def entries(self) -> list[tuple[_K, _V]]:
        """Return a snapshot of every (key, value) pair."""
        with self._lock:
            return self._snapshot()

    def add_object_created_listener(self, listener: Callable[[_V], Any]) -> None:
        """Register a callback receiving the new value on every put."""
        with self._lock:
            self._created_listeners.append(listener)

    def add_object_updated_listener(self, listener: Callable[[_V], Any]) -> None:
        """Register a callback receiving the previous value when a put replaces one."""
        with self._lock:
            self._updated_listeners.append(listener)

    def add_object_removed_listener(self, listener: Callable[[_K], Any]) -> None:
        """Register a callback receiving the key of every removed entry."""
        with self._lock:
            self._removed_listeners.append(listener)

    def query(self) -> Query[_V]:
        """Return a new query bound to this collection's records."""
        return Query(
            self._query_source,
            supported_conditions=self.supported_conditions,
            supports_sort=self.supports_sort,
        )

    def _query_source(self) -> list[_V]:
        return [value for _key, value in self.entries()]

    @override
    def __getitem__(self, key: _K) -> _V:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    @override
    def __setitem__(self, key: _K, value: _V) -> None:
        _ = self.put(key, value)

    @override
    def __delitem__(self, key: _K) -> None:
        with self._lock:
            if self.remove(key) is None:
                raise KeyError(key)

    @override
    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)  # type: ignore[arg-type]

    @override
    def __iter__(self) -> Iterator[_K]:
        return iter([key for key, _value in self.entries()])

    @override
    def __len__(self) -> int:
        return len(self.entries())

    @override
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r}, root_type={self._root_type!r})"

    @override
    def __eq__(self, other: object) -> bool:
        return self is other

    __hash__ = object.__hash__
