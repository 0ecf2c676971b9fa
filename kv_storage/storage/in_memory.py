"""In-process storage backed by a plain dict."""

from __future__ import annotations

from typing import Any, TypeVar, override

from .protocol import Storage


_K = TypeVar("_K")
_V = TypeVar("_V")


class InMemoryStorage(Storage[_K, _V]):
    """Dict-backed collection; iteration follows insertion order."""

    def __init__(self, name: str, root_type: str) -> None:
        super().__init__(name, root_type)
        self._data: dict[_K, _V] = {}

    @override
    def _load(self, key: _K) -> _V | None:
        return self._data.get(key)

    @override
    def _store(self, key: _K, value: Any) -> None:
        self._data[key] = value

    @override
    def _discard(self, key: _K) -> None:
        _ = self._data.pop(key, None)

    @override
    def _purge(self) -> None:
        self._data.clear()

    @override
    def _snapshot(self) -> list[tuple[_K, _V]]:
        return list(self._data.items())
