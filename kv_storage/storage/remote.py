"""Storage persisted through a raw async key/value backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar, override

from kv_storage.codec import JsonCodec
from kv_storage.key_mapping import KeyMapper

from .protocol import Storage


if TYPE_CHECKING:
    from kv_storage.backends import Backend

    from .bridge import AsyncLoopBridge


_V = TypeVar("_V")


class RemoteStorage(Storage[str, _V]):
    """Collection whose records live as JSON text at ``<name><sep><key>``.

    Every backend call goes through ``bridge``, which the owning service
    shares between all of its storages. Records are decoded on every read,
    so queries run against fresh copies of the stored values.
    """

    def __init__(
        self,
        name: str,
        root_type: str,
        backend: Backend,
        bridge: AsyncLoopBridge,
        codec: JsonCodec[_V],
        *,
        sep: str = ":",
    ) -> None:
        super().__init__(name, root_type)
        self._backend = backend
        self._bridge = bridge
        self._codec = codec
        self._mapper = KeyMapper(namespace=name, sep=sep)

    @override
    def _load(self, key: str) -> _V | None:
        raw_value = self._bridge.run(self._backend.get(self._mapper.full_key(key)))
        if raw_value is None:
            return None
        return self._codec.decode(raw_value)

    @override
    def _prepare(self, value: _V) -> str:
        return self._codec.encode(value)

    @override
    def _store(self, key: str, value: str) -> None:
        self._bridge.run(self._backend.set(self._mapper.full_key(key), value))

    @override
    def _discard(self, key: str) -> None:
        self._bridge.run(self._backend.delete(self._mapper.full_key(key)))

    @override
    def _purge(self) -> None:
        _ = self._bridge.run(self._backend.delete_prefix(self._mapper.prefix))

    @override
    def _snapshot(self) -> list[tuple[str, _V]]:
        rows = self._bridge.run(self._backend.items(self._mapper.prefix))
        return [
            (self._mapper.record_key(backend_key), self._codec.decode(raw_value))
            for backend_key, raw_value in rows
            if self._mapper.matches(backend_key)
        ]
