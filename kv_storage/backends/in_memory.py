"""In-memory async backend."""

from __future__ import annotations

import asyncio
from typing import override

from .protocol import Backend


class InMemoryAsyncBackend(Backend):
    """Dict-backed backend for local development and tests."""

    def __init__(self) -> None:
        super().__init__()
        self._store: dict[str, str] = {}
        self._lock = asyncio.Lock()

    @override
    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._store.get(key)

    @override
    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._store[key] = value

    @override
    async def delete(self, key: str) -> None:
        async with self._lock:
            _ = self._store.pop(key, None)

    @override
    async def list_keys(self, prefix: str) -> list[str]:
        async with self._lock:
            return sorted(key for key in self._store if key.startswith(prefix))

    @override
    async def items(self, prefix: str) -> list[tuple[str, str]]:
        async with self._lock:
            return sorted((key, value) for key, value in self._store.items() if key.startswith(prefix))

    @override
    async def delete_prefix(self, prefix: str) -> int:
        async with self._lock:
            doomed = [key for key in self._store if key.startswith(prefix)]
            for key in doomed:
                del self._store[key]
        return len(doomed)

    @override
    async def close(self) -> None:
        return
