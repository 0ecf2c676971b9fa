"""Raw key/value backend contract used by remote storages."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Backend(ABC):
    """Async backend storing text values under flat text keys.

    Prefix operations match keys with ``key.startswith(prefix)`` and return
    results sorted by key.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return raw value for key, or None when key does not exist."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store raw value for key, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete key if present."""

    @abstractmethod
    async def list_keys(self, prefix: str) -> list[str]:
        """List all keys beginning with prefix."""

    @abstractmethod
    async def items(self, prefix: str) -> list[tuple[str, str]]:
        """Return (key, value) pairs for all keys beginning with prefix."""

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Delete all keys beginning with prefix and return how many were removed."""

    @abstractmethod
    async def close(self) -> None:
        """Close any backend resources."""
