"""NATS JetStream KV backend implementation."""

from __future__ import annotations

import logging
from typing import Any, override


try:
    import nats as nats_module
except ImportError:  # pragma: no cover - exercised when dependency is absent
    nats_module = None

from kv_storage.errors import BackendError

from .protocol import Backend


logger = logging.getLogger(__name__)

_NOT_FOUND_ERROR_NAMES = {"BucketNotFoundError", "KeyDeletedError", "KeyNotFoundError", "NoKeysError"}


def _is_not_found_error(error: Exception) -> bool:
    return error.__class__.__name__ in _NOT_FOUND_ERROR_NAMES


def _decode(value: bytes | str | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode()
    return value


class NatsBackend(Backend):
    """NATS JetStream KV backend.

    The backend uses an existing KV bucket by default.
    Set ``create_bucket=True`` to allow creating it when missing.
    JetStream keys cannot contain ``:``; pair this backend with a ``.`` or
    ``/`` key separator.
    """

    def __init__(
        self,
        url: str = "nats://nats:4222",
        bucket: str = "kv_storage",
        *,
        client: Any | None = None,
        create_bucket: bool = False,
    ) -> None:
        """Create a backend using a NATS URL or injected client.

        Parameters
        ----------
        url
            NATS server URL used when ``client`` is not provided.
        bucket
            JetStream KV bucket name.
        client
            Optional injected connected NATS client with ``jetstream`` API.
        create_bucket
            When True, creates bucket if missing. Defaults to False.
        """
        super().__init__()
        self._url = url
        self._bucket_name = bucket
        self._client = client
        self._create_bucket = create_bucket
        self._kv: Any | None = None

    @property
    def bucket(self) -> str:
        return self._bucket_name

    async def _ensure_kv(self) -> Any:
        if self._kv is not None:
            return self._kv

        if self._client is None:
            if nats_module is None:
                msg = "nats-py dependency is required for NatsBackend; install with `pip install nats-py`"
                raise BackendError(msg)
            self._client = await nats_module.connect(servers=[self._url])

        jetstream = self._client.jetstream()

        try:
            self._kv = await jetstream.key_value(self._bucket_name)
        except Exception as error:
            if _is_not_found_error(error) and self._create_bucket:
                self._kv = await jetstream.create_key_value(bucket=self._bucket_name)
                logger.info("created jetstream KV bucket %s", self._bucket_name)
            else:
                msg = (
                    f"jetstream KV bucket '{self._bucket_name}' is not available; "
                    "create it first or initialize with create_bucket=True"
                )
                raise BackendError(msg) from error

        return self._kv

    @override
    async def get(self, key: str) -> str | None:
        """Return raw value for key, or None when key does not exist."""
        kv = await self._ensure_kv()
        try:
            entry = await kv.get(key)
        except Exception as error:
            if _is_not_found_error(error):
                return None
            raise
        return _decode(entry.value)

    @override
    async def set(self, key: str, value: str) -> None:
        """Store raw value for key."""
        kv = await self._ensure_kv()
        await kv.put(key, value.encode())

    @override
    async def delete(self, key: str) -> None:
        """Delete key if present."""
        kv = await self._ensure_kv()
        await kv.delete(key)

    @override
    async def list_keys(self, prefix: str) -> list[str]:
        """List all keys beginning with prefix in sorted order."""
        kv = await self._ensure_kv()
        try:
            keys = await kv.keys()
        except Exception as error:
            if _is_not_found_error(error):
                return []
            raise

        if not keys:
            return []
        return sorted(key for key in keys if key.startswith(prefix))

    @override
    async def items(self, prefix: str) -> list[tuple[str, str]]:
        """Return (key, value) pairs under prefix, skipping keys deleted mid-read."""
        pairs: list[tuple[str, str]] = []
        for key in await self.list_keys(prefix):
            value = await self.get(key)
            if value is not None:
                pairs.append((key, value))
        return pairs

    @override
    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key under prefix."""
        keys = await self.list_keys(prefix)
        for key in keys:
            await self.delete(key)
        return len(keys)

    @override
    async def close(self) -> None:
        """Close NATS client resources."""
        if self._client is None:
            return
        await self._client.close()
