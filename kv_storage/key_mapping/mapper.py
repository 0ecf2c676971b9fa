"""Mapping between collection record keys and flat backend keys."""

from __future__ import annotations

from kv_storage.errors import InvalidArgumentError


class KeyMapper:
    """Map record keys of one collection to ``<namespace><sep><key>`` backend keys."""

    def __init__(self, namespace: str, sep: str = ":") -> None:
        super().__init__()
        if not namespace:
            msg = "namespace must not be empty"
            raise InvalidArgumentError(msg)
        if not sep:
            msg = "sep must not be empty"
            raise InvalidArgumentError(msg)
        if sep in namespace:
            msg = f"namespace must not contain separator {sep!r}: {namespace}"
            raise InvalidArgumentError(msg)

        self.namespace = namespace
        self.sep = sep
        self.prefix = f"{namespace}{sep}"

    def full_key(self, key: str) -> str:
        """Build the backend key for a record key."""
        if not isinstance(key, str) or not key:
            msg = f"record keys must be non-empty strings, got {key!r}"
            raise InvalidArgumentError(msg)
        if self.sep in key:
            msg = f"record key must not contain separator {self.sep!r}: {key}"
            raise InvalidArgumentError(msg)
        return self.prefix + key

    def matches(self, backend_key: str) -> bool:
        """Return True when a backend key holds a record of this namespace."""
        if not backend_key.startswith(self.prefix):
            return False
        relative = backend_key.removeprefix(self.prefix)
        return bool(relative) and self.sep not in relative

    def record_key(self, backend_key: str) -> str:
        """Recover the record key from a backend key."""
        if not self.matches(backend_key):
            msg = f"key does not belong to namespace '{self.namespace}': {backend_key}"
            raise InvalidArgumentError(msg)
        return backend_key.removeprefix(self.prefix)
