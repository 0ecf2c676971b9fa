"""Attribute path resolution over stored records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final


class _Missing:
    """Marker for an attribute path that does not resolve."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def resolve_attribute(record: Any, attribute: str) -> Any:
    """Return the value at a dotted ``attribute`` path inside ``record``.

    Mappings are navigated by key, any other object by attribute name.
    Returns ``MISSING`` when some step of the path does not exist.
    """
    current = record
    for part in attribute.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return MISSING
            current = current[part]
        elif part.startswith("_"):
            return MISSING
        else:
            current = getattr(current, part, MISSING)
            if current is MISSING:
                return MISSING
    return current


def is_absent(value: Any) -> bool:
    """True for values that IS_NULL treats as null."""
    return value is MISSING or value is None
