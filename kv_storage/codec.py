"""JSON encoding of typed records for text backends."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import PydanticSchemaGenerationError, TypeAdapter

from kv_storage.errors import SerializationError


_T = TypeVar("_T")


STRING_ROOT_TYPE = "string"


def root_type_of(value_type: Any) -> str:
    """Return the root type tag for ``value_type``.

    ``str`` maps to ``"string"``, builtins to their bare name and every other
    type to ``"<module>.<qualname>"``.
    """
    if value_type is str:
        return STRING_ROOT_TYPE
    module = getattr(value_type, "__module__", None)
    qualname = getattr(value_type, "__qualname__", None)
    if qualname is None:
        return repr(value_type)
    if module in (None, "builtins"):
        return qualname
    return f"{module}.{qualname}"


class JsonCodec(Generic[_T]):
    """Encode records of ``value_type`` to JSON text and back.

    Uses a pydantic ``TypeAdapter`` so plain JSON types, dataclasses,
    ``TypedDict`` and pydantic models all round-trip.
    """

    def __init__(self, value_type: type[_T] | Any = str) -> None:
        super().__init__()
        self.value_type = value_type
        try:
            self._adapter: TypeAdapter[_T] = TypeAdapter(value_type)
        except PydanticSchemaGenerationError as error:
            msg = f"cannot build a JSON codec for {root_type_of(value_type)}"
            raise SerializationError(msg) from error

    def encode(self, value: _T) -> str:
        try:
            return self._adapter.dump_json(value, warnings="error").decode()
        except ValueError as error:
            msg = f"cannot encode {type(value).__name__} as {root_type_of(self.value_type)}"
            raise SerializationError(msg) from error

    def decode(self, raw: str) -> _T:
        try:
            return self._adapter.validate_json(raw)
        except ValueError as error:
            msg = f"stored value is not a valid {root_type_of(self.value_type)}"
            raise SerializationError(msg) from error
