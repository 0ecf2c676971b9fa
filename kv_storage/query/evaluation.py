"""Evaluation of filter variants against a single record."""

from __future__ import annotations

import re
from collections.abc import Callable, Collection, Iterable, Iterator, Mapping
from functools import lru_cache
from typing import Any, assert_never

from kv_storage.errors import InvalidQueryError

from .attributes import is_absent, resolve_attribute
from .filters import (
    And,
    AttributeFilter,
    Between,
    Contains,
    ContainsAll,
    ContainsAny,
    Equal,
    Filter,
    GreaterThan,
    GreaterThanOrEqual,
    In,
    IsNull,
    LessThan,
    LessThanOrEqual,
    Like,
    NotNull,
    Or,
)


@lru_cache(maxsize=256)
def _like_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")), re.DOTALL)


def _compare(attribute: str, compare: Callable[[Any, Any], bool], left: Any, right: Any) -> bool:
    try:
        return compare(left, right)
    except TypeError as error:
        msg = f"cannot compare attribute '{attribute}' value {left!r} with {right!r}"
        raise InvalidQueryError(msg) from error


def _members(value: Any) -> Collection[Any] | None:
    if isinstance(value, (str, bytes)):
        return None
    if isinstance(value, Mapping):
        return list(value.values())
    if isinstance(value, Collection):
        return value
    return None


def _contains(value: Any, operand: Any) -> bool:
    if isinstance(value, str):
        return isinstance(operand, str) and operand in value
    members = _members(value)
    return members is not None and operand in members


_ValuePredicate = (
    Equal
    | Contains
    | ContainsAll
    | ContainsAny
    | Like
    | In
    | Between
    | GreaterThan
    | GreaterThanOrEqual
    | LessThan
    | LessThanOrEqual
)


def matches(query_filter: Filter, record: Any) -> bool:
    """Return True when ``record`` satisfies ``query_filter``.

    A missing or ``None`` attribute never satisfies a value predicate; only
    IS_NULL matches it.
    """
    match query_filter:
        case And(filters=filters):
            return all(matches(nested, record) for nested in filters)  # type: ignore[arg-type]
        case Or(filters=filters):
            return any(matches(nested, record) for nested in filters)  # type: ignore[arg-type]
        case IsNull(attribute=attribute):
            return is_absent(resolve_attribute(record, attribute))
        case NotNull(attribute=attribute):
            return not is_absent(resolve_attribute(record, attribute))
        case (
            Equal()
            | Contains()
            | ContainsAll()
            | ContainsAny()
            | Like()
            | In()
            | Between()
            | GreaterThan()
            | GreaterThanOrEqual()
            | LessThan()
            | LessThanOrEqual()
        ):
            value = resolve_attribute(record, query_filter.attribute)
            return not is_absent(value) and _matches_value(query_filter, value)
        case _:
            assert_never(query_filter)


def _matches_value(query_filter: _ValuePredicate, value: Any) -> bool:
    match query_filter:
        case Equal(operand=operand):
            return value == operand
        case Contains(operand=operand):
            return _contains(value, operand)
        case ContainsAll(operands=operands):
            members = _members(value)
            return members is not None and all(operand in members for operand in operands)
        case ContainsAny(operands=operands):
            members = _members(value)
            return members is not None and any(operand in members for operand in operands)
        case Like(operand=pattern):
            return isinstance(value, str) and _like_pattern(pattern).fullmatch(value) is not None
        case In(operands=operands):
            return value in operands
        case Between(attribute=attribute, low=low, high=high):
            return _compare(attribute, lambda v, bounds: bounds[0] <= v <= bounds[1], value, (low, high))
        case GreaterThan(attribute=attribute, operand=operand):
            return _compare(attribute, lambda v, o: v > o, value, operand)
        case GreaterThanOrEqual(attribute=attribute, operand=operand):
            return _compare(attribute, lambda v, o: v >= o, value, operand)
        case LessThan(attribute=attribute, operand=operand):
            return _compare(attribute, lambda v, o: v < o, value, operand)
        case LessThanOrEqual(attribute=attribute, operand=operand):
            return _compare(attribute, lambda v, o: v <= o, value, operand)
        case _:
            assert_never(query_filter)


def walk(filters: Iterable[AttributeFilter]) -> Iterator[AttributeFilter]:
    """Yield every filter in ``filters``, descending into AND/OR groups."""
    for query_filter in filters:
        yield query_filter
        if isinstance(query_filter, (And, Or)):
            yield from walk(query_filter.filters)
