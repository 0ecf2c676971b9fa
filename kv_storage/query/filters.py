"""Declarative filter and sort descriptors consumed by the query pipeline.

Each filter condition is its own frozen dataclass carrying the operand shape
the condition needs: a single value, a low/high pair, a list of values, no
operand at all, or a list of nested filters.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from kv_storage.errors import InvalidArgumentError


class FilterCondition(Enum):
    """Closed set of filter condition kinds, valued by their wire label."""

    CONTAINS = "contains"
    CONTAINS_ALL = "containsAll"
    CONTAINS_ANY = "containsAny"
    LIKE = "like"
    EQUAL = "equal"
    IN = "in"
    IS_NULL = "isNull"
    NOT_NULL = "notNull"
    BETWEEN = "between"
    GT = "greaterThan"
    GTE = "greaterThanEqual"
    LT = "lessThan"
    LTE = "lessThanEqual"
    OR = "or"
    AND = "and"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: str) -> FilterCondition:
        """Look a condition up by label or by member name."""
        for condition in cls:
            if label in (condition.value, condition.name):
                return condition
        msg = f"unknown filter condition: {label}"
        raise InvalidArgumentError(msg)


def _check_attribute(attribute: object) -> str:
    if not isinstance(attribute, str) or not attribute:
        msg = "filter attribute must be a non-empty string"
        raise InvalidArgumentError(msg)
    return attribute


def _as_operand_tuple(values: object, condition: FilterCondition) -> tuple[Any, ...]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        msg = f"{condition.label} filter requires a list of values"
        raise InvalidArgumentError(msg)
    return tuple(values)


@dataclass(frozen=True)
class AttributeFilter:
    """Base class of every filter variant."""

    condition: ClassVar[FilterCondition]

    @property
    def value(self) -> Any:
        """Operand in its raw form: a value, a list, a pair or nested filters."""
        return None

    @staticmethod
    def of(condition: FilterCondition | str, attribute: str | None = None, value: Any = None) -> Filter:
        """Build the filter variant for ``condition`` from a raw operand.

        Raises
        ------
        InvalidArgumentError
            When the operand does not have the shape the condition requires.
        """
        if isinstance(condition, str):
            condition = FilterCondition.from_label(condition)

        if condition in _COMPOSITE_FILTERS:
            return _COMPOSITE_FILTERS[condition](value)

        attribute = _check_attribute(attribute)
        if condition in _VALUE_FILTERS:
            return _VALUE_FILTERS[condition](attribute, value)
        if condition in _LIST_FILTERS:
            return _LIST_FILTERS[condition](attribute, value)
        if condition in _PRESENCE_FILTERS:
            return _PRESENCE_FILTERS[condition](attribute)

        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:  # noqa: PLR2004
            msg = "between filter requires a [low, high] pair"
            raise InvalidArgumentError(msg)
        return Between(attribute, value[0], value[1])


@dataclass(frozen=True)
class _ValueFilter(AttributeFilter):
    attribute: str
    operand: Any

    def __post_init__(self) -> None:
        _check_attribute(self.attribute)

    @property
    def value(self) -> Any:
        return self.operand


class Equal(_ValueFilter):
    """Attribute equals the operand."""

    condition = FilterCondition.EQUAL


class Contains(_ValueFilter):
    """String attribute contains the operand, or collection attribute holds it."""

    condition = FilterCondition.CONTAINS


class Like(_ValueFilter):
    """String attribute matches a pattern where ``*`` stands for any run of characters."""

    condition = FilterCondition.LIKE

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.operand, str):
            msg = "like filter requires a string pattern"
            raise InvalidArgumentError(msg)


class GreaterThan(_ValueFilter):
    condition = FilterCondition.GT


class GreaterThanOrEqual(_ValueFilter):
    condition = FilterCondition.GTE


class LessThan(_ValueFilter):
    condition = FilterCondition.LT


class LessThanOrEqual(_ValueFilter):
    condition = FilterCondition.LTE


@dataclass(frozen=True)
class _ListFilter(AttributeFilter):
    attribute: str
    operands: tuple[Any, ...]

    def __post_init__(self) -> None:
        _check_attribute(self.attribute)
        object.__setattr__(self, "operands", _as_operand_tuple(self.operands, self.condition))

    @property
    def value(self) -> list[Any]:
        return list(self.operands)


class In(_ListFilter):
    """Attribute is one of the operands."""

    condition = FilterCondition.IN


class ContainsAll(_ListFilter):
    """Collection attribute holds every operand."""

    condition = FilterCondition.CONTAINS_ALL


class ContainsAny(_ListFilter):
    """Collection attribute holds at least one operand."""

    condition = FilterCondition.CONTAINS_ANY


@dataclass(frozen=True)
class _PresenceFilter(AttributeFilter):
    attribute: str

    def __post_init__(self) -> None:
        _check_attribute(self.attribute)


class IsNull(_PresenceFilter):
    """Attribute is missing or ``None``."""

    condition = FilterCondition.IS_NULL


class NotNull(_PresenceFilter):
    """Attribute is present and not ``None``."""

    condition = FilterCondition.NOT_NULL


@dataclass(frozen=True)
class Between(AttributeFilter):
    """Attribute lies within the inclusive range ``[low, high]``."""

    attribute: str
    low: Any
    high: Any

    condition = FilterCondition.BETWEEN

    def __post_init__(self) -> None:
        _check_attribute(self.attribute)

    @property
    def value(self) -> list[Any]:
        return [self.low, self.high]


@dataclass(frozen=True)
class _CompositeFilter(AttributeFilter):
    filters: tuple[AttributeFilter, ...] = field(default=())

    def __post_init__(self) -> None:
        filters = _as_operand_tuple(self.filters, self.condition)
        if not all(isinstance(item, AttributeFilter) for item in filters):
            msg = f"{self.condition.label} filter requires a list of filters"
            raise InvalidArgumentError(msg)
        object.__setattr__(self, "filters", filters)

    @property
    def value(self) -> list[AttributeFilter]:
        return list(self.filters)


class And(_CompositeFilter):
    """Every nested filter matches."""

    condition = FilterCondition.AND


class Or(_CompositeFilter):
    """At least one nested filter matches."""

    condition = FilterCondition.OR


Filter = (
    Equal
    | Contains
    | ContainsAll
    | ContainsAny
    | Like
    | In
    | IsNull
    | NotNull
    | Between
    | GreaterThan
    | GreaterThanOrEqual
    | LessThan
    | LessThanOrEqual
    | And
    | Or
)

_VALUE_FILTERS: dict[FilterCondition, type[_ValueFilter]] = {
    FilterCondition.EQUAL: Equal,
    FilterCondition.CONTAINS: Contains,
    FilterCondition.LIKE: Like,
    FilterCondition.GT: GreaterThan,
    FilterCondition.GTE: GreaterThanOrEqual,
    FilterCondition.LT: LessThan,
    FilterCondition.LTE: LessThanOrEqual,
}
_LIST_FILTERS: dict[FilterCondition, type[_ListFilter]] = {
    FilterCondition.IN: In,
    FilterCondition.CONTAINS_ALL: ContainsAll,
    FilterCondition.CONTAINS_ANY: ContainsAny,
}
_PRESENCE_FILTERS: dict[FilterCondition, type[_PresenceFilter]] = {
    FilterCondition.IS_NULL: IsNull,
    FilterCondition.NOT_NULL: NotNull,
}
_COMPOSITE_FILTERS: dict[FilterCondition, type[_CompositeFilter]] = {
    FilterCondition.AND: And,
    FilterCondition.OR: Or,
}


class SortDirection(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class AttributeSort:
    """Ordering key: one attribute and a direction."""

    attribute: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        if not isinstance(self.attribute, str) or not self.attribute:
            msg = "sort attribute must be a non-empty string"
            raise InvalidArgumentError(msg)

    @classmethod
    def asc(cls, attribute: str) -> AttributeSort:
        return cls(attribute, SortDirection.ASC)

    @classmethod
    def desc(cls, attribute: str) -> AttributeSort:
        return cls(attribute, SortDirection.DESC)
