"""Declarative queries over collection records."""

from .attributes import MISSING, resolve_attribute
from .evaluation import matches
from .filters import (
    And,
    AttributeFilter,
    AttributeSort,
    Between,
    Contains,
    ContainsAll,
    ContainsAny,
    Equal,
    Filter,
    FilterCondition,
    GreaterThan,
    GreaterThanOrEqual,
    In,
    IsNull,
    LessThan,
    LessThanOrEqual,
    Like,
    NotNull,
    Or,
    SortDirection,
)
from .pipeline import ALL_CONDITIONS, Query


__all__ = [
    "ALL_CONDITIONS",
    "MISSING",
    "And",
    "AttributeFilter",
    "AttributeSort",
    "Between",
    "Contains",
    "ContainsAll",
    "ContainsAny",
    "Equal",
    "Filter",
    "FilterCondition",
    "GreaterThan",
    "GreaterThanOrEqual",
    "In",
    "IsNull",
    "LessThan",
    "LessThanOrEqual",
    "Like",
    "NotNull",
    "Or",
    "Query",
    "SortDirection",
    "matches",
    "resolve_attribute",
]
