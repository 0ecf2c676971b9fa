"""Filter, sort, offset and limit pipeline over a collection's records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Generic, Self, TypeVar

from kv_storage.errors import InvalidQueryError, UnsupportedOperationError

from .attributes import is_absent, resolve_attribute
from .evaluation import matches, walk
from .filters import AttributeFilter, AttributeSort, FilterCondition, SortDirection


if TYPE_CHECKING:
    from .filters import Filter


_T = TypeVar("_T")

logger = logging.getLogger(__name__)

ALL_CONDITIONS: frozenset[FilterCondition] = frozenset(FilterCondition)


def _check_bound(name: str, value: int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer, got {value!r}"
        raise InvalidQueryError(msg)
    if value < 0:
        msg = f"{name} must not be negative, got {value}"
        raise InvalidQueryError(msg)
    return value


def _sort_key(attribute: str) -> Callable[[Any], tuple[int, Any]]:
    def key(record: Any) -> tuple[int, Any]:
        value = resolve_attribute(record, attribute)
        if is_absent(value):
            return (1, 0)
        return (0, value)

    return key


class Query(Generic[_T]):
    """Query over the records of one collection.

    The record source is read each time :meth:`execute` runs, so results
    reflect the collection at that moment. Stages always run in the order
    filter, sort, offset, limit.

    An offset larger than the number of matching records yields an empty
    result rather than an error.
    """

    def __init__(
        self,
        source: Callable[[], list[_T]],
        *,
        supported_conditions: frozenset[FilterCondition] = ALL_CONDITIONS,
        supports_sort: bool = True,
    ) -> None:
        super().__init__()
        self._source = source
        self._supported_conditions = supported_conditions
        self._supports_sort = supports_sort
        self._filters: list[AttributeFilter] = []
        self._sort_by: list[AttributeSort] = []
        self._offset: int | None = None
        self._limit: int | None = None

    def filter(self, filters: Iterable[AttributeFilter] | None) -> Self:
        """Replace the filter list; all filters must match (logical AND)."""
        filters = list(filters or [])
        for query_filter in filters:
            if not isinstance(query_filter, AttributeFilter):
                msg = f"expected an AttributeFilter, got {query_filter!r}"
                raise InvalidQueryError(msg)
        self._filters = filters
        return self

    def sort(self, sort_by: Iterable[AttributeSort] | None) -> Self:
        """Replace the sort list; earlier entries take priority."""
        sort_by = list(sort_by or [])
        for attribute_sort in sort_by:
            if not isinstance(attribute_sort, AttributeSort):
                msg = f"expected an AttributeSort, got {attribute_sort!r}"
                raise InvalidQueryError(msg)
        self._sort_by = sort_by
        return self

    def offset(self, offset: int | None) -> Self:
        self._offset = _check_bound("offset", offset)
        return self

    def limit(self, limit: int | None) -> Self:
        self._limit = _check_bound("limit", limit)
        return self

    def execute(self) -> list[_T]:
        """Run the pipeline and return the matching records.

        Raises
        ------
        UnsupportedOperationError
            When a configured filter condition or sort is not implemented
            by the collection this query is bound to. Raised before any
            record is read.
        InvalidQueryError
            When attribute values cannot be compared.
        """
        self._check_supported()
        records = self._source()
        records = self._apply_filters(records)
        records = self._apply_sort(records)
        records = self._apply_offset(records)
        records = self._apply_limit(records)
        logger.debug(
            "query returned %d records (filters=%d, sort=%d, offset=%s, limit=%s)",
            len(records),
            len(self._filters),
            len(self._sort_by),
            self._offset,
            self._limit,
        )
        return records

    def _check_supported(self) -> None:
        for query_filter in walk(self._filters):
            if query_filter.condition not in self._supported_conditions:
                raise UnsupportedOperationError(query_filter.condition.label)
        if self._sort_by and not self._supports_sort:
            raise UnsupportedOperationError("sort")

    def _apply_filters(self, records: list[_T]) -> list[_T]:
        if not self._filters:
            return records
        filters: list[Filter] = self._filters  # type: ignore[assignment]
        return [record for record in records if all(matches(query_filter, record) for query_filter in filters)]

    def _apply_sort(self, records: list[_T]) -> list[_T]:
        if not self._sort_by:
            return records
        ordered = list(records)
        for attribute_sort in reversed(self._sort_by):
            try:
                ordered.sort(
                    key=_sort_key(attribute_sort.attribute),
                    reverse=attribute_sort.direction is SortDirection.DESC,
                )
            except TypeError as error:
                msg = f"cannot sort by attribute '{attribute_sort.attribute}': values are not comparable"
                raise InvalidQueryError(msg) from error
        return ordered

    def _apply_offset(self, records: list[_T]) -> list[_T]:
        if self._offset is None:
            return records
        return records[self._offset :]

    def _apply_limit(self, records: list[_T]) -> list[_T]:
        if self._limit is None:
            return records
        return records[: self._limit]
