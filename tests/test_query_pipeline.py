from typing import Any, ClassVar

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kv_storage.errors import InvalidQueryError, UnsupportedOperationError
from kv_storage.query import (
    And,
    AttributeSort,
    Between,
    Equal,
    FilterCondition,
    GreaterThan,
    IsNull,
    Like,
    Or,
    Query,
)
from kv_storage.storage import InMemoryStorage


_PEOPLE: list[dict[str, Any]] = [
    {"name": "ann", "age": 31, "team": "red"},
    {"name": "bob", "age": 25, "team": "blue"},
    {"name": "cid", "age": None, "team": "red"},
    {"name": "dee", "age": 25, "team": "red"},
    {"name": "eve", "team": "blue"},
]


class _EqualityOnlyStorage(InMemoryStorage[str, Any]):
    supported_conditions: ClassVar[frozenset[FilterCondition]] = frozenset({FilterCondition.EQUAL})
    supports_sort: ClassVar[bool] = False


@pytest.fixture
def people() -> InMemoryStorage[str, Any]:
    storage: InMemoryStorage[str, Any] = InMemoryStorage("people", "dict")
    for person in _PEOPLE:
        _ = storage.put(person["name"], person)
    return storage


def _names(records: list[dict[str, Any]]) -> list[str]:
    return [record["name"] for record in records]


def test_empty_query_returns_every_record(people: InMemoryStorage[str, Any]) -> None:
    assert _names(people.query().execute()) == ["ann", "bob", "cid", "dee", "eve"]


def test_filters_combine_as_logical_and(people: InMemoryStorage[str, Any]) -> None:
    result = people.query().filter([Equal("team", "red"), GreaterThan("age", 26)]).execute()
    assert _names(result) == ["ann"]


def test_filter_replaces_previous_filters(people: InMemoryStorage[str, Any]) -> None:
    query = people.query().filter([Equal("team", "red")]).filter([Equal("team", "blue")])
    assert _names(query.execute()) == ["bob", "eve"]

    assert _names(query.filter(None).execute()) == ["ann", "bob", "cid", "dee", "eve"]


def test_sort_ascending_puts_absent_values_last(people: InMemoryStorage[str, Any]) -> None:
    result = people.query().sort([AttributeSort.asc("age")]).execute()
    assert _names(result) == ["bob", "dee", "ann", "cid", "eve"]


def test_sort_descending_puts_absent_values_first(people: InMemoryStorage[str, Any]) -> None:
    result = people.query().sort([AttributeSort.desc("age")]).execute()
    assert _names(result) == ["cid", "eve", "ann", "bob", "dee"]


def test_sort_by_several_keys_gives_earlier_keys_priority(people: InMemoryStorage[str, Any]) -> None:
    result = people.query().sort([AttributeSort.asc("team"), AttributeSort.desc("name")]).execute()
    assert _names(result) == ["eve", "bob", "dee", "cid", "ann"]


def test_sort_on_incomparable_values_raises(people: InMemoryStorage[str, Any]) -> None:
    _ = people.put("odd", {"name": "odd", "age": "old"})
    with pytest.raises(InvalidQueryError, match="cannot sort by attribute 'age'"):
        _ = people.query().sort([AttributeSort.asc("age")]).execute()


def test_stages_run_filter_sort_offset_limit(people: InMemoryStorage[str, Any]) -> None:
    query = (
        people.query()
        .limit(2)
        .offset(1)
        .sort([AttributeSort.asc("name")])
        .filter([Or([Equal("team", "red"), Like("name", "b*")])])
    )
    assert _names(query.execute()) == ["bob", "cid"]


def test_offset_beyond_result_is_empty(people: InMemoryStorage[str, Any]) -> None:
    assert people.query().offset(10).execute() == []
    assert people.query().offset(5).execute() == []


def test_limit_zero_and_limit_beyond_result(people: InMemoryStorage[str, Any]) -> None:
    assert people.query().limit(0).execute() == []
    assert len(people.query().limit(50).execute()) == 5


def test_offset_and_limit_can_be_reset(people: InMemoryStorage[str, Any]) -> None:
    query = people.query().offset(3).limit(1)
    assert _names(query.execute()) == ["dee"]
    assert len(query.offset(None).limit(None).execute()) == 5


@pytest.mark.parametrize("bound", [-1, 1.5, "2", True])
def test_invalid_bounds_are_rejected(people: InMemoryStorage[str, Any], bound: Any) -> None:
    with pytest.raises(InvalidQueryError):
        _ = people.query().offset(bound)
    with pytest.raises(InvalidQueryError):
        _ = people.query().limit(bound)


def test_non_filter_and_non_sort_arguments_are_rejected(people: InMemoryStorage[str, Any]) -> None:
    with pytest.raises(InvalidQueryError, match="expected an AttributeFilter"):
        _ = people.query().filter([{"team": "red"}])  # type: ignore[list-item]
    with pytest.raises(InvalidQueryError, match="expected an AttributeSort"):
        _ = people.query().sort(["age"])  # type: ignore[list-item]


def test_query_reads_the_collection_at_execution_time(people: InMemoryStorage[str, Any]) -> None:
    query = people.query().filter([Equal("team", "green")])
    assert query.execute() == []

    _ = people.put("fay", {"name": "fay", "team": "green"})
    assert _names(query.execute()) == ["fay"]


def test_execute_is_deterministic(people: InMemoryStorage[str, Any]) -> None:
    query = people.query().filter([IsNull("age")]).sort([AttributeSort.asc("name")])
    assert query.execute() == query.execute()
    assert _names(query.execute()) == ["cid", "eve"]


def test_unsupported_condition_is_reported_before_reading() -> None:
    reads: list[int] = []

    def source() -> list[dict[str, Any]]:
        reads.append(1)
        return []

    query = Query(source, supported_conditions=frozenset({FilterCondition.EQUAL}), supports_sort=False)
    with pytest.raises(UnsupportedOperationError, match="unsupported query feature: between") as excinfo:
        _ = query.filter([Between("age", 1, 2)]).execute()
    assert excinfo.value.feature == "between"
    assert reads == []


def test_restricted_storage_rejects_nested_conditions_and_sort() -> None:
    storage = _EqualityOnlyStorage("people", "dict")
    _ = storage.put("ann", {"name": "ann", "age": 31})

    assert _names(storage.query().filter([Equal("name", "ann")]).execute()) == ["ann"]

    with pytest.raises(UnsupportedOperationError, match="unsupported query feature: and"):
        _ = storage.query().filter([And([Equal("name", "ann")])]).execute()
    with pytest.raises(UnsupportedOperationError, match="unsupported query feature: greaterThan"):
        _ = storage.query().filter([Equal("name", "ann"), GreaterThan("age", 3)]).execute()
    with pytest.raises(UnsupportedOperationError, match="unsupported query feature: sort"):
        _ = storage.query().sort([AttributeSort.asc("age")]).execute()


def test_unsupported_operation_is_not_implemented_error() -> None:
    assert issubclass(UnsupportedOperationError, NotImplementedError)


@given(
    values=st.lists(st.integers(min_value=-100, max_value=100), max_size=20),
    offset=st.integers(min_value=0, max_value=25),
    limit=st.integers(min_value=0, max_value=25),
)
def test_offset_and_limit_slice_the_sorted_result(values: list[int], offset: int, limit: int) -> None:
    records = [{"n": value} for value in values]
    query = Query(lambda: list(records)).sort([AttributeSort.asc("n")]).offset(offset).limit(limit)

    expected = sorted(records, key=lambda record: record["n"])[offset : offset + limit]
    assert query.execute() == expected
