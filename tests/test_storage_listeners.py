from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kv_storage.errors import InvalidArgumentError
from kv_storage.storage import InMemoryStorage


class _Recorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def attach(self, storage: InMemoryStorage[str, Any]) -> None:
        storage.add_object_created_listener(lambda value: self.events.append(("created", value)))
        storage.add_object_updated_listener(lambda value: self.events.append(("updated", value)))
        storage.add_object_removed_listener(lambda key: self.events.append(("removed", key)))


@pytest.fixture
def storage() -> InMemoryStorage[str, Any]:
    return InMemoryStorage("orders", "string")


@pytest.fixture
def recorder(storage: InMemoryStorage[str, Any]) -> _Recorder:
    events = _Recorder()
    events.attach(storage)
    return events


def test_put_new_key_fires_only_created(storage: InMemoryStorage[str, Any], recorder: _Recorder) -> None:
    assert storage.put("o1", "v1") is None
    assert recorder.events == [("created", "v1")]
    assert storage.get("o1") == "v1"


def test_put_existing_key_fires_updated_with_previous_then_created(
    storage: InMemoryStorage[str, Any], recorder: _Recorder
) -> None:
    _ = storage.put("o1", "v1")
    recorder.events.clear()

    assert storage.put("o1", "v2") == "v1"
    assert recorder.events == [("updated", "v1"), ("created", "v2")]
    assert storage.get("o1") == "v2"


def test_listeners_observe_state_before_the_write(storage: InMemoryStorage[str, Any]) -> None:
    seen: list[object] = []
    storage.add_object_created_listener(lambda _value: seen.append(storage.get("o1")))

    _ = storage.put("o1", "v1")
    _ = storage.put("o1", "v2")
    assert seen == [None, "v1"]


def test_listeners_run_in_registration_order(storage: InMemoryStorage[str, Any]) -> None:
    calls: list[int] = []
    storage.add_object_created_listener(lambda _value: calls.append(1))
    storage.add_object_created_listener(lambda _value: calls.append(2))

    _ = storage.put("o1", "v1")
    assert calls == [1, 2]


def test_remove_present_key_fires_removed(storage: InMemoryStorage[str, Any], recorder: _Recorder) -> None:
    _ = storage.put("o1", "v1")
    recorder.events.clear()

    assert storage.remove("o1") == "v1"
    assert recorder.events == [("removed", "o1")]
    assert not storage.contains_key("o1")


def test_value_rejected_while_preparing_fires_no_listener(recorder: _Recorder) -> None:
    class _PositiveOnlyStorage(InMemoryStorage[str, int]):
        def _prepare(self, value: int) -> int:
            if value <= 0:
                msg = "value must be positive"
                raise InvalidArgumentError(msg)
            return value

    storage = _PositiveOnlyStorage("numbers", "int")
    recorder.attach(storage)

    with pytest.raises(InvalidArgumentError, match="value must be positive"):
        _ = storage.put("n", -1)
    assert recorder.events == []
    assert not storage.contains_key("n")


def test_remove_absent_key_fires_nothing(storage: InMemoryStorage[str, Any], recorder: _Recorder) -> None:
    assert storage.remove("missing") is None
    assert recorder.events == []


def test_clear_is_silent(storage: InMemoryStorage[str, Any], recorder: _Recorder) -> None:
    _ = storage.put("o1", "v1")
    _ = storage.put("o2", "v2")
    recorder.events.clear()

    storage.clear()
    assert recorder.events == []
    assert len(storage) == 0
    assert not storage.contains_key("o1")


def test_failing_listener_prevents_the_write(storage: InMemoryStorage[str, Any]) -> None:
    def reject(_value: object) -> None:
        msg = "rejected"
        raise RuntimeError(msg)

    storage.add_object_created_listener(reject)
    with pytest.raises(RuntimeError, match="rejected"):
        _ = storage.put("o1", "v1")
    assert not storage.contains_key("o1")


def test_put_rejects_none(storage: InMemoryStorage[str, Any], recorder: _Recorder) -> None:
    with pytest.raises(InvalidArgumentError, match="cannot store None"):
        _ = storage.put("o1", None)
    assert recorder.events == []


def test_get_default_and_mapping_protocol(storage: InMemoryStorage[str, Any]) -> None:
    assert storage.get("missing") is None
    assert storage.get("missing", "fallback") == "fallback"

    storage["o1"] = "v1"
    storage["o2"] = "v2"
    assert storage["o1"] == "v1"
    assert "o1" in storage
    assert list(storage) == ["o1", "o2"]
    assert len(storage) == 2
    assert storage.entries() == [("o1", "v1"), ("o2", "v2")]

    del storage["o1"]
    assert "o1" not in storage

    with pytest.raises(KeyError):
        _ = storage["o1"]
    with pytest.raises(KeyError):
        del storage["o1"]


def test_setitem_and_delitem_fire_listeners(storage: InMemoryStorage[str, Any], recorder: _Recorder) -> None:
    storage["o1"] = "v1"
    del storage["o1"]
    assert recorder.events == [("created", "v1"), ("removed", "o1")]


def test_name_root_type_and_identity(storage: InMemoryStorage[str, Any]) -> None:
    assert storage.name == "orders"
    assert storage.root_type == "string"
    assert storage.get_root_type() == "string"
    assert repr(storage) == "InMemoryStorage(name='orders', root_type='string')"

    twin = InMemoryStorage("orders", "string")
    assert storage == storage  # noqa: PLR0124
    assert storage != twin
    assert len({storage, twin}) == 2


def test_empty_name_is_rejected() -> None:
    with pytest.raises(InvalidArgumentError, match="storage name must not be empty"):
        _ = InMemoryStorage("", "string")


_OPS = st.lists(
    st.tuples(st.sampled_from(["put", "remove"]), st.sampled_from(["a", "b", "c"]), st.integers()),
    max_size=30,
)


@given(ops=_OPS)
def test_contains_key_tracks_net_effect_of_mutations(ops: list[tuple[str, str, int]]) -> None:
    storage: InMemoryStorage[str, int] = InMemoryStorage("numbers", "int")
    expected: dict[str, int] = {}
    for op, key, value in ops:
        if op == "put":
            assert storage.put(key, value) == expected.get(key)
            expected[key] = value
        else:
            assert storage.remove(key) == expected.pop(key, None)

    for key in ("a", "b", "c"):
        assert storage.contains_key(key) == (key in expected)
        assert storage.get(key) == expected.get(key)


@given(ops=_OPS)
def test_listener_counts_match_mutations(ops: list[tuple[str, str, int]]) -> None:
    storage: InMemoryStorage[str, int] = InMemoryStorage("numbers", "int")
    counts = {"created": 0, "updated": 0, "removed": 0}
    storage.add_object_created_listener(lambda _value: counts.__setitem__("created", counts["created"] + 1))
    storage.add_object_updated_listener(lambda _value: counts.__setitem__("updated", counts["updated"] + 1))
    storage.add_object_removed_listener(lambda _key: counts.__setitem__("removed", counts["removed"] + 1))

    present: set[str] = set()
    expected = {"created": 0, "updated": 0, "removed": 0}
    for op, key, value in ops:
        if op == "put":
            expected["created"] += 1
            if key in present:
                expected["updated"] += 1
            present.add(key)
            _ = storage.put(key, value)
        else:
            if key in present:
                expected["removed"] += 1
            present.discard(key)
            _ = storage.remove(key)

    assert counts == expected
