"""Add/remove/replace semantics of the ordered container."""

from __future__ import annotations

import gc

import pytest

from modelsync.domain.collection import ByPredicate, Collection, CollectionOptions
from modelsync.domain.model import Model
from tests.support.events import listen


class Task(Model):
    pass


def test_add_without_input_builds_one_empty_record() -> None:
    collection = Collection(options=CollectionOptions(model=Task))

    record = collection.add()

    assert isinstance(record, Task)
    assert record.attributes == {}
    assert collection.records == (record,)


def test_add_mirrors_input_plurality() -> None:
    collection = Collection()

    single = collection.add({"id": 1})
    many = collection.add([{"id": 2}, Model({"id": 3})])

    assert isinstance(single, Model)
    assert isinstance(many, list)
    assert [record.identifier for record in many] == [2, 3]
    assert [record.identifier for record in collection] == [1, 2, 3]


def test_add_skips_duplicates_by_reference_and_identifier() -> None:
    collection = Collection()
    first = collection.add({"id": 1, "name": "first"})
    transient = collection.add({"name": "no id"})
    events = listen(collection, "add")

    again = collection.add([first, {"id": 1, "name": "copy"}, transient, {"id": 2}])

    assert again[0] is first
    assert again[1] is first
    assert again[2] is transient
    assert len(collection) == 3
    assert [context.model for context in events.contexts] == [again[3]]


def test_transient_records_are_only_deduplicated_by_reference() -> None:
    collection = Collection()

    collection.add([{"name": "a"}, {"name": "a"}])

    assert len(collection) == 2


def test_add_sets_owner_and_emits_add_event_per_record() -> None:
    collection = Collection()
    events = listen(collection, "add")

    records = collection.add([{"id": 1}, {"id": 2}])

    assert [record.owner for record in records] == [collection, collection]
    assert [context.model for context in events.contexts] == records
    assert all(context.target is collection for context in events.contexts)


def test_add_rejects_unsupported_input() -> None:
    collection = Collection()

    with pytest.raises(TypeError):
        collection.add(42)  # type: ignore[arg-type]


def test_remove_direct_record_returns_record_or_none() -> None:
    collection = Collection([{"id": 1}, {"id": 2}])
    first = collection.first()
    assert first is not None

    assert collection.remove(first) is first
    assert collection.remove(first) is None
    assert first.owner is None
    assert [record.identifier for record in collection] == [2]


def test_remove_by_attributes_and_predicate_returns_lists() -> None:
    collection = Collection(
        [
            {"id": 1, "done": True},
            {"id": 2, "done": False},
            {"id": 3, "done": True},
        ]
    )
    events = listen(collection, "remove")

    removed = collection.remove({"done": True})
    nothing = collection.remove(lambda record: record.get("id") == 99)

    assert [record.identifier for record in removed] == [1, 3]
    assert nothing == []
    assert [record.identifier for record in collection] == [2]
    assert [context.model for context in events.contexts] == removed


def test_remove_matching_none_leaves_records_unchanged() -> None:
    collection = Collection([{"id": 1}, {"id": 2}])
    before = collection.records

    assert collection.remove(ByPredicate(lambda _record: False)) == []
    assert collection.records == before


def test_remove_sequence_recurses_elementwise() -> None:
    collection = Collection([{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4}])
    third = collection.get(3)
    assert third is not None

    removed = collection.remove([third, {"id": 1}, {"id": 42}])

    assert [record.identifier for record in removed] == [3, 1]
    assert [record.identifier for record in collection] == [2, 4]


def test_replace_drops_previous_records_without_remove_events() -> None:
    collection = Collection([{"id": 1}, {"id": 2}])
    old = collection.records
    events = listen(collection, "add, remove, reset")

    replaced = collection.replace([{"id": 3}, {"id": 4}])

    fresh = Collection()
    expected = fresh.add([{"id": 3}, {"id": 4}])
    assert [record.attributes for record in collection] == [r.attributes for r in expected]
    assert collection.records == tuple(replaced)
    assert all(record.owner is None for record in old)
    assert events.names == ["reset", "add", "add"]


def test_record_moved_to_another_collection_keeps_new_owner() -> None:
    first = Collection()
    second = Collection()
    record = first.add({"id": 1})

    second.add(record)
    first.remove(record)

    assert record.owner is second
    assert second.has(record)


def test_mark_deleted_asks_owner_to_remove_record() -> None:
    collection = Collection([{"id": 1}, {"id": 2}])
    record = collection.get(1)
    assert isinstance(record, Model)
    events = listen(collection, "remove")

    record.mark_deleted()

    assert not collection.has(record)
    assert [context.model for context in events.contexts] == [record]


def test_owner_reference_does_not_keep_collection_alive() -> None:
    collection = Collection()
    record = collection.add({"id": 1})

    del collection
    gc.collect()

    assert record.owner is None
    record.mark_deleted()
