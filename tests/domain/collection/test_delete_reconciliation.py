from __future__ import annotations

import asyncio

from modelsync.domain.collection import Collection, CollectionOptions, RequestStatus
from modelsync.domain.ports.transport import TransportError
from tests.support.events import listen
from tests.support.transport import ROUTES, FakeTransport, ok


def test_delete_sends_identifiers_as_query_by_default(
    collection: Collection, transport: FakeTransport
) -> None:
    collection.add([{"id": 1}, {"id": 2}])

    asyncio.run(collection.delete())

    call = transport.calls[0]
    assert call.method == "DELETE"
    assert call.url == "/tasks"
    assert call.params == {"id": [1, 2]}
    assert call.body is None


def test_delete_body_option_sends_identifiers_as_body(transport: FakeTransport) -> None:
    collection = Collection(
        [{"id": 1}, {"id": 2}],
        options=CollectionOptions(routes=ROUTES, use_delete_body=True),
        transport=transport,
    )

    asyncio.run(collection.delete())

    call = transport.calls[0]
    assert call.body == [1, 2]
    assert call.params is None


def test_successful_delete_removes_each_target_once(
    collection: Collection, transport: FakeTransport
) -> None:
    targets = collection.add([{"id": 1}, {"id": 2}])
    transient = collection.add({"name": "not saved yet"})
    events = listen(collection, "remove")
    transport.outcomes.append(ok({"deleted": 0}))

    outcome = asyncio.run(collection.delete())

    assert outcome.succeeded
    assert collection.records == (transient,)
    assert [context.model for context in events.contexts] == targets
    assert all(record.owner is None for record in targets)


def test_delete_where_narrows_targets(collection: Collection, transport: FakeTransport) -> None:
    collection.add([{"id": 1, "done": True}, {"id": 2, "done": False}])

    asyncio.run(collection.delete(where={"done": True}))

    assert transport.calls[0].params == {"id": [1]}
    assert collection.map("id") == [2]


def test_failed_delete_keeps_records(collection: Collection, transport: FakeTransport) -> None:
    collection.add([{"id": 1}, {"id": 2}])
    transport.outcomes.append(TransportError("forbidden", response=ok(None, status=403)))

    outcome = asyncio.run(collection.delete())

    assert outcome.status is RequestStatus.FAILED
    assert collection.map("id") == [1, 2]
    assert not collection.deleting


def test_records_removed_while_pending_are_not_removed_twice(
    collection: Collection, transport: FakeTransport
) -> None:
    first, _second = collection.add([{"id": 1}, {"id": 2}])
    events = listen(collection, "remove")

    async def scenario() -> None:
        transport.gate = asyncio.Event()
        deleting = asyncio.create_task(collection.delete())
        await asyncio.sleep(0)
        collection.remove(first)
        transport.gate.set()
        await deleting

    asyncio.run(scenario())

    assert len(collection) == 0
    assert len(events.contexts) == 2
