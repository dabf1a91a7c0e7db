"""In-flight guard, veto and event ordering shared by every action."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from modelsync.domain.collection import (
    Collection,
    CollectionOptions,
    RequestCallbacks,
    RequestStatus,
    RouteError,
    Veto,
)
from modelsync.domain.ports.transport import TransportError
from tests.support.events import listen
from tests.support.transport import FakeTransport, ok

if TYPE_CHECKING:
    from modelsync.domain.collection import EventContext, RequestOutcome
    from modelsync.domain.ports.transport import TransportResponse


def test_second_fetch_while_pending_is_ignored(
    collection: Collection, transport: FakeTransport
) -> None:
    transport.outcomes.append(ok([{"id": 1}]))
    events = listen(collection, "fetch, fetch.success, fetch.failure, fetch.always")

    async def scenario() -> tuple[RequestOutcome, RequestOutcome, bool]:
        transport.gate = asyncio.Event()
        first = asyncio.create_task(collection.fetch())
        await asyncio.sleep(0)
        loading_while_pending = collection.loading
        second = await collection.fetch()
        transport.gate.set()
        return await first, second, loading_while_pending

    first, second, loading_while_pending = asyncio.run(scenario())

    assert loading_while_pending
    assert first.status is RequestStatus.SUCCEEDED
    assert second.status is RequestStatus.SKIPPED
    assert len(transport.calls) == 1
    assert events.names == ["fetch", "fetch.success", "fetch.always"]
    assert not collection.loading


def test_different_actions_may_be_in_flight_together(
    collection: Collection, transport: FakeTransport
) -> None:
    collection.add({"id": 1})

    async def scenario() -> tuple[bool, bool, bool]:
        transport.gate = asyncio.Event()
        fetching = asyncio.create_task(collection.fetch())
        saving = asyncio.create_task(collection.save())
        await asyncio.sleep(0)
        flags = (collection.loading, collection.saving, collection.deleting)
        transport.gate.set()
        await asyncio.gather(fetching, saving)
        return flags

    assert asyncio.run(scenario()) == (True, True, False)
    assert [call.method for call in transport.calls] == ["GET", "POST"]
    assert not collection.loading
    assert not collection.saving


def test_veto_prevents_transport_call(collection: Collection, transport: FakeTransport) -> None:
    collection.add({"id": 1})
    events = listen(collection, "save, save.success, save.failure, save.always")
    collection.on("save", lambda _context: Veto.ABORT)

    outcome = asyncio.run(collection.save())

    assert outcome.status is RequestStatus.VETOED
    assert transport.calls == []
    assert not collection.saving
    assert events.names == ["save"]


def test_listener_returning_false_does_not_veto(
    collection: Collection, transport: FakeTransport
) -> None:
    collection.on("fetch", lambda _context: False)  # type: ignore[arg-type, return-value]

    outcome = asyncio.run(collection.fetch())

    assert outcome.succeeded
    assert len(transport.calls) == 1


def test_callbacks_run_before_matching_events(
    collection: Collection, transport: FakeTransport
) -> None:
    transport.outcomes.append(ok([]))
    order: list[str] = []

    def on_event(context: EventContext) -> None:
        order.append(f"event:{context.name}")

    collection.on("fetch.success, fetch.always", on_event)
    callbacks = RequestCallbacks(
        success=lambda _response: order.append("callback:success"),
        always=lambda _error, _response: order.append("callback:always"),
    )

    asyncio.run(collection.fetch(callbacks))

    assert order == [
        "callback:success",
        "event:fetch.success",
        "callback:always",
        "event:fetch.always",
    ]


def test_single_callable_is_treated_as_always_handler(
    collection: Collection, transport: FakeTransport
) -> None:
    failure = TransportError("boom")
    transport.outcomes.append(failure)
    seen: list[tuple[BaseException | None, TransportResponse | None]] = []

    outcome = asyncio.run(collection.fetch(lambda error, response: seen.append((error, response))))

    assert outcome.status is RequestStatus.FAILED
    assert seen == [(failure, None)]


def test_transport_failure_is_forwarded_verbatim(
    collection: Collection, transport: FakeTransport
) -> None:
    failure = TransportError("service unavailable", response=ok({"detail": "down"}, status=503))
    transport.outcomes.append(failure)
    events = listen(collection, "fetch.success, fetch.failure, fetch.always")
    failures: list[BaseException] = []

    outcome = asyncio.run(
        collection.fetch({"failure": lambda error, _response: failures.append(error)})
    )

    assert outcome.error is failure
    assert failures == [failure]
    assert events.names == ["fetch.failure", "fetch.always"]
    assert events.contexts[0].error is failure
    assert events.contexts[0].response is failure.response
    assert not collection.loading
    assert len(transport.calls) == 1


def test_failed_request_can_be_attempted_again(
    collection: Collection, transport: FakeTransport
) -> None:
    transport.outcomes.extend([TransportError("boom"), ok([{"id": 1}])])

    first = asyncio.run(collection.fetch())
    second = asyncio.run(collection.fetch())

    assert first.status is RequestStatus.FAILED
    assert second.succeeded
    assert collection.map("id") == [1]


def test_unknown_callback_names_are_rejected(collection: Collection) -> None:
    with pytest.raises(ValueError, match="Unknown request callbacks"):
        asyncio.run(collection.fetch({"done": lambda *_args: None}))
    assert not collection.loading


def test_missing_route_raises_and_clears_flag(transport: FakeTransport) -> None:
    collection = Collection(options=CollectionOptions(routes={}), transport=transport)

    with pytest.raises(RouteError):
        asyncio.run(collection.fetch())

    assert not collection.loading
    assert transport.calls == []


def test_listener_exceptions_propagate_and_clear_flag(collection: Collection) -> None:
    def explode(_context: EventContext) -> None:
        raise RuntimeError("listener failed")

    collection.on("delete", explode)

    with pytest.raises(RuntimeError, match="listener failed"):
        asyncio.run(collection.delete())

    assert not collection.deleting


def test_methods_option_overrides_verbs(transport: FakeTransport) -> None:
    collection = Collection(
        [{"id": 1}],
        options=CollectionOptions(
            routes={"save": "/tasks"},
            methods={"save": "put"},
        ),
        transport=transport,
    )

    asyncio.run(collection.save())

    assert transport.calls[0].method == "PUT"
