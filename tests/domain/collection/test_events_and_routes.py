from __future__ import annotations

import pytest

from modelsync.domain.collection import (
    ByAttributes,
    ByKey,
    ByPredicate,
    EventBus,
    EventContext,
    RouteError,
    RouteResolver,
    Veto,
    to_matcher,
)
from modelsync.domain.collection.matchers import matches
from modelsync.domain.model import Model
from tests.support.events import EventLog


def test_on_registers_listener_for_each_comma_separated_name() -> None:
    bus = EventBus()
    log = EventLog()

    bus.on("add,  remove ,reset", log)
    for name in ("add", "remove", "reset", "other"):
        bus.emit(EventContext(name=name, target=bus))

    assert log.names == ["add", "remove", "reset"]


def test_on_requires_a_name() -> None:
    with pytest.raises(ValueError, match="event name"):
        EventBus().on(" , ", EventLog())


def test_off_removes_single_listener_or_all() -> None:
    bus = EventBus()
    kept = EventLog()
    dropped = EventLog()
    bus.on("add", kept)
    bus.on("add", dropped)

    bus.off("add", dropped)
    bus.emit(EventContext(name="add", target=bus))
    bus.off("add")
    bus.emit(EventContext(name="add", target=bus))

    assert kept.names == ["add"]
    assert dropped.names == []


def test_vetoable_emit_runs_every_listener() -> None:
    bus = EventBus()
    log = EventLog()
    bus.on("save", lambda _context: Veto.ABORT)
    bus.on("save", lambda _context: Veto.PROCEED)
    bus.on("save", log)

    assert bus.emit_vetoable(EventContext(name="save", target=bus)) is False
    assert log.names == ["save"]


def test_to_matcher_resolves_each_kind() -> None:
    def predicate(record: object) -> bool:
        return record is not None

    assert to_matcher({"a": 1}) == ByAttributes({"a": 1})
    assert to_matcher("done") == ByKey("done")
    assert to_matcher(predicate) == ByPredicate(predicate)
    assert to_matcher(ByKey("x")) == ByKey("x")
    with pytest.raises(TypeError):
        to_matcher(3)  # type: ignore[arg-type]


def test_attribute_matcher_distinguishes_missing_from_none() -> None:
    record = Model({"id": 1, "parent": None})

    assert matches(ByAttributes({"parent": None}), record)
    assert not matches(ByAttributes({"owner": None}), record)


def test_route_resolver_interpolates_parameters() -> None:
    resolver = RouteResolver()

    url = resolver("/projects/{project}/tasks/{task}", {"project": 7, "task": "a b"})

    assert url == "/projects/7/tasks/a b"
    assert resolver.parameter_names("/x/{one}/{two}") == ["one", "two"]


def test_route_resolver_reports_missing_parameter() -> None:
    with pytest.raises(RouteError, match="project"):
        RouteResolver()("/projects/{project}", {})


def test_route_resolver_accepts_custom_pattern() -> None:
    resolver = RouteResolver(r":(\w+)")

    assert resolver("/projects/:project", {"project": 3}) == "/projects/3"


def test_route_resolver_requires_capture_group() -> None:
    with pytest.raises(ValueError, match="capture"):
        RouteResolver(r"\{\w+\}")
