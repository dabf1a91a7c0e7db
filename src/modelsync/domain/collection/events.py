"""Synchronous publish/subscribe scoped to a single collection."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modelsync.domain.model import Record
    from modelsync.domain.ports.transport import TransportResponse

log = getLogger(__name__)


class Veto(Enum):
    """Answer a listener gives to a pre-request event."""

    PROCEED = "proceed"
    ABORT = "abort"


@dataclass(frozen=True, slots=True)
class EventContext:
    name: str
    target: object
    model: Record | None = None
    error: BaseException | None = None
    response: TransportResponse | None = None


type Listener = Callable[[EventContext], Veto | None]


def split_event_names(names: str) -> list[str]:
    parsed = [name.strip() for name in names.split(",")]
    return [name for name in parsed if name]


class EventBus:
    """Registry of listeners keyed by event name.

    Listeners run in registration order. Exceptions raised by a listener are not
    caught here; they propagate to whoever triggered the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, names: str, listener: Listener) -> None:
        event_names = split_event_names(names)
        if not event_names:
            raise ValueError("At least one event name is required")
        for name in event_names:
            self._listeners.setdefault(name, []).append(listener)

    def off(self, names: str, listener: Listener | None = None) -> None:
        for name in split_event_names(names):
            if listener is None:
                self._listeners.pop(name, None)
                continue
            registered = self._listeners.get(name, [])
            if listener in registered:
                registered.remove(listener)

    def listeners(self, name: str) -> tuple[Listener, ...]:
        return tuple(self._listeners.get(name, ()))

    def emit(self, context: EventContext) -> None:
        for listener in self.listeners(context.name):
            listener(context)

    def emit_vetoable(self, context: EventContext) -> bool:
        """Emit a pre-request event; return False if any listener aborted.

        Every listener runs even after an abort so that all observers see the
        attempted request.
        """

        proceed = True
        for listener in self.listeners(context.name):
            if listener(context) is Veto.ABORT:
                proceed = False
        if not proceed:
            log.debug("Listener vetoed %s request", context.name)
        return proceed
