"""Per-action request lifecycle: in-flight guard, veto, transport call, dispatch."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from modelsync.domain.ports.transport import TransportError

from .events import EventContext
from .reconcile import ResponseError

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from modelsync.domain.ports.transport import TransportResponse

    from .events import EventBus
    from .options import Action

log = getLogger(__name__)

type SuccessCallback = Callable[[TransportResponse], object]
type FailureCallback = Callable[[BaseException, TransportResponse | None], object]
type AlwaysCallback = Callable[[BaseException | None, TransportResponse | None], object]


@dataclass(frozen=True, slots=True)
class RequestCallbacks:
    success: SuccessCallback | None = None
    failure: FailureCallback | None = None
    always: AlwaysCallback | None = None

    @classmethod
    def coerce(cls, value: CallbacksInput) -> RequestCallbacks:
        """Accept a callbacks object, a mapping of them, or a lone *always* callable."""

        if value is None:
            return cls()
        if isinstance(value, RequestCallbacks):
            return value
        if isinstance(value, Mapping):
            unknown = set(value) - {"success", "failure", "always"}
            if unknown:
                raise ValueError(f"Unknown request callbacks: {', '.join(sorted(unknown))}")
            return cls(
                success=value.get("success"),
                failure=value.get("failure"),
                always=value.get("always"),
            )
        if callable(value):
            return cls(always=value)
        raise TypeError(f"Unsupported callbacks value: {type(value).__name__}")


type CallbacksInput = (
    RequestCallbacks | Mapping[str, Callable[..., object]] | Callable[..., object] | None
)


class RequestStatus(StrEnum):
    SKIPPED = "skipped"
    VETOED = "vetoed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RequestOutcome:
    action: Action
    status: RequestStatus
    response: TransportResponse | None = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is RequestStatus.SUCCEEDED

    @property
    def attempted(self) -> bool:
        return self.status in {RequestStatus.SUCCEEDED, RequestStatus.FAILED}


@dataclass(slots=True)
class PreparedRequest:
    """A request built after the veto point, plus how to apply its outcome."""

    method: str
    url: str
    apply_success: Callable[[TransportResponse], None]
    apply_failure: Callable[[BaseException, TransportResponse | None], None] | None = None
    body: object = None
    params: Mapping[str, object] | None = None


type Perform = Callable[[PreparedRequest], Awaitable[TransportResponse]]


@dataclass(slots=True)
class RequestCoordinator:
    """Guards each action kind so that at most one request of it is in flight."""

    bus: EventBus
    target: object
    _in_flight: set[Action] = field(default_factory=set)

    def is_pending(self, action: Action) -> bool:
        return action in self._in_flight

    async def run(
        self,
        action: Action,
        *,
        prepare: Callable[[], PreparedRequest],
        perform: Perform,
        callbacks: CallbacksInput = None,
    ) -> RequestOutcome:
        if action in self._in_flight:
            log.debug("Ignoring %s: a request of this kind is already in flight", action)
            return RequestOutcome(action=action, status=RequestStatus.SKIPPED)

        handlers = RequestCallbacks.coerce(callbacks)
        self._in_flight.add(action)
        try:
            proceed = self.bus.emit_vetoable(EventContext(name=action, target=self.target))
            if not proceed:
                return RequestOutcome(action=action, status=RequestStatus.VETOED)

            request = prepare()
            log.debug("Issuing %s request: %s %s", action, request.method, request.url)
            try:
                response = await perform(request)
            except TransportError as error:
                return self._fail(action, request, handlers, error, error.response)

            try:
                request.apply_success(response)
            except ResponseError as error:
                return self._fail(action, request, handlers, error, response)

            if handlers.success is not None:
                handlers.success(response)
            self.bus.emit(
                EventContext(name=f"{action}.success", target=self.target, response=response)
            )
            self._always(action, handlers, None, response)
            return RequestOutcome(action=action, status=RequestStatus.SUCCEEDED, response=response)
        finally:
            self._in_flight.discard(action)

    def _fail(
        self,
        action: Action,
        request: PreparedRequest,
        handlers: RequestCallbacks,
        error: BaseException,
        response: TransportResponse | None,
    ) -> RequestOutcome:
        if request.apply_failure is not None:
            try:
                request.apply_failure(error, response)
            except ResponseError as reconcile_error:
                reconcile_error.__cause__ = error
                error = reconcile_error

        log.error("%s request to %s failed: %s", action, request.url, error)
        if handlers.failure is not None:
            handlers.failure(error, response)
        self.bus.emit(
            EventContext(
                name=f"{action}.failure",
                target=self.target,
                error=error,
                response=response,
            )
        )
        self._always(action, handlers, error, response)
        return RequestOutcome(
            action=action,
            status=RequestStatus.FAILED,
            response=response,
            error=error,
        )

    def _always(
        self,
        action: Action,
        handlers: RequestCallbacks,
        error: BaseException | None,
        response: TransportResponse | None,
    ) -> None:
        if handlers.always is not None:
            handlers.always(error, response)
        self.bus.emit(
            EventContext(
                name=f"{action}.always",
                target=self.target,
                error=error,
                response=response,
            )
        )
