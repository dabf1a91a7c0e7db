"""Ordered record container kept in sync with a remote resource collection."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping, Sequence
from logging import getLogger
from typing import TYPE_CHECKING, Any, overload

from modelsync.domain.model import Record, same_record
from modelsync.domain.ports.transport import ValidationFailedError

from . import reconcile
from .aggregation import RecordAggregates
from .events import EventBus, EventContext
from .matchers import matches, to_matcher
from .options import Action, CollectionOptions
from .pagination import PaginationTracker
from .requests import PreparedRequest, RequestCoordinator, RequestOutcome, RequestStatus

if TYPE_CHECKING:
    from modelsync.domain.model import Attributes
    from modelsync.domain.ports.transport import Transport, TransportResponse

    from .events import Listener
    from .matchers import MatcherInput
    from .requests import CallbacksInput

log = getLogger(__name__)

type AddInput = Record | Attributes | Sequence[Record | Attributes] | None
type RemoveInput = Record | MatcherInput | Sequence[Record | MatcherInput]


class Collection(RecordAggregates):
    """An ordered set of records with fetch, save and delete against a transport.

    Each action kind has its own in-flight flag (``loading``, ``saving``,
    ``deleting``). Mutations made while a request is pending apply immediately;
    save and delete reconcile against the records captured when the request was
    built, fetch against the records present when the response arrives.
    """

    def __init__(
        self,
        records: AddInput = None,
        *,
        options: CollectionOptions | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._records: list[Record] = []
        self._options = options or CollectionOptions()
        self._transport = transport
        self._bus = EventBus()
        self._requests = RequestCoordinator(bus=self._bus, target=self)
        self.pagination = PaginationTracker()
        if records is not None:
            self.add(records)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(records={len(self._records)}, page={self.current_page})"

    # configuration

    @property
    def options(self) -> CollectionOptions:
        return self._options

    def configure(self, **changes: Any) -> Collection:
        self._options = dataclasses.replace(self._options, **changes)
        return self

    @property
    def transport(self) -> Transport | None:
        return self._transport

    def set_transport(self, transport: Transport) -> Collection:
        self._transport = transport
        return self

    # state

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(self._records)

    @property
    def loading(self) -> bool:
        return self._requests.is_pending(Action.FETCH)

    @property
    def saving(self) -> bool:
        return self._requests.is_pending(Action.SAVE)

    @property
    def deleting(self) -> bool:
        return self._requests.is_pending(Action.DELETE)

    # events

    def on(self, names: str, listener: Listener) -> Collection:
        self._bus.on(names, listener)
        return self

    def off(self, names: str, listener: Listener | None = None) -> Collection:
        self._bus.off(names, listener)
        return self

    def emit(self, name: str, *, model: Record | None = None) -> None:
        self._bus.emit(EventContext(name=name, target=self, model=model))

    # mutation

    def build(self, attributes: Attributes | None = None) -> Record:
        return self._options.model(dict(attributes or {}))

    @overload
    def add(self, item: Sequence[Record | Attributes]) -> list[Record]: ...

    @overload
    def add(self, item: Record | Attributes | None = None) -> Record: ...

    def add(self, item: AddInput = None) -> Record | list[Record]:
        if _is_sequence(item):
            return [self._add_one(element) for element in item]
        return self._add_one(item)

    def _add_one(self, item: Record | Attributes | None) -> Record:
        if isinstance(item, Record):
            record = item
        elif item is None or isinstance(item, Mapping):
            record = self.build(item)
        else:
            raise TypeError(f"Cannot add {type(item).__name__} to a collection")

        existing = self._locate(record)
        if existing is not None:
            return existing

        self._records.append(record)
        record.attach(self)
        self.emit("add", model=record)
        return record

    @overload
    def remove(self, item: Record) -> Record | None: ...

    @overload
    def remove(self, item: MatcherInput | Sequence[Record | MatcherInput]) -> list[Record]: ...

    def remove(self, item: RemoveInput) -> Record | list[Record] | None:
        if isinstance(item, Record):
            return self._remove_record(item)
        if _is_sequence(item):
            removed: list[Record] = []
            for element in item:
                result = self.remove(element)
                if isinstance(result, list):
                    removed.extend(result)
                elif result is not None:
                    removed.append(result)
            return removed

        matcher = to_matcher(item)
        selected = [record for record in self._records if matches(matcher, record)]
        return [record for record in selected if self._remove_record(record) is not None]

    def _remove_record(self, record: Record) -> Record | None:
        existing = self._locate(record)
        if existing is None:
            return None
        # identity comparison; records do not define equality
        self._records = [current for current in self._records if current is not existing]
        existing.detach(self)
        self.emit("remove", model=existing)
        return existing

    def clear(self) -> Collection:
        """Drop every record without per-record remove events."""

        for record in self._records:
            record.detach(self)
        self._records = []
        self.emit("reset")
        return self

    @overload
    def replace(self, item: Sequence[Record | Attributes]) -> list[Record]: ...

    @overload
    def replace(self, item: Record | Attributes | None = None) -> Record: ...

    def replace(self, item: AddInput = None) -> Record | list[Record]:
        self.clear()
        return self.add(item)

    def _locate(self, record: Record) -> Record | None:
        return next((existing for existing in self._records if same_record(existing, record)), None)

    # pagination

    @property
    def current_page(self) -> int | None:
        return self.pagination.page

    def page(self, page: int | None) -> Collection:
        self.pagination.set_page(page)
        return self

    def is_paginated(self) -> bool:
        return self.pagination.enabled

    def is_last_page(self) -> bool:
        return self.pagination.exhausted

    # requests

    def route_parameters(self) -> dict[str, object]:
        parameters = dict(self._options.route_parameters)
        if self.pagination.enabled:
            parameters["page"] = self.pagination.page
        return parameters

    def url_for(self, action: Action | str) -> str:
        route = self._options.route_for(action)
        return self._options.resolver()(route, self.route_parameters())

    async def fetch(self, callbacks: CallbacksInput = None) -> RequestOutcome:
        if self.pagination.exhausted:
            log.debug("Ignoring fetch: last page already reached")
            return _skipped(Action.FETCH)

        def prepare() -> PreparedRequest:
            params = (
                {self._options.page_parameter: self.pagination.page}
                if self.pagination.enabled
                else None
            )
            return PreparedRequest(
                method=self._options.method_for(Action.FETCH),
                url=self.url_for(Action.FETCH),
                params=params,
                apply_success=lambda response: reconcile.apply_fetch(self, response.payload),
            )

        return await self._run(Action.FETCH, prepare, callbacks)

    async def save(self, callbacks: CallbacksInput = None) -> RequestOutcome:
        def prepare() -> PreparedRequest:
            snapshot = tuple(self._records)
            return PreparedRequest(
                method=self._options.method_for(Action.SAVE),
                url=self.url_for(Action.SAVE),
                body=reconcile.build_save_body(snapshot),
                apply_success=lambda response: reconcile.apply_save(snapshot, response.payload),
                apply_failure=lambda error, response: _apply_save_failure(
                    snapshot, error, response
                ),
            )

        return await self._run(Action.SAVE, prepare, callbacks)

    async def delete(
        self,
        callbacks: CallbacksInput = None,
        *,
        where: MatcherInput | None = None,
    ) -> RequestOutcome:
        matcher = to_matcher(where) if where is not None else None

        def prepare() -> PreparedRequest:
            targets = reconcile.delete_targets(self._records, matcher)
            identifiers = reconcile.collect_identifiers(targets)
            body: object = None
            params: dict[str, object] | None = None
            if self._options.use_delete_body:
                body = identifiers
            else:
                params = {self._options.identifier_parameter: identifiers}
            return PreparedRequest(
                method=self._options.method_for(Action.DELETE),
                url=self.url_for(Action.DELETE),
                body=body,
                params=params,
                apply_success=lambda _response: reconcile.apply_delete(self, targets),
            )

        return await self._run(Action.DELETE, prepare, callbacks)

    async def _run(
        self,
        action: Action,
        prepare: Callable[[], PreparedRequest],
        callbacks: CallbacksInput,
    ) -> RequestOutcome:
        return await self._requests.run(
            action,
            prepare=prepare,
            perform=self._perform,
            callbacks=callbacks,
        )

    async def _perform(self, request: PreparedRequest) -> TransportResponse:
        if self._transport is None:
            raise RuntimeError("Collection has no transport configured")
        return await self._transport.perform(
            request.method,
            request.url,
            body=request.body,
            params=request.params,
        )


def _apply_save_failure(
    snapshot: Sequence[Record],
    error: BaseException,
    response: TransportResponse | None,
) -> None:
    if isinstance(error, ValidationFailedError) and response is not None:
        reconcile.apply_validation_errors(snapshot, response.payload)


def _skipped(action: Action) -> RequestOutcome:
    return RequestOutcome(action=action, status=RequestStatus.SKIPPED)


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))

