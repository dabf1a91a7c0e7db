"""Collection synchronization engine.

Flow for every action:
1) skip if a request of the same kind is in flight
2) emit the pre-request event (listeners may veto)
3) resolve the route and perform the transport call
4) reconcile the payload onto the records
5) emit ``<action>.success`` or ``<action>.failure``, then ``<action>.always``
"""

from __future__ import annotations

from .collection import Collection
from .events import EventBus, EventContext, Veto
from .matchers import ByAttributes, ByKey, ByPredicate, Matcher, to_matcher
from .options import Action, CollectionOptions
from .pagination import PaginationTracker
from .reconcile import ResponseError
from .requests import RequestCallbacks, RequestOutcome, RequestStatus
from .routes import RouteError, RouteResolver

__all__ = [
    "Action",
    "ByAttributes",
    "ByKey",
    "ByPredicate",
    "Collection",
    "CollectionOptions",
    "EventBus",
    "EventContext",
    "Matcher",
    "PaginationTracker",
    "RequestCallbacks",
    "RequestOutcome",
    "RequestStatus",
    "ResponseError",
    "RouteError",
    "RouteResolver",
    "Veto",
    "to_matcher",
]
