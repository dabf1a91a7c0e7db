"""Collection configuration: record factory, routes and request shaping."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from modelsync.domain.model import Model

from .routes import DEFAULT_ROUTE_PARAMETER_PATTERN, RouteError, RouteResolver

if TYPE_CHECKING:
    from collections.abc import Mapping

    from modelsync.domain.model import ModelFactory

    from .routes import RouteResolverFunc


class Action(StrEnum):
    FETCH = "fetch"
    SAVE = "save"
    DELETE = "delete"


DEFAULT_METHODS: Mapping[str, str] = MappingProxyType(
    {
        Action.FETCH: "GET",
        Action.SAVE: "POST",
        Action.DELETE: "DELETE",
    }
)


def _default_methods() -> Mapping[str, str]:
    return dict(DEFAULT_METHODS)


@dataclass(frozen=True, slots=True)
class CollectionOptions:
    """Capabilities a collection is built with.

    ``route_resolver`` replaces the default ``{name}`` interpolation wholesale,
    for route systems that are not URL path templates.
    """

    model: ModelFactory = Model
    routes: Mapping[str, str] = field(default_factory=dict)
    methods: Mapping[str, str] = field(default_factory=_default_methods)
    route_parameter_pattern: str = DEFAULT_ROUTE_PARAMETER_PATTERN
    route_resolver: RouteResolverFunc | None = None
    route_parameters: Mapping[str, object] = field(default_factory=dict)
    use_delete_body: bool = False
    identifier_parameter: str = "id"
    page_parameter: str = "page"

    def resolver(self) -> RouteResolverFunc:
        if self.route_resolver is not None:
            return self.route_resolver
        return RouteResolver(self.route_parameter_pattern)

    def method_for(self, action: str) -> str:
        method = self.methods.get(action) or DEFAULT_METHODS.get(action)
        if method is None:
            raise RouteError(f"No request method configured for {action!r}")
        return method.upper()

    def route_for(self, action: str) -> str:
        route = self.routes.get(action)
        if route is None:
            raise RouteError(f"No route configured for {action!r}")
        return route
