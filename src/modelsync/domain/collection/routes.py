"""Route templates and their resolution into request URLs."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Final

DEFAULT_ROUTE_PARAMETER_PATTERN: Final[str] = r"\{([^}]+)\}"

type RouteResolverFunc = Callable[[str, Mapping[str, object]], str]


class RouteError(LookupError):
    """Raised when a route is missing or cannot be interpolated."""


class RouteResolver:
    """Interpolate ``{name}`` placeholders from a parameter mapping."""

    def __init__(self, pattern: str | re.Pattern[str] = DEFAULT_ROUTE_PARAMETER_PATTERN) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        if self.pattern.groups < 1:
            raise ValueError("Route parameter pattern must capture the parameter name")

    def __call__(self, route: str, parameters: Mapping[str, object]) -> str:
        def substitute(found: re.Match[str]) -> str:
            name = found.group(1)
            if name not in parameters or parameters[name] is None:
                raise RouteError(f"Route {route!r} requires parameter {name!r}")
            return str(parameters[name])

        return self.pattern.sub(substitute, route)

    def parameter_names(self, route: str) -> list[str]:
        return [found.group(1) for found in self.pattern.finditer(route)]
