"""Explicit matcher kinds used to select records."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modelsync.domain.model import Record


@dataclass(frozen=True, slots=True)
class ByAttributes:
    """Every listed attribute must equal the record's value."""

    attributes: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class ByPredicate:
    predicate: Callable[[Record], object]


@dataclass(frozen=True, slots=True)
class ByKey:
    """The named attribute must be truthy."""

    key: str


type Matcher = ByAttributes | ByPredicate | ByKey
type MatcherInput = Matcher | Mapping[str, object] | Callable[[Record], object] | str

_MISSING = object()


def to_matcher(value: MatcherInput) -> Matcher:
    if isinstance(value, ByAttributes | ByPredicate | ByKey):
        return value
    if isinstance(value, Mapping):
        return ByAttributes(dict(value))
    if isinstance(value, str):
        return ByKey(value)
    if callable(value):
        return ByPredicate(value)
    raise TypeError(f"Cannot build a matcher from {type(value).__name__}")


def matches(matcher: Matcher, record: Record) -> bool:
    if isinstance(matcher, ByAttributes):
        return all(
            record.get(name, _MISSING) == value for name, value in matcher.attributes.items()
        )
    if isinstance(matcher, ByPredicate):
        return bool(matcher.predicate(record))
    return bool(record.get(matcher.key))
