"""Read-only helpers over a collection's ordered records."""

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from modelsync.domain.model import Record, same_record

from .matchers import ByAttributes, matches, to_matcher

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from .matchers import MatcherInput

type KeyInput = str | Callable[[Record], Any]


def _key_function(key: KeyInput) -> Callable[[Record], Any]:
    if isinstance(key, str):
        return lambda record: record.get(key)
    return key


class RecordAggregates(ABC):
    """Mixin providing sequence helpers on top of ``records``.

    ``shift`` and ``pop`` are the only helpers that change state; they go through
    ``remove`` so ownership and events stay consistent.
    """

    @property
    @abstractmethod
    def records(self) -> Sequence[Record]: ...

    @abstractmethod
    def remove(self, item: Any) -> Any: ...

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(tuple(self.records))

    def __bool__(self) -> bool:
        return True

    def is_empty(self) -> bool:
        return not self.records

    def first(self) -> Record | None:
        return self.records[0] if self.records else None

    def last(self) -> Record | None:
        return self.records[-1] if self.records else None

    def find(self, where: MatcherInput) -> Record | None:
        matcher = to_matcher(where)
        return next((record for record in self.records if matches(matcher, record)), None)

    def filter(self, where: MatcherInput) -> list[Record]:
        matcher = to_matcher(where)
        return [record for record in self.records if matches(matcher, record)]

    def where(self, attributes: Mapping[str, object]) -> list[Record]:
        return self.filter(ByAttributes(dict(attributes)))

    def contains(self, record: Record) -> bool:
        return any(same_record(existing, record) for existing in self.records)

    def has(self, item: Record | MatcherInput) -> bool:
        if isinstance(item, Record):
            return self.contains(item)
        return self.find(item) is not None

    def index_of(self, item: Record | MatcherInput) -> int:
        """Return the position of ``item`` or -1 when absent."""

        if isinstance(item, Record):
            return next(
                (index for index, record in enumerate(self.records) if same_record(record, item)),
                -1,
            )
        matcher = to_matcher(item)
        return next(
            (index for index, record in enumerate(self.records) if matches(matcher, record)),
            -1,
        )

    def get(self, identifier: object) -> Record | None:
        if identifier is None:
            return None
        return next(
            (record for record in self.records if record.identifier == identifier),
            None,
        )

    def count(self, where: MatcherInput | None = None) -> int:
        if where is None:
            return len(self.records)
        return len(self.filter(where))

    def map(self, key: KeyInput) -> list[Any]:
        func = _key_function(key)
        return [func(record) for record in self.records]

    def sum(self, key: KeyInput) -> Any:
        func = _key_function(key)
        return sum((func(record) or 0 for record in self.records), 0)

    def reduce[T](self, func: Callable[[T, Record], T], initial: T) -> T:
        return functools.reduce(func, self.records, initial)

    def each(self, func: Callable[[Record, int], object]) -> None:
        for index, record in enumerate(tuple(self.records)):
            func(record, index)

    def sort(self, key: KeyInput, *, reverse: bool = False) -> list[Record]:
        """Return a sorted copy; the collection order is never changed."""

        return sorted(self.records, key=_key_function(key), reverse=reverse)

    def shift(self) -> Record | None:
        record = self.first()
        if record is not None:
            self.remove(record)
        return record

    def pop(self) -> Record | None:
        record = self.last()
        if record is not None:
            self.remove(record)
        return record
