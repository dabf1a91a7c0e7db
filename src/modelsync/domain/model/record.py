"""
Record building blocks:
the record contract the collection relies on, and a dict-backed default model.
"""

from __future__ import annotations

import weakref
from collections.abc import Callable, Mapping, Sequence
from typing import ClassVar, Protocol, runtime_checkable

type Identifier = int | str
type Attributes = Mapping[str, object]
type ErrorMap = Mapping[str, Sequence[str]]


class RecordOwner(Protocol):
    """Handle a record uses to ask its collection to drop it."""

    def remove(self, item: object) -> object: ...


@runtime_checkable
class Record(Protocol):
    """Structural contract for anything a collection can hold."""

    @property
    def identifier(self) -> Identifier | None: ...

    @property
    def attributes(self) -> Attributes: ...

    @property
    def errors(self) -> ErrorMap: ...

    @property
    def owner(self) -> RecordOwner | None: ...

    def get(self, name: str, default: object = None) -> object: ...

    def assign(self, attributes: Attributes) -> None: ...

    def save_body(self) -> object: ...

    def set_errors(self, errors: ErrorMap) -> None: ...

    def clear_errors(self) -> None: ...

    def attach(self, owner: RecordOwner) -> None: ...

    def detach(self, owner: RecordOwner) -> None: ...


type ModelFactory = Callable[[Attributes], Record]


def same_record(left: Record, right: Record) -> bool:
    """Identity by reference, or by identifier when both sides have one."""

    if left is right:
        return True
    left_id = left.identifier
    right_id = right.identifier
    return left_id is not None and right_id is not None and left_id == right_id


class Model:
    """Attribute-map record with a revocable reference to its owning collection."""

    id_attribute: ClassVar[str] = "id"

    def __init__(self, attributes: Attributes | None = None) -> None:
        self._attributes: dict[str, object] = dict(attributes or {})
        self._errors: dict[str, list[str]] = {}
        self._owner: weakref.ReferenceType[RecordOwner] | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"

    def __getitem__(self, name: str) -> object:
        return self._attributes[name]

    def __setitem__(self, name: str, value: object) -> None:
        self._attributes[name] = value

    @property
    def identifier(self) -> Identifier | None:
        value = self._attributes.get(self.id_attribute)
        if isinstance(value, (int, str)) and not isinstance(value, bool):
            return value
        return None

    @property
    def attributes(self) -> Attributes:
        return dict(self._attributes)

    @property
    def errors(self) -> ErrorMap:
        return {name: list(messages) for name, messages in self._errors.items()}

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    @property
    def owner(self) -> RecordOwner | None:
        return self._owner() if self._owner is not None else None

    def get(self, name: str, default: object = None) -> object:
        return self._attributes.get(name, default)

    def assign(self, attributes: Attributes) -> None:
        self._attributes.update(attributes)

    def save_body(self) -> object:
        return dict(self._attributes)

    def set_errors(self, errors: ErrorMap) -> None:
        self._errors = {name: list(messages) for name, messages in errors.items()}

    def clear_errors(self) -> None:
        self._errors = {}

    def attach(self, owner: RecordOwner) -> None:
        self._owner = weakref.ref(owner)

    def detach(self, owner: RecordOwner) -> None:
        # A record adopted by another collection keeps its newer owner.
        if self.owner is owner:
            self._owner = None

    def mark_deleted(self) -> None:
        """Report a confirmed remote deletion to the owning collection, if any."""

        owner = self.owner
        if owner is not None:
            owner.remove(self)
