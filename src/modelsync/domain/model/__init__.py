"""Record contract and default model implementation."""

from __future__ import annotations

from .record import (
    Attributes,
    ErrorMap,
    Identifier,
    Model,
    ModelFactory,
    Record,
    RecordOwner,
    same_record,
)

__all__ = [
    "Attributes",
    "ErrorMap",
    "Identifier",
    "Model",
    "ModelFactory",
    "Record",
    "RecordOwner",
    "same_record",
]
