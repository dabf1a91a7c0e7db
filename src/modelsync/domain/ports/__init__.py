"""Ports the collection engine depends on."""

from __future__ import annotations

from .transport import Transport, TransportError, TransportResponse, ValidationFailedError

__all__ = ["Transport", "TransportError", "TransportResponse", "ValidationFailedError"]
