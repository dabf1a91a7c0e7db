"""Port for issuing collection requests against a remote resource."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Decoded outcome of a single transport call."""

    status: int
    payload: object = None
    headers: Mapping[str, str] = field(default_factory=dict)


class TransportError(RuntimeError):
    """Raised by a transport when a request fails (network error or error status)."""

    def __init__(self, message: str, *, response: TransportResponse | None = None) -> None:
        super().__init__(message)
        self.response = response


class ValidationFailedError(TransportError):
    """Raised when the remote side rejected a request body as invalid.

    The response payload carries the validation errors.
    """


@runtime_checkable
class Transport(Protocol):
    """Callable port performing one request and returning its decoded response."""

    async def perform(
        self,
        method: str,
        url: str,
        *,
        body: object = None,
        params: Mapping[str, object] | None = None,
    ) -> TransportResponse: ...


__all__ = ["Transport", "TransportError", "TransportResponse", "ValidationFailedError"]
