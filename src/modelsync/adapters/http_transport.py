"""HTTP implementation of the collection transport port."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from modelsync.domain.ports.transport import (
    TransportError,
    TransportResponse,
    ValidationFailedError,
)

from .http_resilience import RequestOptions, ResilientClient
from .schema import ErrorEnvelope

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from modelsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

VALIDATION_STATUS = 422


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _decode_payload(response: httpx.Response) -> object:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        if response.is_error:
            return None
        raise TransportError(
            f"Response from {response.request.url} is not valid JSON",
            response=TransportResponse(
                status=response.status_code,
                headers=dict(response.headers),
            ),
        ) from exc


def _query_params(params: Mapping[str, object] | None) -> httpx.QueryParams | None:
    if not params:
        return None
    flattened: list[tuple[str, str]] = []
    for name, value in params.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        flattened.extend((name, str(item)) for item in values)
    return httpx.QueryParams(flattened)


@dataclass(slots=True)
class HttpTransport:
    """Perform collection requests through a :class:`ResilientClient`.

    The underlying client is opened on first use and reused until
    :meth:`aclose`; use the transport as an async context manager to scope it.
    """

    resilience: ResilienceConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False)

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.resilience)
        return self._client

    async def perform(
        self,
        method: str,
        url: str,
        *,
        body: object = None,
        params: Mapping[str, object] | None = None,
    ) -> TransportResponse:
        options: RequestOptions = {}
        query = _query_params(params)
        if query is not None:
            options["params"] = query
        if body is not None:
            options["json"] = body

        try:
            response = await self._get_client().request(method, url, **options)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        log.debug("%s %s returned %s", method, url, response.status_code)

        result = TransportResponse(
            status=response.status_code,
            payload=_decode_payload(response),
            headers=dict(response.headers),
        )

        if response.status_code == VALIDATION_STATUS:
            raise ValidationFailedError(
                _error_message(result, default="Validation failed"),
                response=_unwrap_validation_errors(result),
            )
        if response.is_error:
            raise TransportError(
                _error_message(result, default=f"{method} {url} returned {response.status_code}"),
                response=result,
            )
        return result


def _error_message(response: TransportResponse, *, default: str) -> str:
    try:
        envelope = ErrorEnvelope.model_validate(response.payload)
    except ValidationError:
        return default
    return envelope.message or default


def _unwrap_validation_errors(response: TransportResponse) -> TransportResponse:
    try:
        envelope = ErrorEnvelope.model_validate(response.payload)
    except ValidationError:
        return response
    return TransportResponse(
        status=response.status,
        payload=envelope.errors,
        headers=response.headers,
    )
