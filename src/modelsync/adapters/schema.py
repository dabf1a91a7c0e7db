"""Pydantic models describing error envelopes returned by collection APIs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RemoteBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ErrorEnvelope(RemoteBaseModel):
    """``{"message": ..., "errors": ...}`` as commonly sent with 4xx responses.

    ``errors`` keeps its raw shape; the collection decides whether it is a
    positional list or a mapping keyed by identifier.
    """

    errors: list[object] | dict[str, object]
    message: str | None = None
