"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from modelsync.adapters.http_resilience import ResilientClient
from modelsync.adapters.http_transport import HttpTransport
from modelsync.config import get_remote_config
from modelsync.domain.collection import Collection, CollectionOptions

if TYPE_CHECKING:
    from collections.abc import Mapping

    from modelsync.config import RemoteConfig, ResilienceConfig
    from modelsync.domain.collection import RequestOutcome

ClientFactory = Callable[["ResilienceConfig"], ResilientClient]


log = getLogger(__name__)


def build_http_collection(
    routes: Mapping[str, str],
    *,
    config: RemoteConfig | None = None,
    options: CollectionOptions | None = None,
    client_factory: ClientFactory | None = None,
) -> tuple[Collection, HttpTransport]:
    """Wire a collection to an HTTP transport built from ``config``.

    The caller owns the returned transport and must close it.
    """

    effective_config = config or get_remote_config()
    transport = HttpTransport(
        resilience=effective_config.resilience,
        client_factory=client_factory or ResilientClient,
    )
    base_options = options or CollectionOptions()
    collection = Collection(
        options=dataclasses.replace(base_options, routes={**base_options.routes, **routes}),
        transport=transport,
    )
    return collection, transport


def _raise_on_failure(outcome: RequestOutcome) -> None:
    if outcome.error is not None:
        raise outcome.error


async def _fetch_records_async(
    collection: Collection,
    *,
    page: int | None,
    all_pages: bool,
    max_pages: int | None,
) -> list[dict[str, object]]:
    if all_pages and page is None:
        page = 1
    collection.page(page)

    pages_fetched = 0
    while True:
        outcome = await collection.fetch()
        _raise_on_failure(outcome)
        pages_fetched += 1
        if not (all_pages and collection.is_paginated()) or collection.is_last_page():
            break
        if max_pages is not None and pages_fetched >= max_pages:
            log.info("Stopping after %s pages", pages_fetched)
            break

    return [dict(record.attributes) for record in collection]


def fetch_remote_records(
    route: str,
    *,
    page: int | None = None,
    all_pages: bool = False,
    max_pages: int | None = None,
    route_parameters: Mapping[str, object] | None = None,
    config: RemoteConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> list[dict[str, object]]:
    """Fetch one page (or every page) of a remote collection as attribute maps."""

    collection, transport = build_http_collection(
        {"fetch": route},
        config=config,
        options=CollectionOptions(route_parameters=dict(route_parameters or {})),
        client_factory=client_factory,
    )
    log.info(
        "Fetching %s: page=%s, all_pages=%s, max_pages=%s", route, page, all_pages, max_pages
    )

    async def run() -> list[dict[str, object]]:
        async with transport:
            return await _fetch_records_async(
                collection,
                page=page,
                all_pages=all_pages,
                max_pages=max_pages,
            )

    records = asyncio.run(run())
    log.info(f"Finished fetching {route}: records={len(records)}")
    return records


def delete_remote_records(
    route: str,
    identifiers: list[str],
    *,
    use_delete_body: bool = False,
    route_parameters: Mapping[str, object] | None = None,
    config: RemoteConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> int:
    """Delete the given identifiers remotely; return how many were removed."""

    collection, transport = build_http_collection(
        {"delete": route},
        config=config,
        options=CollectionOptions(
            route_parameters=dict(route_parameters or {}),
            use_delete_body=use_delete_body,
        ),
        client_factory=client_factory,
    )
    collection.add([{"id": identifier} for identifier in identifiers])
    targeted = len(collection)

    async def run() -> RequestOutcome:
        async with transport:
            return await collection.delete()

    outcome = asyncio.run(run())
    _raise_on_failure(outcome)
    deleted = targeted - len(collection)
    log.info(f"Deleted {deleted} records via {route}")
    return deleted
