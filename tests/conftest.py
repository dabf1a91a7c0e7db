from __future__ import annotations

import pytest

from modelsync.domain.collection import Collection, CollectionOptions
from tests.support.transport import ROUTES, FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def collection(transport: FakeTransport) -> Collection:
    return Collection(options=CollectionOptions(routes=ROUTES), transport=transport)
