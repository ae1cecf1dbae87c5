"""Fixtures for API tests: the app wired to an engine over a temp database."""

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from fulfillment.api.dependencies import get_engine
from fulfillment.api.main import app
from fulfillment.application import FulfillmentEngine


async def _client_for(engine) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_engine] = lambda: engine
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_engine, None)


@pytest.fixture
async def api_client(engine: FulfillmentEngine) -> AsyncGenerator[AsyncClient, None]:
    async for ac in _client_for(engine):
        yield ac


@pytest.fixture
def mock_engine() -> MagicMock:
    """Engine whose services are replaced per test."""
    return MagicMock()


@pytest.fixture
async def mock_client(mock_engine: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    async for ac in _client_for(mock_engine):
        yield ac
