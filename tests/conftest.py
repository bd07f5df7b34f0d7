from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.main import gateway_app, resolver_app
from app.observability.metrics import reset_metrics
from app.services.http_client import set_http_client
from tests.upstream_stubs import LOCALITY_HOST, RESOLVER_HOST, WEATHER_HOST, Upstreams


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESOLVER_URL", f"http://{RESOLVER_HOST}:8181")
    monkeypatch.setenv("LOCALITY_API_URL", f"http://{LOCALITY_HOST}/ws")
    monkeypatch.setenv("WEATHER_API_URL", f"http://{WEATHER_HOST}/v1/current.json")
    monkeypatch.setenv("WEATHER_API_KEY", "test-key")
    monkeypatch.setenv("UPSTREAM_TIMEOUT_SECONDS", "2")
    monkeypatch.setenv("ENABLE_METRICS_ENDPOINT", "true")
    get_settings.cache_clear()
    reset_metrics()

    yield

    set_http_client(None)
    get_settings.cache_clear()


@pytest.fixture
async def upstreams() -> AsyncIterator[Upstreams]:
    stub = Upstreams()
    async with AsyncClient(transport=stub) as client:
        set_http_client(client)
        yield stub
    set_http_client(None)


@pytest.fixture
async def gateway_client(upstreams: Upstreams) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=gateway_app)
    async with AsyncClient(transport=transport, base_url="http://gateway.test") as client:
        yield client


@pytest.fixture
async def resolver_client(upstreams: Upstreams) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=resolver_app)
    async with AsyncClient(transport=transport, base_url=f"http://{RESOLVER_HOST}") as client:
        yield client
