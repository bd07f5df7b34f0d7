from concurrent.futures import ThreadPoolExecutor

from httpx import ASGITransport, AsyncClient

from app.api.resolver import router as resolver_router
from app.config import get_settings
from app.main import create_app
from app.observability.metrics import InMemoryMetrics, get_metrics


def _body(zipcode: str) -> bytes:
    return f'{{"zipcode": "{zipcode}"}}'.encode()


async def test_responses_include_x_request_id(gateway_client) -> None:
    resp = await gateway_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("x-request-id")


async def test_inbound_request_id_is_reused(resolver_client) -> None:
    resp = await resolver_client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["x-request-id"] == "abc-123"


async def test_metrics_endpoint_returns_snapshot_and_counts_requests(gateway_client) -> None:
    m1 = await gateway_client.get("/api/metrics")
    assert m1.status_code == 200
    payload1 = m1.json()
    assert "counters" in payload1
    assert "latency_ms" in payload1

    # /api/metrics itself should NOT affect http_requests_total.
    m1b = await gateway_client.get("/api/metrics")
    assert m1b.json()["counters"]["http_requests_total"] == payload1["counters"]["http_requests_total"]

    health = await gateway_client.get("/health")
    assert health.status_code == 200

    m2 = await gateway_client.get("/api/metrics")
    payload2 = m2.json()
    assert payload2["counters"]["http_requests_total"] == payload1["counters"]["http_requests_total"] + 1


async def test_lookups_and_upstream_calls_are_counted(resolver_client, upstreams) -> None:
    resp = await resolver_client.request("GET", "/", content=_body("01001000"))
    assert resp.status_code == 200

    payload = (await resolver_client.get("/api/metrics")).json()
    assert payload["counters"]["lookups_succeeded_total"] == 1
    assert payload["counters"]["upstream_calls_total"] == 2
    assert set(payload["latency_ms"]["upstream_call_ms"]) == {"locality", "weather"}
    assert payload["latency_ms"]["upstream_call_ms"]["weather"]["count"] == 1


async def test_app_records_into_its_own_registry(upstreams) -> None:
    registry = InMemoryMetrics()
    app = create_app("Isolated Resolver", resolver_router, service="resolver", metrics=registry)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://isolated.test") as client:
        await client.request("GET", "/", content=_body("01001000"))
        await client.request("GET", "/", content=_body("123"))

    counters = registry.snapshot()["counters"]
    assert counters["http_requests_total"] == 2
    assert counters["upstream_calls_total"] == 2
    assert counters["lookups_succeeded_total"] == 1
    assert counters["lookup_errors_total"] == {"invalid_zipcode": 1}
    assert get_metrics().snapshot()["counters"]["http_requests_total"] == 0


async def test_failures_are_counted_by_code(resolver_client, upstreams) -> None:
    await resolver_client.request("GET", "/", content=_body("123"))
    await resolver_client.request("GET", "/", content=_body("123"))
    await resolver_client.post("/", content=_body("01001000"))

    counters = (await resolver_client.get("/api/metrics")).json()["counters"]
    assert counters["lookup_errors_total"] == {"invalid_zipcode": 2, "method_not_allowed": 1}
    assert counters["lookups_succeeded_total"] == 0
    assert counters["upstream_calls_total"] == 0


async def test_metrics_endpoint_can_be_disabled(gateway_client, monkeypatch) -> None:
    monkeypatch.setenv("ENABLE_METRICS_ENDPOINT", "false")
    get_settings.cache_clear()

    resp = await gateway_client.get("/api/metrics")
    assert resp.status_code == 404


def test_concurrent_updates_are_not_lost() -> None:
    metrics = InMemoryMetrics()

    def work(_: int) -> None:
        for _ in range(500):
            metrics.observe_upstream_call("weather", elapsed_ms=1.0)
            metrics.observe_lookup_error("upstream_error")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, range(8)))

    snapshot = metrics.snapshot()
    assert snapshot["counters"]["upstream_calls_total"] == 4000
    assert snapshot["counters"]["lookup_errors_total"] == {"upstream_error": 4000}
    assert snapshot["latency_ms"]["upstream_call_ms"]["weather"]["count"] == 4000
