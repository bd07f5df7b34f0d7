from __future__ import annotations

import httpx

from app.config import Settings
from app.exceptions import ResponseDecodeError
from app.models.schemas import ZipcodeRequest
from app.observability.metrics import InMemoryMetrics
from app.services.http_client import UpstreamResponse, fetch


async def forward_to_resolver(
    request: ZipcodeRequest,
    body: bytes,
    client: httpx.AsyncClient,
    settings: Settings,
    metrics: InMemoryMetrics,
) -> UpstreamResponse:
    """Relay the original inbound body to the resolver service, unchanged."""
    return await fetch(
        client,
        f"{settings.resolver_base_url}/",
        upstream="resolver",
        metrics=metrics,
        read_error=ResponseDecodeError,
        timeout=settings.upstream_timeout_seconds,
        params={"zipcode": request.zipcode},
        headers={"Content-Type": "application/json"},
        content=body,
    )
