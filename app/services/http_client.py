from __future__ import annotations

import asyncio
from dataclasses import dataclass

import httpx

from app.config import get_settings
from app.exceptions import UpstreamTimeout, UpstreamUnreachable, WeatherLookupError
from app.observability.metrics import InMemoryMetrics
from app.observability.middleware import REQUEST_ID_HEADER, current_request_id
from app.observability.upstream import instrument_upstream_call

_client: httpx.AsyncClient | None = None


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def set_http_client(client: httpx.AsyncClient | None) -> None:
    global _client
    _client = client


def get_http_client() -> httpx.AsyncClient:
    global _client
    if _client is None:
        settings = get_settings()
        _client = httpx.AsyncClient(timeout=httpx.Timeout(settings.upstream_timeout_seconds))
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


async def fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    upstream: str,
    metrics: InMemoryMetrics,
    read_error: type[WeatherLookupError],
    timeout: float,
    method: str = "GET",
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    content: bytes | None = None,
) -> UpstreamResponse:
    """Issue one outbound request and read the whole body.

    `timeout` bounds the whole exchange, connect through last body byte; httpx's
    own timeout only bounds each individual read or write. Connecting and sending
    map to UpstreamUnreachable / UpstreamTimeout; a failure while reading the
    body maps to `read_error`. The response is always released before this
    returns.
    """

    request_headers = dict(headers or {})
    request_id = current_request_id()
    if request_id:
        request_headers[REQUEST_ID_HEADER] = request_id

    async def _exchange() -> UpstreamResponse:
        try:
            async with client.stream(
                method,
                url,
                params=params,
                headers=request_headers,
                content=content,
                timeout=timeout,
            ) as response:
                try:
                    body = await response.aread()
                except httpx.TimeoutException as exc:
                    raise UpstreamTimeout() from exc
                except httpx.HTTPError as exc:
                    raise read_error() from exc
                return UpstreamResponse(status_code=response.status_code, body=body)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout() from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnreachable() from exc

    async def _call() -> UpstreamResponse:
        try:
            return await asyncio.wait_for(_exchange(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeout() from exc

    return await instrument_upstream_call(upstream=upstream, operation=f"{method} {url}", metrics=metrics, fn=_call)
