from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
from httpx import ASGITransport

from app.main import resolver_app

RESOLVER_HOST = "resolver.test"
LOCALITY_HOST = "locality.test"
WEATHER_HOST = "weather.test"

SAO_PAULO_LOCALITY = {"localidade": "São Paulo", "erro": ""}
SAO_PAULO_WEATHER = {"location": {"name": "Sao Paulo"}, "current": {"temp_c": 25.0, "temp_f": 77.0}}

Responder = Callable[[httpx.Request], httpx.Response]


def respond(status_code: int = 200, json: Any = None, content: bytes | None = None) -> Responder:
    def _responder(request: httpx.Request) -> httpx.Response:
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, json=json)

    return _responder


def fail(exc_type: type[httpx.TransportError], message: str = "boom") -> Responder:
    def _responder(request: httpx.Request) -> httpx.Response:
        raise exc_type(message, request=request)

    return _responder


class Upstreams(httpx.AsyncBaseTransport):
    """
    Routes outbound traffic by host and records every call.

    Resolver-host traffic goes into the real resolver app unless `resolver` is
    set; locality/weather traffic is answered by the configured responders.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.requests: list[httpx.Request] = []
        self.locality: Responder = respond(json=SAO_PAULO_LOCALITY)
        self.weather: Responder = respond(json=SAO_PAULO_WEATHER)
        self.resolver: Responder | None = None
        self._resolver_app = ASGITransport(app=resolver_app)
        self._stubs = httpx.MockTransport(self._dispatch)

    def _dispatch(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == LOCALITY_HOST:
            return self.locality(request)
        if host == WEATHER_HOST:
            return self.weather(request)
        if host == RESOLVER_HOST and self.resolver is not None:
            return self.resolver(request)
        raise httpx.ConnectError(f"unknown host {host}", request=request)

    def count(self, host: str) -> int:
        return self.calls.count(host)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request.url.host)
        self.requests.append(request)
        if request.url.host == RESOLVER_HOST and self.resolver is None:
            return await self._resolver_app.handle_async_request(request)
        return await self._stubs.handle_async_request(request)
