from __future__ import annotations

from fastapi import Request
from starlette.requests import ClientDisconnect

from app.exceptions import RequestReadError
from app.observability.metrics import InMemoryMetrics

# Every verb reaches the handler so the validator decides what is allowed.
LOOKUP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]


async def read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as exc:
        raise RequestReadError() from exc


def app_metrics(request: Request) -> InMemoryMetrics:
    return request.app.state.metrics
