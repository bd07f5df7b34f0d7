from __future__ import annotations

from time import perf_counter
from typing import Awaitable, Callable, TypeVar

import structlog

from app.observability.metrics import InMemoryMetrics


T = TypeVar("T")


async def instrument_upstream_call(
    *,
    upstream: str,
    operation: str,
    metrics: InMemoryMetrics,
    fn: Callable[[], Awaitable[T]],
) -> T:
    """Time an outbound call, update `metrics`, and emit a structured log event."""

    log = structlog.get_logger("upstream")
    start = perf_counter()
    try:
        result = await fn()
    except Exception as exc:
        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics.observe_upstream_call(upstream, elapsed_ms=elapsed_ms)
        log.warning(
            "upstream_call_failed",
            upstream=upstream,
            operation=operation,
            elapsed_ms=round(elapsed_ms, 2),
            error=type(exc).__name__,
        )
        raise

    elapsed_ms = (perf_counter() - start) * 1000.0
    metrics.observe_upstream_call(upstream, elapsed_ms=elapsed_ms)
    log.info(
        "upstream_call",
        upstream=upstream,
        operation=operation,
        elapsed_ms=round(elapsed_ms, 2),
        status_code=getattr(result, "status_code", None),
    )
    return result
