from __future__ import annotations

from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any


@dataclass
class _LatencyAgg:
    count: int = 0
    sum_ms: float = 0.0
    max_ms: float = 0.0

    def observe(self, elapsed_ms: float) -> None:
        self.count += 1
        self.sum_ms += float(elapsed_ms)
        if elapsed_ms > self.max_ms:
            self.max_ms = float(elapsed_ms)


class InMemoryMetrics:
    """Thread-safe, process-local metrics (resets on restart)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.http_requests_total: int = 0
        self.upstream_calls_total: int = 0
        self.lookups_succeeded_total: int = 0
        self.lookup_errors_total: dict[str, int] = {}
        self.http_request_ms = _LatencyAgg()
        self.upstream_call_ms: dict[str, _LatencyAgg] = {}

    def observe_http_request(self, elapsed_ms: float) -> None:
        with self._lock:
            self.http_requests_total += 1
            self.http_request_ms.observe(elapsed_ms)

    def observe_upstream_call(self, upstream: str, elapsed_ms: float) -> None:
        with self._lock:
            self.upstream_calls_total += 1
            self.upstream_call_ms.setdefault(upstream, _LatencyAgg()).observe(elapsed_ms)

    def observe_lookup_success(self) -> None:
        with self._lock:
            self.lookups_succeeded_total += 1

    def observe_lookup_error(self, code: str) -> None:
        with self._lock:
            self.lookup_errors_total[code] = self.lookup_errors_total.get(code, 0) + 1

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": {
                    "http_requests_total": self.http_requests_total,
                    "upstream_calls_total": self.upstream_calls_total,
                    "lookups_succeeded_total": self.lookups_succeeded_total,
                    "lookup_errors_total": dict(self.lookup_errors_total),
                },
                "latency_ms": {
                    "http_request_ms": asdict(self.http_request_ms),
                    "upstream_call_ms": {name: asdict(agg) for name, agg in self.upstream_call_ms.items()},
                },
            }

    def reset(self) -> None:
        with self._lock:
            self.http_requests_total = 0
            self.upstream_calls_total = 0
            self.lookups_succeeded_total = 0
            self.lookup_errors_total = {}
            self.http_request_ms = _LatencyAgg()
            self.upstream_call_ms = {}


_METRICS: InMemoryMetrics | None = None


def get_metrics() -> InMemoryMetrics:
    global _METRICS
    if _METRICS is None:
        _METRICS = InMemoryMetrics()
    return _METRICS


def reset_metrics() -> None:
    """Reset metrics counters/aggregates (used by tests)."""

    get_metrics().reset()
