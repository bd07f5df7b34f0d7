from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog
from pydantic import ValidationError

from app.config import Settings
from app.exceptions import ResponseDecodeError, ResponseEncodeError, UpstreamError
from app.models.schemas import ErrorResponse, WeatherReport
from app.observability.metrics import InMemoryMetrics
from app.services.forwarding_client import forward_to_resolver
from app.services.locality_client import resolve_locality
from app.services.validation import validate_lookup_request
from app.services.weather_client import resolve_weather

GATEWAY_METHOD = "POST"
RESOLVER_METHOD = "GET"
JSON_CONTENT_TYPE = "application/json"

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LookupResponse:
    status_code: int
    body: bytes
    media_type: str = JSON_CONTENT_TYPE


def encode_report(report: WeatherReport) -> bytes:
    try:
        return report.model_dump_json().encode("utf-8")
    except (ValueError, TypeError) as exc:
        raise ResponseEncodeError() from exc


def relay_resolver_error(status_code: int, body: bytes) -> LookupResponse:
    """
    Pass a resolver error through with its status, re-encoded from our own schema.

    Anything that is not an `ErrorResponse` (a proxy page, a stack trace) is
    replaced by `UpstreamError` so foreign bodies never reach the client.
    """
    try:
        error = ErrorResponse.model_validate_json(body)
    except ValidationError as exc:
        logger.warning("resolver.error_unrecognized", status_code=status_code)
        raise UpstreamError() from exc

    logger.info("resolver.error_relayed", status_code=status_code, code=error.code)
    return LookupResponse(status_code=status_code, body=error.model_dump_json().encode("utf-8"))


async def run_resolver_lookup(
    body: bytes,
    method: str,
    client: httpx.AsyncClient,
    settings: Settings,
    metrics: InMemoryMetrics,
) -> LookupResponse:
    """
    Validate, resolve the locality, then the weather, and compose the report.

    The first failure raises and ends the request; the weather service is never
    called unless the locality lookup succeeded.
    """
    request = validate_lookup_request(body, method, RESOLVER_METHOD)
    logger.info("lookup.validated", zipcode=request.zipcode)

    locality = await resolve_locality(request, client, settings, metrics)
    report = await resolve_weather(locality, client, settings, metrics)

    payload = encode_report(report)
    metrics.observe_lookup_success()
    return LookupResponse(status_code=200, body=payload)


async def run_gateway_lookup(
    body: bytes,
    method: str,
    client: httpx.AsyncClient,
    settings: Settings,
    metrics: InMemoryMetrics,
) -> LookupResponse:
    request = validate_lookup_request(body, method, GATEWAY_METHOD)
    logger.info("lookup.validated", zipcode=request.zipcode)

    response = await forward_to_resolver(request, body, client, settings, metrics)

    if not response.ok:
        return relay_resolver_error(response.status_code, response.body)

    try:
        report = WeatherReport.model_validate_json(response.body)
    except ValidationError as exc:
        raise ResponseDecodeError() from exc

    payload = encode_report(report)
    metrics.observe_lookup_success()
    return LookupResponse(status_code=200, body=payload)
