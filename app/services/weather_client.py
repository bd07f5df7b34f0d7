from __future__ import annotations

import httpx
import structlog
from pydantic import ValidationError

from app.config import Settings
from app.exceptions import LocalityNotFound, MissingCredential, ResponseParseError, UpstreamError
from app.models.schemas import LocalityResult, WeatherPayload, WeatherReport
from app.observability.metrics import InMemoryMetrics
from app.services.http_client import fetch

logger = structlog.get_logger(__name__)

# Reports use +273, not the exact 273.15.
KELVIN_OFFSET = 273


def to_report(payload: WeatherPayload) -> WeatherReport:
    celsius = float(payload.current.temp_c)
    return WeatherReport(
        city=payload.location.name,
        temp_c=celsius,
        temp_f=float(payload.current.temp_f),
        temp_k=celsius + KELVIN_OFFSET,
    )


async def resolve_weather(
    locality: LocalityResult,
    client: httpx.AsyncClient,
    settings: Settings,
    metrics: InMemoryMetrics,
) -> WeatherReport:
    if not locality.found:
        raise LocalityNotFound()

    # Checked before any network traffic.
    api_key = settings.weather_api_key
    if not api_key:
        raise MissingCredential()

    response = await fetch(
        client,
        settings.weather_api_url,
        upstream="weather",
        metrics=metrics,
        read_error=ResponseParseError,
        timeout=settings.upstream_timeout_seconds,
        params={"q": locality.locality_name},
        headers={"Content-Type": "application/json", "key": api_key},
    )

    if response.status_code != 200:
        logger.warning("weather.upstream_status", status_code=response.status_code)
        raise UpstreamError()

    try:
        payload = WeatherPayload.model_validate_json(response.body)
    except ValidationError as exc:
        raise ResponseParseError() from exc

    report = to_report(payload)
    logger.info("weather.resolved", city=report.city, temp_c=report.temp_c)
    return report
