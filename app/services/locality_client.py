from __future__ import annotations

from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from app.config import Settings
from app.exceptions import LocalityNotFound, LocalityParseError
from app.models.schemas import LocalityPayload, LocalityResult, ZipcodeRequest
from app.observability.metrics import InMemoryMetrics
from app.services.http_client import fetch

logger = structlog.get_logger(__name__)


async def resolve_locality(
    request: ZipcodeRequest,
    client: httpx.AsyncClient,
    settings: Settings,
    metrics: InMemoryMetrics,
) -> LocalityResult:
    url = f"{settings.locality_base_url}/{quote(request.zipcode, safe='')}/json/"
    response = await fetch(
        client,
        url,
        upstream="locality",
        metrics=metrics,
        read_error=LocalityParseError,
        timeout=settings.upstream_timeout_seconds,
        headers={"Content-Type": "application/json"},
    )

    if response.status_code != 200:
        raise LocalityNotFound()

    try:
        payload = LocalityPayload.model_validate_json(response.body)
    except ValidationError as exc:
        raise LocalityParseError() from exc

    # The upstream reports a miss with an embedded error field, not a status code.
    if payload.not_found or not payload.localidade:
        raise LocalityNotFound()

    logger.info("locality.resolved", zipcode=request.zipcode, locality=payload.localidade)
    return LocalityResult(locality_name=payload.localidade, found=True)
