from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request, Response

from app.api.lookup import LOOKUP_METHODS, app_metrics, read_body
from app.config import Settings, get_settings
from app.models.schemas import ErrorResponse, WeatherReport
from app.observability.metrics import InMemoryMetrics
from app.services.http_client import get_http_client
from app.services.lookup_service import run_resolver_lookup

router = APIRouter(tags=["resolver"])


@router.api_route(
    "/",
    methods=LOOKUP_METHODS,
    response_model=WeatherReport,
    responses={404: {"model": ErrorResponse}, 405: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def resolve_weather_for_zipcode(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
    metrics: InMemoryMetrics = Depends(app_metrics),
) -> Response:
    body = await read_body(request)
    result = await run_resolver_lookup(body, request.method, client, settings, metrics)
    return Response(content=result.body, status_code=result.status_code, media_type=result.media_type)
