from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from app.api.gateway import router as gateway_router
from app.api.metrics import router as metrics_router
from app.api.resolver import router as resolver_router
from app.config import get_settings
from app.exceptions import register_exception_handlers
from app.observability.logging import configure_logging
from app.observability.metrics import InMemoryMetrics, get_metrics
from app.observability.middleware import RequestContextMiddleware
from app.services.http_client import close_http_client


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(get_settings().log_level, service=app.state.service)
    yield
    await close_http_client()


async def health() -> dict[str, str]:
    return {"status": "ok"}


def create_app(
    title: str,
    lookup_router: APIRouter,
    service: str,
    metrics: InMemoryMetrics | None = None,
) -> FastAPI:
    app = FastAPI(title=title, version="0.1.0", lifespan=_lifespan)
    app.state.service = service
    # Middleware, error handler and routes all record into this one registry.
    app.state.metrics = metrics if metrics is not None else get_metrics()

    app.add_middleware(RequestContextMiddleware, metrics=app.state.metrics)
    register_exception_handlers(app)

    app.include_router(lookup_router)
    app.include_router(metrics_router)
    app.add_api_route("/health", health, methods=["GET"])
    return app


gateway_app = create_app("Weather Gateway", gateway_router, service="gateway")
resolver_app = create_app("Weather Resolver", resolver_router, service="resolver")
