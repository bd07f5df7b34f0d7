from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from app.config import get_settings


router = APIRouter(prefix="/api", tags=["metrics"])


@router.get("/metrics")
async def metrics(request: Request) -> dict:
    settings = get_settings()
    if not settings.enable_metrics_endpoint:
        raise HTTPException(status_code=404, detail="Not found")
    return request.app.state.metrics.snapshot()
