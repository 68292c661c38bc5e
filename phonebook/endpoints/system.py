"""Health check and system endpoints."""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from phonebook.config import Settings
from phonebook.database import ContactStore
from phonebook.metrics import METRICS_PATH, Metrics
from phonebook.state import get_metrics, get_settings, get_store

logger = logging.getLogger("phonebook")

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check."""
    return {"ok": True}


@router.get("/readyz")
async def readyz(response: Response, store: ContactStore = Depends(get_store)):
    """Readiness check including MongoDB connectivity."""
    db_ok = await store.ping()
    if not db_ok:
        response.status_code = 503
    return {"ready": db_ok, "db": db_ok}


@router.get("/version")
async def version(settings: Settings = Depends(get_settings)):
    """Service version and configuration summary."""
    return {"service": {"name": settings.service_name}, "config": settings.safe_summary()}


@router.get(METRICS_PATH)
async def metrics(metrics: Metrics = Depends(get_metrics)):
    """Prometheus metrics endpoint."""
    try:
        data = metrics.render()
    except Exception as e:
        logger.error("metrics_render_error", extra={"error": str(e)})
        return JSONResponse(status_code=500, content={"error": str(e)})
    return Response(content=data, media_type=metrics.content_type)
