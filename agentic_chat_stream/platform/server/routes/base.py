"""Unauthenticated infrastructure endpoints: health, info and metrics."""

import logging

from fastapi import APIRouter, Request, Response

from agentic_chat_stream.platform.observability.metrics import metrics as prom_metrics
from agentic_chat_stream.platform.server.health import HealthCheck, metadata

logger = logging.getLogger(__name__)

base_router = APIRouter(tags=["base"])


def is_healthy(request: Request) -> bool:
    """Healthy while the lifespan has health enabled and the SQL store, if
    one is configured, still holds its connection.
    """
    if not HealthCheck.status():
        logger.info("health-check: fail. disabled")
        return False
    db_engine = getattr(request.app.state, "db_engine", None)
    if db_engine is not None and not db_engine.is_connected():
        logger.warning("health-check: fail. chat database disconnected")
        return False
    return True


@base_router.get("/health")
async def health(request: Request):
    """Return 200 while serving, 404 during startup, shutdown or database loss."""
    if not is_healthy(request):
        return Response(status_code=404)
    return {"status": "OK"}


@base_router.get("/info")
async def info():
    return metadata.info()


@base_router.get("/metrics")
async def metrics():
    body, media_type = prom_metrics()
    return Response(body, media_type=media_type)
