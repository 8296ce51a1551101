"""
Health check routes.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from redis.exceptions import RedisError

from rsmq import __version__
from rsmq.client import RedisSMQ
from rsmq.observability.metrics import get_metrics
from rsmq.store.connection import get_rsmq
from rsmq.types.api import HealthResponse

router = APIRouter(tags=["Health"])


async def _store_status(rsmq: RedisSMQ) -> str:
    try:
        return "healthy" if await rsmq.ping() else "unhealthy"
    except (RedisError, OSError):
        return "unhealthy"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the API and store connection.",
)
async def health_check(rsmq: RedisSMQ = Depends(get_rsmq)) -> HealthResponse:
    """
    Perform a health check.

    Pings the store and returns service status.
    """
    store_status = await _store_status(rsmq)

    return HealthResponse(
        status="healthy" if store_status == "healthy" else "degraded",
        version=__version__,
        store=store_status,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the service is ready to receive traffic.",
)
async def readiness_check(rsmq: RedisSMQ = Depends(get_rsmq)) -> dict:
    """Kubernetes readiness probe endpoint."""
    return {"ready": await _store_status(rsmq) == "healthy"}


@router.get(
    "/live",
    summary="Liveness check",
    description="Check if the service is alive.",
)
async def liveness_check() -> dict:
    """Kubernetes liveness probe endpoint."""
    return {"alive": True}


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Expose Prometheus metrics.",
)
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    metrics_collector = get_metrics()
    return Response(
        content=metrics_collector.get_metrics(),
        media_type=metrics_collector.get_content_type(),
    )
