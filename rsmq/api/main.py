"""
FastAPI application entry point.
"""

import logging
import time
from collections.abc import Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from rsmq import __version__
from rsmq.api.routes import health_router, messages_router, queues_router
from rsmq.config import get_settings
from rsmq.errors import MessageTooLongError, QueueNotFoundError, RSMQError, ValidationError
from rsmq.observability.logging import setup_logging
from rsmq.observability.metrics import get_metrics, setup_metrics
from rsmq.observability.tracing import instrument_fastapi, instrument_redis, setup_tracing
from rsmq.store.connection import close_store, init_store
from rsmq.types.api import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    setup_logging("api")
    setup_metrics()
    setup_tracing()
    instrument_redis()
    await init_store()

    logger.info("Application started")

    yield

    await close_store()
    logger.info("Application shutdown")


def _error_status(exc: RSMQError) -> int:
    if isinstance(exc, QueueNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, MessageTooLongError):
        return status.HTTP_413_CONTENT_TOO_LARGE
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def rsmq_error_handler(request: Request, exc: RSMQError) -> JSONResponse:
    """Translate queue errors into JSON error responses."""
    return JSONResponse(
        status_code=_error_status(exc),
        content=ErrorResponse(**exc.to_dict()).model_dump(),
    )


def create_metrics_middleware() -> Callable:
    """
    Create request metrics middleware.

    Returns:
        The middleware function.
    """

    async def metrics_middleware(request: Request, call_next: Callable):
        """Record count and latency of each request."""
        start = time.perf_counter()
        response = await call_next(request)

        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        get_metrics().record_api_request(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
            duration_seconds=time.perf_counter() - start,
        )
        return response

    return metrics_middleware


def create_app(lifespan_handler: Callable | None = lifespan) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        lifespan_handler: Startup/shutdown manager. Tests pass None and
            install their own client.

    Returns:
        FastAPI: The configured application instance.
    """
    app = FastAPI(
        title="RSMQ API",
        description="Simple message queue over Redis",
        version=__version__,
        lifespan=lifespan_handler,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        BaseHTTPMiddleware,
        dispatch=create_metrics_middleware(),
    )

    app.add_exception_handler(RSMQError, rsmq_error_handler)

    app.include_router(health_router)
    app.include_router(queues_router)
    app.include_router(messages_router)

    instrument_fastapi(app)

    return app


def run() -> None:
    """Run the API server."""
    settings = get_settings()

    uvicorn.run(
        "rsmq.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
