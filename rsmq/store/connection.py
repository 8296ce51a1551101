"""
Queue client lifecycle management.
Holds the process-wide client used by the API and the worker.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from rsmq.client import RedisSMQ
from rsmq.config import get_settings

logger = logging.getLogger(__name__)

# Global client instance
_rsmq: RedisSMQ | None = None


def create_client() -> RedisSMQ:
    """
    Create a client from application settings.

    Returns:
        RedisSMQ: A client backed by the configured Redis server.
    """
    settings = get_settings()
    return RedisSMQ.from_url(
        settings.redis_url,
        namespace=settings.redis_namespace,
        max_connections=settings.redis_max_connections,
    )


async def init_store(client: RedisSMQ | None = None) -> RedisSMQ:
    """
    Initialize the process-wide client.
    Should be called on application startup.

    Args:
        client: Optional preconfigured client, e.g. one over a memory store.

    Returns:
        The installed client.
    """
    global _rsmq
    if _rsmq is None:
        _rsmq = client or create_client()
        logger.info(
            "Queue store initialized",
            extra={"namespace": _rsmq.store.namespace},
        )
    return _rsmq


async def close_store() -> None:
    """
    Close the process-wide client.
    Should be called on application shutdown.
    """
    global _rsmq
    if _rsmq is not None:
        await _rsmq.close()
        _rsmq = None
        logger.info("Queue store closed")


def get_rsmq() -> RedisSMQ:
    """
    Dependency for getting the queue client.

    Raises:
        RuntimeError: If the store is not initialized.
    """
    if _rsmq is None:
        raise RuntimeError("Queue store not initialized. Call init_store() first.")
    return _rsmq


@asynccontextmanager
async def get_rsmq_context() -> AsyncGenerator[RedisSMQ]:
    """
    Context manager owning a client for its duration.
    Useful for scripts and one-off tasks outside the API and worker.
    """
    client = create_client()
    try:
        yield client
    finally:
        await client.close()
