"""
Queue management routes.
"""

import logging

from fastapi import APIRouter, Depends, status

from rsmq.client import RedisSMQ
from rsmq.config import get_settings
from rsmq.constants import API_V1_PREFIX, CreateQueueResult
from rsmq.observability.metrics import get_metrics
from rsmq.store.connection import get_rsmq
from rsmq.types.api import (
    CreateQueueRequest,
    CreateQueueResponse,
    DeleteQueueResponse,
    QueueListResponse,
)
from rsmq.types.queue import QueueAttributes, QueueAttributeUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_V1_PREFIX}/queues", tags=["Queues"])


@router.post(
    "",
    response_model=CreateQueueResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a queue",
    description="Create a queue. Creating an existing queue keeps its configuration.",
)
async def create_queue(
    request: CreateQueueRequest,
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> CreateQueueResponse:
    """
    Create a queue.

    Options left out of the request fall back to the configured defaults.

    Args:
        request: Queue creation request.
        rsmq: Queue client.

    Returns:
        CreateQueueResponse telling whether the queue was created or
        already existed.
    """
    settings = get_settings()
    result: CreateQueueResult = await rsmq.create_queue(
        request.qname,
        vt=settings.queue_default_vt if request.vt is None else request.vt,
        delay=settings.queue_default_delay if request.delay is None else request.delay,
        maxsize=settings.queue_default_maxsize if request.maxsize is None else request.maxsize,
    )
    return CreateQueueResponse(qname=request.qname, result=result)


@router.get(
    "",
    response_model=QueueListResponse,
    summary="List queues",
)
async def list_queues(rsmq: RedisSMQ = Depends(get_rsmq)) -> QueueListResponse:
    """List all queues in the namespace."""
    return QueueListResponse(queues=sorted(await rsmq.list_queues()))


@router.delete(
    "/{qname}",
    response_model=DeleteQueueResponse,
    summary="Delete a queue",
    description="Delete a queue and all of its messages. Deleting an absent queue succeeds.",
)
async def delete_queue(
    qname: str,
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> DeleteQueueResponse:
    """Delete a queue."""
    deleted = await rsmq.delete_queue(qname)
    return DeleteQueueResponse(qname=qname, deleted=deleted)


@router.get(
    "/{qname}",
    response_model=QueueAttributes,
    summary="Get queue attributes",
)
async def get_queue_attributes(
    qname: str,
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> QueueAttributes:
    """
    Get configuration, counters and live message counts of a queue.

    Also refreshes the queue depth gauges.
    """
    attributes = await rsmq.get_queue_attributes(qname)
    get_metrics().update_queue_depth(qname, attributes.msgs, attributes.hiddenmsgs)
    return attributes


@router.patch(
    "/{qname}",
    response_model=QueueAttributes,
    summary="Update queue attributes",
    description="Update vt, delay or maxsize. Omitted fields are unchanged.",
)
async def set_queue_attributes(
    qname: str,
    request: QueueAttributeUpdate,
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> QueueAttributes:
    """Update queue options and return the refreshed attributes."""
    return await rsmq.set_queue_attributes(
        qname,
        vt=request.vt,
        delay=request.delay,
        maxsize=request.maxsize,
    )
