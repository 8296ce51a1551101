"""
Message routes.
"""

from fastapi import APIRouter, Depends, status

from rsmq.client import RedisSMQ
from rsmq.constants import API_V1_PREFIX
from rsmq.store.connection import get_rsmq
from rsmq.types.api import (
    ChangeVisibilityRequest,
    ChangeVisibilityResponse,
    DeleteMessageResponse,
    MessageResponse,
    ReceiveMessageRequest,
    ReceiveMessageResponse,
    SendMessageRequest,
    SendMessageResponse,
)
from rsmq.types.message import Message

router = APIRouter(prefix=f"{API_V1_PREFIX}/queues/{{qname}}/messages", tags=["Messages"])


def _to_response(message: Message | None) -> ReceiveMessageResponse:
    if message is None:
        return ReceiveMessageResponse(message=None)
    return ReceiveMessageResponse(
        message=MessageResponse(
            id=message.id,
            message=message.message,
            rc=message.rc,
            fr=message.fr,
            sent=message.sent,
        )
    )


@router.post(
    "",
    response_model=SendMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(
    qname: str,
    request: SendMessageRequest,
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> SendMessageResponse:
    """Send a message, optionally delayed."""
    message_id = await rsmq.send_message(qname, request.message, delay=request.delay)
    return SendMessageResponse(id=message_id)


@router.post(
    "/receive",
    response_model=ReceiveMessageResponse,
    summary="Receive a message",
    description="Receive the next eligible message and hide it for vt seconds.",
)
async def receive_message(
    qname: str,
    request: ReceiveMessageRequest = ReceiveMessageRequest(),
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> ReceiveMessageResponse:
    """Receive a message. ``message`` is null when nothing is eligible."""
    return _to_response(await rsmq.receive_message(qname, vt=request.vt))


@router.post(
    "/pop",
    response_model=ReceiveMessageResponse,
    summary="Pop a message",
    description="Receive the next eligible message and delete it.",
)
async def pop_message(
    qname: str,
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> ReceiveMessageResponse:
    """Pop a message. ``message`` is null when nothing is eligible."""
    return _to_response(await rsmq.pop_message(qname))


@router.patch(
    "/{message_id}/visibility",
    response_model=ChangeVisibilityResponse,
    summary="Change message visibility",
)
async def change_message_visibility(
    qname: str,
    message_id: str,
    request: ChangeVisibilityRequest,
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> ChangeVisibilityResponse:
    """Hide a message for vt seconds from now. A missing message is reported, not an error."""
    visible_at = await rsmq.change_message_visibility(qname, message_id, request.vt)
    return ChangeVisibilityResponse(
        id=message_id,
        changed=visible_at is not None,
        visible_at=visible_at,
    )


@router.delete(
    "/{message_id}",
    response_model=DeleteMessageResponse,
    summary="Delete a message",
)
async def delete_message(
    qname: str,
    message_id: str,
    rsmq: RedisSMQ = Depends(get_rsmq),
) -> DeleteMessageResponse:
    """Delete a message."""
    deleted = await rsmq.delete_message(qname, message_id)
    return DeleteMessageResponse(id=message_id, deleted=deleted)
