"""
API request and response type definitions.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from rsmq.constants import MAX_DELAY, MAX_VT, MIN_DELAY, MIN_VT, CreateQueueResult
from rsmq.types.queue import MaxSize


class CreateQueueRequest(BaseModel):
    """Request body for creating a queue. Omitted options use the server defaults."""

    qname: str = Field(..., description="Queue name")
    vt: int | None = Field(default=None, ge=MIN_VT, le=MAX_VT, description="Visibility timeout in seconds")
    delay: int | None = Field(default=None, ge=MIN_DELAY, le=MAX_DELAY, description="Delivery delay in seconds")
    maxsize: MaxSize | None = Field(default=None, description="Maximum message size in bytes, -1 for unlimited")


class CreateQueueResponse(BaseModel):
    """Response body after creating a queue."""

    qname: str
    result: CreateQueueResult


class QueueListResponse(BaseModel):
    """Names of all queues."""

    queues: list[str]


class DeleteQueueResponse(BaseModel):
    """Response body after deleting a queue."""

    qname: str
    deleted: bool


class SendMessageRequest(BaseModel):
    """Request body for sending a message."""

    message: str = Field(..., description="Message body")
    delay: int | None = Field(default=None, ge=MIN_DELAY, le=MAX_DELAY, description="Delay in seconds")


class SendMessageResponse(BaseModel):
    """Response body after sending a message."""

    id: str


class ReceiveMessageRequest(BaseModel):
    """Request body for receiving a message."""

    vt: int | None = Field(default=None, ge=MIN_VT, le=MAX_VT, description="Seconds to hide the message")


class MessageResponse(BaseModel):
    """A received or popped message."""

    id: str
    message: str
    rc: int
    fr: int
    sent: int


class ReceiveMessageResponse(BaseModel):
    """Result of a receive or pop. ``message`` is null when the queue has nothing eligible."""

    message: MessageResponse | None = None


class ChangeVisibilityRequest(BaseModel):
    """Request body for changing a message's visibility."""

    vt: int = Field(..., ge=MIN_VT, le=MAX_VT, description="Seconds to hide the message from now")


class ChangeVisibilityResponse(BaseModel):
    """Result of a visibility change. ``visible_at`` is null if the message was not found."""

    id: str
    changed: bool
    visible_at: int | None = None


class DeleteMessageResponse(BaseModel):
    """Response body after deleting a message."""

    id: str
    deleted: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    store: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    message: str
    context: dict[str, Any] = Field(default_factory=dict)
