"""
Type definitions for the message queue.
Contains store clock, queue, message and API types.
"""

from rsmq.types.api import (
    ChangeVisibilityRequest,
    ChangeVisibilityResponse,
    CreateQueueRequest,
    CreateQueueResponse,
    DeleteMessageResponse,
    DeleteQueueResponse,
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    QueueListResponse,
    ReceiveMessageRequest,
    ReceiveMessageResponse,
    SendMessageRequest,
    SendMessageResponse,
)
from rsmq.types.clock import StoreTime
from rsmq.types.message import Message
from rsmq.types.queue import (
    QueueAttributes,
    QueueAttributeUpdate,
    QueueConfig,
    QueueOptions,
)
from rsmq.types.worker import HandlerResult, MessageContext

__all__ = [
    # API types
    "CreateQueueRequest",
    "CreateQueueResponse",
    "QueueListResponse",
    "DeleteQueueResponse",
    "SendMessageRequest",
    "SendMessageResponse",
    "ReceiveMessageRequest",
    "ReceiveMessageResponse",
    "MessageResponse",
    "ChangeVisibilityRequest",
    "ChangeVisibilityResponse",
    "DeleteMessageResponse",
    "HealthResponse",
    "ErrorResponse",
    # Core types
    "StoreTime",
    "Message",
    "QueueOptions",
    "QueueAttributeUpdate",
    "QueueConfig",
    "QueueAttributes",
    # Worker types
    "HandlerResult",
    "MessageContext",
]
