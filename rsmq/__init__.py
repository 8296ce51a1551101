"""
Redis Simple Message Queue

An at-least-once message queue on Redis with delayed messages, visibility
timeouts and queue statistics, built only on sorted sets, hashes,
transactions and Lua scripts.
"""

__version__ = "1.0.0"

from rsmq.client import RedisSMQ
from rsmq.constants import CreateQueueResult
from rsmq.errors import (
    InvalidMessageIdError,
    InvalidOptionError,
    InvalidQueueNameError,
    MessageTooLongError,
    NoAttributeSupplied,
    QueueNotFoundError,
    RSMQError,
    ValidationError,
)
from rsmq.types.message import Message
from rsmq.types.queue import QueueAttributes

__all__ = [
    "RedisSMQ",
    "CreateQueueResult",
    "Message",
    "QueueAttributes",
    "RSMQError",
    "ValidationError",
    "InvalidQueueNameError",
    "InvalidOptionError",
    "InvalidMessageIdError",
    "MessageTooLongError",
    "NoAttributeSupplied",
    "QueueNotFoundError",
]
