"""
Worker-related type definitions for internal use.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from rsmq.types.message import Message


class HandlerResult(BaseModel):
    """
    Result of handling a message.
    A successful result gets the message deleted; a failed one leaves it
    to reappear once its visibility timeout elapses.
    """

    success: bool
    output: dict[str, Any] | None = None
    error: str | None = None


@dataclass
class MessageContext:
    """
    Context passed to message handlers.
    Contains the received message and the queue it came from.
    """

    qname: str
    message: Message
    worker_id: str
    max_receive_count: int

    @property
    def is_last_attempt(self) -> bool:
        """Check if this is the last receive before the message is dropped."""
        return self.message.rc >= self.max_receive_count

    @property
    def remaining_attempts(self) -> int:
        """Get remaining receives before the message is dropped."""
        return max(0, self.max_receive_count - self.message.rc)
