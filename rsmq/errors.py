"""
Queue error types.

Validation failures are raised before the store is touched. Empty results
(no eligible message, unknown message id) are not errors and are returned
as ``None`` by the operations. Store and transport failures raised by the
Redis client propagate unchanged.
"""

from typing import Any


class RSMQError(Exception):
    """
    Base exception for queue errors.

    Carries a human-readable message and optional context data that the
    HTTP layer serializes alongside the error.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "context": self.context,
        }


class ValidationError(RSMQError):
    """Caller input rejected before any store interaction."""


class InvalidQueueNameError(ValidationError):
    """Queue name does not match the allowed pattern."""

    def __init__(self, qname: str):
        super().__init__(
            f"Invalid queue name: {qname!r}",
            context={"qname": qname},
        )


class InvalidOptionError(ValidationError):
    """A queue option (vt, delay, maxsize) is out of range."""


class NoAttributeSupplied(ValidationError):
    """set_queue_attributes was called without any attribute."""

    def __init__(self) -> None:
        super().__init__("No attribute was supplied")


class MessageTooLongError(ValidationError):
    """Message body exceeds the queue's maxsize."""

    def __init__(self, qname: str, size: int, maxsize: int):
        super().__init__(
            f"Message is too long: {size} bytes exceeds {maxsize}",
            context={"qname": qname, "size": size, "maxsize": maxsize},
        )


class InvalidMessageIdError(ValidationError):
    """
    Message id is malformed.

    Also raised when the timestamp prefix of an id read back from the store
    cannot be decoded, which means the stored state is corrupt or was
    written by a foreign id scheme.
    """

    def __init__(self, message_id: str, reason: str = "Invalid message id"):
        super().__init__(
            f"{reason}: {message_id!r}",
            context={"id": message_id},
        )


class QueueNotFoundError(RSMQError):
    """The queue has no configuration in the store."""

    def __init__(self, qname: str):
        super().__init__(
            f"Queue not found: {qname}",
            context={"qname": qname},
        )
