"""
Message handler registry.

Handlers are registered per queue. Delivery is at-least-once, so handlers
must be idempotent: a message is handed out again whenever its visibility
timeout elapses before the worker deletes it.
"""

import logging
from collections.abc import Awaitable, Callable

from rsmq.types.worker import HandlerResult, MessageContext

logger = logging.getLogger(__name__)

# Type alias for message handler functions
MessageHandler = Callable[[MessageContext], Awaitable[HandlerResult]]

# Handler registry
_handlers: dict[str, MessageHandler] = {}


def register_handler(qname: str) -> Callable[[MessageHandler], MessageHandler]:
    """
    Decorator to register the handler for a queue.

    Args:
        qname: The queue this handler consumes.

    Returns:
        Decorator function.

    Example:
        @register_handler("emails")
        async def handle_email(context: MessageContext) -> HandlerResult:
            ...
    """
    def decorator(handler: MessageHandler) -> MessageHandler:
        _handlers[qname] = handler
        logger.info(f"Registered handler for queue: {qname}")
        return handler
    return decorator


def unregister_handler(qname: str) -> None:
    """Remove the handler for a queue, if any."""
    _handlers.pop(qname, None)


def get_handler(qname: str) -> MessageHandler | None:
    """
    Get the handler for a queue.

    Returns:
        The handler function or None if not found.
    """
    return _handlers.get(qname)


def list_handlers() -> list[str]:
    """List all queues with a registered handler."""
    return list(_handlers.keys())


async def execute_message(context: MessageContext) -> HandlerResult:
    """
    Run the handler registered for the message's queue.

    Handler exceptions are turned into failed results.

    Args:
        context: The message context.

    Returns:
        HandlerResult from the handler.
    """
    handler = get_handler(context.qname)

    if handler is None:
        logger.error(
            f"No handler for queue: {context.qname}",
            extra={"message_id": context.message.id}
        )
        return HandlerResult(
            success=False,
            error=f"No handler registered for queue: {context.qname}",
        )

    try:
        return await handler(context)
    except Exception as e:
        logger.exception(
            "Handler raised exception",
            extra={"message_id": context.message.id, "error": str(e)}
        )
        return HandlerResult(
            success=False,
            error=f"Handler exception: {str(e)}",
        )
