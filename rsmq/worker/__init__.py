"""
Worker module.
Contains the queue consumer and the handler registry.
"""

from rsmq.worker.handlers import execute_message, get_handler, list_handlers, register_handler
from rsmq.worker.main import Worker, run

__all__ = ["Worker", "run", "register_handler", "get_handler", "list_handlers", "execute_message"]
