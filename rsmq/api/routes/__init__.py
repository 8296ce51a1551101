"""
API routes module.
"""

from rsmq.api.routes.health import router as health_router
from rsmq.api.routes.messages import router as messages_router
from rsmq.api.routes.queues import router as queues_router

__all__ = ["health_router", "queues_router", "messages_router"]
