"""
Queue client facade.

``RedisSMQ`` bundles queue management and message operations over one
store. It holds no mutable state besides the store's connection pool and
may be shared by any number of concurrent tasks.
"""

import redis.asyncio as redis

from rsmq.constants import (
    DEFAULT_DELAY,
    DEFAULT_MAXSIZE,
    DEFAULT_NAMESPACE,
    DEFAULT_VT,
    CreateQueueResult,
)
from rsmq.messages import MessageEngine
from rsmq.queues import QueueManager
from rsmq.store.base import QueueStore
from rsmq.store.redis import RedisStore
from rsmq.types.message import Message
from rsmq.types.queue import QueueAttributes, QueueConfig


class RedisSMQ:
    """
    Simple message queue over an atomic key-value store.

    Example:
        async with RedisSMQ.from_url("redis://localhost:6379/0") as rsmq:
            await rsmq.create_queue("jobs")
            message_id = await rsmq.send_message("jobs", "hello")
            message = await rsmq.receive_message("jobs")
            if message is not None:
                await rsmq.delete_message("jobs", message.id)
    """

    def __init__(self, store: QueueStore):
        self.store = store
        self.queues = QueueManager(store)
        self.messages = MessageEngine(store, self.queues)

    @classmethod
    def from_url(
        cls,
        url: str,
        namespace: str = DEFAULT_NAMESPACE,
        max_connections: int | None = None,
    ) -> "RedisSMQ":
        """
        Create a client backed by a Redis server.

        Args:
            url: Redis connection URL.
            namespace: Key prefix isolating this deployment.
            max_connections: Optional connection pool size.
        """
        client = redis.from_url(
            url,
            decode_responses=True,
            max_connections=max_connections,
        )
        return cls(RedisStore(client, namespace=namespace))

    async def __aenter__(self) -> "RedisSMQ":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def ping(self) -> bool:
        """Check that the store answers."""
        return await self.store.ping()

    async def close(self) -> None:
        """Release the store's connections."""
        await self.store.close()

    # Queues

    async def create_queue(
        self,
        qname: str,
        vt: int = DEFAULT_VT,
        delay: int = DEFAULT_DELAY,
        maxsize: int = DEFAULT_MAXSIZE,
    ) -> CreateQueueResult:
        return await self.queues.create_queue(qname, vt=vt, delay=delay, maxsize=maxsize)

    async def delete_queue(self, qname: str) -> bool:
        return await self.queues.delete_queue(qname)

    async def list_queues(self) -> list[str]:
        return await self.queues.list_queues()

    async def get_queue_config(self, qname: str) -> QueueConfig:
        return await self.queues.get_queue_config(qname)

    async def get_queue_attributes(self, qname: str) -> QueueAttributes:
        return await self.queues.get_queue_attributes(qname)

    async def set_queue_attributes(
        self,
        qname: str,
        vt: int | None = None,
        delay: int | None = None,
        maxsize: int | None = None,
    ) -> QueueAttributes:
        return await self.queues.set_queue_attributes(
            qname, vt=vt, delay=delay, maxsize=maxsize
        )

    # Messages

    async def send_message(self, qname: str, message: str, delay: int | None = None) -> str:
        return await self.messages.send_message(qname, message, delay=delay)

    async def receive_message(self, qname: str, vt: int | None = None) -> Message | None:
        return await self.messages.receive_message(qname, vt=vt)

    async def pop_message(self, qname: str) -> Message | None:
        return await self.messages.pop_message(qname)

    async def change_message_visibility(
        self, qname: str, message_id: str, vt: int
    ) -> int | None:
        return await self.messages.change_message_visibility(qname, message_id, vt)

    async def delete_message(self, qname: str, message_id: str) -> bool:
        return await self.messages.delete_message(qname, message_id)
