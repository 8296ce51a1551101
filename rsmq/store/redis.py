"""
Redis-backed queue store.

Single-key reads and multi-command writes go through MULTI/EXEC pipelines;
read-check-write steps run as registered Lua scripts.
"""

import logging

from redis.asyncio import Redis

from rsmq.constants import (
    DEFAULT_NAMESPACE,
    FIELD_CREATED,
    FIELD_DELAY,
    FIELD_MAXSIZE,
    FIELD_MODIFIED,
    FIELD_TOTAL_RECV,
    FIELD_TOTAL_SENT,
    FIELD_VT,
)
from rsmq.store.base import ATTRIBUTE_FIELDS, QueueStore, StoredMessage
from rsmq.store.scripts import (
    CHANGE_MESSAGE_VISIBILITY,
    POP_MESSAGE,
    RECEIVE_MESSAGE,
)
from rsmq.types.clock import StoreTime

logger = logging.getLogger(__name__)


def _int_or_none(value: str | None) -> int | None:
    return None if value is None else int(value)


def _stored_message(reply: list) -> StoredMessage | None:
    if not reply:
        return None
    message_id, body, rc, fr = reply
    return StoredMessage(
        id=message_id,
        body="" if body is None else body,
        rc=int(rc),
        fr=int(fr),
    )


class RedisStore(QueueStore):
    """
    Queue store on a Redis server.

    The client must be created with ``decode_responses=True``.
    """

    def __init__(self, client: Redis, namespace: str = DEFAULT_NAMESPACE):
        """
        Initialize the store and register its scripts.

        Args:
            client: An async Redis client.
            namespace: Key prefix isolating this deployment.
        """
        super().__init__(namespace)
        self._client = client
        self._receive = client.register_script(RECEIVE_MESSAGE)
        self._pop = client.register_script(POP_MESSAGE)
        self._change_visibility = client.register_script(CHANGE_MESSAGE_VISIBILITY)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def time(self) -> StoreTime:
        seconds, micros = await self._client.time()
        return StoreTime(seconds=int(seconds), microseconds=int(micros))

    async def create_queue(
        self, qname: str, vt: int, delay: int, maxsize: int, now: StoreTime
    ) -> bool:
        key = self.hash_key(qname)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hsetnx(key, FIELD_VT, vt)
            pipe.hsetnx(key, FIELD_DELAY, delay)
            pipe.hsetnx(key, FIELD_MAXSIZE, maxsize)
            pipe.hsetnx(key, FIELD_TOTAL_RECV, 0)
            pipe.hsetnx(key, FIELD_TOTAL_SENT, 0)
            pipe.hsetnx(key, FIELD_CREATED, now.seconds)
            pipe.hsetnx(key, FIELD_MODIFIED, now.seconds)
            pipe.sadd(self.queues_key(), qname)
            results = await pipe.execute()

        # results[5] is the HSETNX on "created"
        return bool(results[5])

    async def delete_queue(self, qname: str) -> bool:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.delete(self.hash_key(qname))
            pipe.delete(self.queue_key(qname))
            pipe.srem(self.queues_key(), qname)
            results = await pipe.execute()
        return any(results)

    async def list_queues(self) -> list[str]:
        return list(await self._client.smembers(self.queues_key()))

    async def get_queue_config(
        self, qname: str
    ) -> tuple[int | None, int | None, int | None, StoreTime]:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hmget(self.hash_key(qname), [FIELD_VT, FIELD_DELAY, FIELD_MAXSIZE])
            pipe.time()
            (vt, delay, maxsize), (seconds, micros) = await pipe.execute()

        return (
            _int_or_none(vt),
            _int_or_none(delay),
            _int_or_none(maxsize),
            StoreTime(seconds=int(seconds), microseconds=int(micros)),
        )

    async def get_queue_attributes(
        self, qname: str, now: StoreTime
    ) -> tuple[dict[str, int | None], int, int]:
        key = self.queue_key(qname)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hmget(self.hash_key(qname), list(ATTRIBUTE_FIELDS))
            pipe.zcard(key)
            pipe.zcount(key, now.millis, "+inf")
            values, msgs, hidden = await pipe.execute()

        fields = {
            name: _int_or_none(value) for name, value in zip(ATTRIBUTE_FIELDS, values)
        }
        return fields, int(msgs), int(hidden)

    async def set_queue_attributes(
        self, qname: str, fields: dict[str, int], now: StoreTime
    ) -> None:
        key = self.hash_key(qname)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(key, FIELD_MODIFIED, now.seconds)
            for name, value in fields.items():
                pipe.hset(key, name, value)
            await pipe.execute()

    async def send_message(
        self, qname: str, message_id: str, body: str, score: int
    ) -> None:
        hash_key = self.hash_key(qname)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.zadd(self.queue_key(qname), {message_id: score})
            pipe.hset(hash_key, message_id, body)
            pipe.hincrby(hash_key, FIELD_TOTAL_SENT, 1)
            await pipe.execute()

    async def receive_message(
        self, qname: str, now_ms: int, expires_at: int
    ) -> StoredMessage | None:
        reply = await self._receive(
            keys=[self.queue_key(qname), self.hash_key(qname)],
            args=[now_ms, expires_at],
        )
        return _stored_message(reply)

    async def pop_message(self, qname: str, now_ms: int) -> StoredMessage | None:
        reply = await self._pop(
            keys=[self.queue_key(qname), self.hash_key(qname)],
            args=[now_ms],
        )
        return _stored_message(reply)

    async def change_message_visibility(
        self, qname: str, message_id: str, expires_at: int
    ) -> bool:
        changed = await self._change_visibility(
            keys=[self.queue_key(qname), self.hash_key(qname)],
            args=[message_id, expires_at],
        )
        return bool(changed)

    async def delete_message(self, qname: str, message_id: str) -> bool:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.zrem(self.queue_key(qname), message_id)
            pipe.hdel(
                self.hash_key(qname),
                message_id,
                self.rc_field(message_id),
                self.fr_field(message_id),
            )
            removed, fields_removed = await pipe.execute()
        return removed == 1 and fields_removed > 0

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis store closed", extra={"namespace": self.namespace})
