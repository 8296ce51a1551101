"""
In-memory queue store.

Mirrors the Redis layout and step semantics inside the process. Each step
holds a single lock, which gives the same indivisibility the Redis scripts
and transactions provide. Useful for tests and single-process deployments.
"""

import asyncio
import heapq
import time
from collections.abc import Callable

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
from rsmq.types.clock import StoreTime


def _system_micros() -> int:
    return time.time_ns() // 1_000


class ScoredSet:
    """
    Members ordered by (score, member), like a Redis sorted set.

    Backed by a heap with lazy deletion: insert and rescore push a new entry
    in O(log n), remove only drops the member from the score index, and
    entries whose score no longer matches the index are discarded when they
    reach the top. The heap is rebuilt once stale entries outnumber live
    ones, which keeps it within a constant factor of the live size.
    """

    def __init__(self) -> None:
        self._scores: dict[str, int] = {}
        self._heap: list[tuple[int, str]] = []

    def __len__(self) -> int:
        return len(self._scores)

    def __contains__(self, member: str) -> bool:
        return member in self._scores

    def score(self, member: str) -> int | None:
        return self._scores.get(member)

    def add(self, member: str, score: int) -> None:
        if self._scores.get(member) == score:
            return
        self._scores[member] = score
        heapq.heappush(self._heap, (score, member))
        self._maybe_compact()

    def remove(self, member: str) -> bool:
        if self._scores.pop(member, None) is None:
            return False
        self._maybe_compact()
        return True

    def first_at_or_below(self, max_score: int) -> str | None:
        """Lowest ranked member with score <= max_score."""
        self._discard_stale_top()
        if not self._heap or self._heap[0][0] > max_score:
            return None
        return self._heap[0][1]

    def count_from(self, min_score: int) -> int:
        """Number of members with score >= min_score. Linear in the set size."""
        return sum(1 for score in self._scores.values() if score >= min_score)

    def _live(self, entry: tuple[int, str]) -> bool:
        score, member = entry
        return self._scores.get(member) == score

    def _discard_stale_top(self) -> None:
        while self._heap and not self._live(self._heap[0]):
            heapq.heappop(self._heap)

    def _maybe_compact(self) -> None:
        if len(self._heap) > 2 * len(self._scores) + 16:
            self._heap = [(score, member) for member, score in self._scores.items()]
            heapq.heapify(self._heap)


class MemoryStore(QueueStore):
    """
    Queue store held in process memory.

    Args:
        namespace: Key prefix, kept so keys match the Redis layout.
        clock: Returns microseconds since epoch. Defaults to the system clock.
    """

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Callable[[], int] | None = None,
    ):
        super().__init__(namespace)
        self._clock = clock or _system_micros
        self._lock = asyncio.Lock()
        self._sets: dict[str, set[str]] = {}
        self._hashes: dict[str, dict[str, int | str]] = {}
        self._zsets: dict[str, ScoredSet] = {}

    def _now(self) -> StoreTime:
        seconds, micros = divmod(self._clock(), 1_000_000)
        return StoreTime(seconds=seconds, microseconds=micros)

    def _hash(self, qname: str) -> dict[str, int | str]:
        return self._hashes.setdefault(self.hash_key(qname), {})

    def _zset(self, qname: str) -> ScoredSet:
        return self._zsets.setdefault(self.queue_key(qname), ScoredSet())

    def _prune(self, qname: str) -> None:
        # Redis drops keys that become empty
        hash_key, queue_key = self.hash_key(qname), self.queue_key(qname)
        if not self._hashes.get(hash_key, True):
            del self._hashes[hash_key]
        if queue_key in self._zsets and not self._zsets[queue_key]:
            del self._zsets[queue_key]

    async def ping(self) -> bool:
        return True

    async def time(self) -> StoreTime:
        return self._now()

    async def create_queue(
        self, qname: str, vt: int, delay: int, maxsize: int, now: StoreTime
    ) -> bool:
        async with self._lock:
            fields = self._hash(qname)
            created = FIELD_CREATED not in fields
            defaults = {
                FIELD_VT: vt,
                FIELD_DELAY: delay,
                FIELD_MAXSIZE: maxsize,
                FIELD_TOTAL_RECV: 0,
                FIELD_TOTAL_SENT: 0,
                FIELD_CREATED: now.seconds,
                FIELD_MODIFIED: now.seconds,
            }
            for name, value in defaults.items():
                fields.setdefault(name, value)
            self._sets.setdefault(self.queues_key(), set()).add(qname)
            return created

    async def delete_queue(self, qname: str) -> bool:
        async with self._lock:
            removed = self._hashes.pop(self.hash_key(qname), None) is not None
            removed |= self._zsets.pop(self.queue_key(qname), None) is not None
            names = self._sets.get(self.queues_key(), set())
            if qname in names:
                names.discard(qname)
                removed = True
            return removed

    async def list_queues(self) -> list[str]:
        async with self._lock:
            return list(self._sets.get(self.queues_key(), ()))

    async def get_queue_config(
        self, qname: str
    ) -> tuple[int | None, int | None, int | None, StoreTime]:
        async with self._lock:
            fields = self._hashes.get(self.hash_key(qname), {})
            return (
                fields.get(FIELD_VT),
                fields.get(FIELD_DELAY),
                fields.get(FIELD_MAXSIZE),
                self._now(),
            )

    async def get_queue_attributes(
        self, qname: str, now: StoreTime
    ) -> tuple[dict[str, int | None], int, int]:
        async with self._lock:
            fields = self._hashes.get(self.hash_key(qname), {})
            zset = self._zsets.get(self.queue_key(qname), ScoredSet())
            values = {name: fields.get(name) for name in ATTRIBUTE_FIELDS}
            return values, len(zset), zset.count_from(now.millis)

    async def set_queue_attributes(
        self, qname: str, fields: dict[str, int], now: StoreTime
    ) -> None:
        async with self._lock:
            stored = self._hash(qname)
            stored[FIELD_MODIFIED] = now.seconds
            stored.update(fields)

    async def send_message(
        self, qname: str, message_id: str, body: str, score: int
    ) -> None:
        async with self._lock:
            self._zset(qname).add(message_id, score)
            fields = self._hash(qname)
            fields[message_id] = body
            fields[FIELD_TOTAL_SENT] = int(fields.get(FIELD_TOTAL_SENT, 0)) + 1

    def _claim(self, qname: str, now_ms: int) -> StoredMessage | None:
        zset = self._zsets.get(self.queue_key(qname))
        message_id = zset.first_at_or_below(now_ms) if zset else None
        if message_id is None:
            return None

        fields = self._hash(qname)
        fields[FIELD_TOTAL_RECV] = int(fields.get(FIELD_TOTAL_RECV, 0)) + 1
        rc_field = self.rc_field(message_id)
        rc = int(fields.get(rc_field, 0)) + 1
        fields[rc_field] = rc
        if rc == 1:
            fr = now_ms
        else:
            fr = int(fields.get(self.fr_field(message_id), 0))
        body = fields.get(message_id)
        return StoredMessage(
            id=message_id, body="" if body is None else str(body), rc=rc, fr=fr
        )

    async def receive_message(
        self, qname: str, now_ms: int, expires_at: int
    ) -> StoredMessage | None:
        async with self._lock:
            claimed = self._claim(qname, now_ms)
            if claimed is None:
                return None
            self._zset(qname).add(claimed.id, expires_at)
            if claimed.rc == 1:
                self._hash(qname)[self.fr_field(claimed.id)] = claimed.fr
            return claimed

    async def pop_message(self, qname: str, now_ms: int) -> StoredMessage | None:
        async with self._lock:
            claimed = self._claim(qname, now_ms)
            if claimed is None:
                return None
            self._zset(qname).remove(claimed.id)
            fields = self._hash(qname)
            for name in (claimed.id, self.rc_field(claimed.id), self.fr_field(claimed.id)):
                fields.pop(name, None)
            self._prune(qname)
            return claimed

    async def change_message_visibility(
        self, qname: str, message_id: str, expires_at: int
    ) -> bool:
        async with self._lock:
            zset = self._zsets.get(self.queue_key(qname))
            if zset is None or message_id not in zset:
                return False
            zset.add(message_id, expires_at)
            return True

    async def delete_message(self, qname: str, message_id: str) -> bool:
        async with self._lock:
            zset = self._zsets.get(self.queue_key(qname))
            removed = zset.remove(message_id) if zset is not None else False
            fields = self._hashes.get(self.hash_key(qname), {})
            fields_removed = 0
            for name in (message_id, self.rc_field(message_id), self.fr_field(message_id)):
                if fields.pop(name, None) is not None:
                    fields_removed += 1
            self._prune(qname)
            return removed and fields_removed > 0
