"""
Abstract base for queue stores.

A store exposes the queue's persistent state as a set of atomic steps.
Every method applies fully or not at all and never interleaves with another
caller's step on the same queue. Timing values are computed by the caller
from a :class:`StoreTime` snapshot obtained through :meth:`QueueStore.time`
or :meth:`QueueStore.get_queue_config`.
"""

from abc import ABC, abstractmethod
from typing import NamedTuple

from rsmq.constants import (
    DEFAULT_NAMESPACE,
    FIELD_CREATED,
    FIELD_DELAY,
    FIELD_FR,
    FIELD_MAXSIZE,
    FIELD_MODIFIED,
    FIELD_RC,
    FIELD_TOTAL_RECV,
    FIELD_TOTAL_SENT,
    FIELD_VT,
    NAMESPACE_SEP,
    QUEUE_HASH_SUFFIX,
    QUEUES_SET_SUFFIX,
)
from rsmq.types.clock import StoreTime

ATTRIBUTE_FIELDS = (
    FIELD_VT,
    FIELD_DELAY,
    FIELD_MAXSIZE,
    FIELD_TOTAL_RECV,
    FIELD_TOTAL_SENT,
    FIELD_CREATED,
    FIELD_MODIFIED,
)


class StoredMessage(NamedTuple):
    """Raw message fields as returned by a receive or pop step."""

    id: str
    body: str
    rc: int
    fr: int


class QueueStore(ABC):
    """
    Abstract base class for queue persistence.

    Keys are namespaced so several deployments can share one store:

    - ``{ns}:QUEUES``: set of queue names
    - ``{ns}:{qname}:Q``: hash of config, counters and message bodies
    - ``{ns}:{qname}``: sorted set of message id to visibility score (ms)
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace or DEFAULT_NAMESPACE

    def queues_key(self) -> str:
        return NAMESPACE_SEP.join((self.namespace, QUEUES_SET_SUFFIX))

    def queue_key(self, qname: str) -> str:
        return NAMESPACE_SEP.join((self.namespace, qname))

    def hash_key(self, qname: str) -> str:
        return NAMESPACE_SEP.join((self.namespace, qname, QUEUE_HASH_SUFFIX))

    @staticmethod
    def rc_field(message_id: str) -> str:
        return NAMESPACE_SEP.join((message_id, FIELD_RC))

    @staticmethod
    def fr_field(message_id: str) -> str:
        return NAMESPACE_SEP.join((message_id, FIELD_FR))

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the store answers."""

    @abstractmethod
    async def time(self) -> StoreTime:
        """Read the store clock."""

    @abstractmethod
    async def create_queue(
        self, qname: str, vt: int, delay: int, maxsize: int, now: StoreTime
    ) -> bool:
        """
        Set each config and counter field only if absent and register the name.

        Returns:
            True if this call created the queue, False if it already existed.
        """

    @abstractmethod
    async def delete_queue(self, qname: str) -> bool:
        """
        Remove the queue hash, its message set and its registry entry.

        Returns:
            True if anything was removed.
        """

    @abstractmethod
    async def list_queues(self) -> list[str]:
        """Return the registered queue names in no particular order."""

    @abstractmethod
    async def get_queue_config(
        self, qname: str
    ) -> tuple[int | None, int | None, int | None, StoreTime]:
        """Read ``vt``, ``delay``, ``maxsize`` and the store clock in one step."""

    @abstractmethod
    async def get_queue_attributes(
        self, qname: str, now: StoreTime
    ) -> tuple[dict[str, int | None], int, int]:
        """
        Read all config and counter fields plus live counts in one step.

        Returns:
            Tuple of (fields, message count, count of messages scored at or
            after ``now``).
        """

    @abstractmethod
    async def set_queue_attributes(
        self, qname: str, fields: dict[str, int], now: StoreTime
    ) -> None:
        """Overwrite the given config fields and bump ``modified``."""

    @abstractmethod
    async def send_message(
        self, qname: str, message_id: str, body: str, score: int
    ) -> None:
        """Insert the message with its score and body, increment ``totalsent``."""

    @abstractmethod
    async def receive_message(
        self, qname: str, now_ms: int, expires_at: int
    ) -> StoredMessage | None:
        """
        Claim the lowest scored eligible message and hide it until ``expires_at``.

        Increments ``totalrecv`` and the message's receive count; records the
        first receive time on the first receive.
        """

    @abstractmethod
    async def pop_message(self, qname: str, now_ms: int) -> StoredMessage | None:
        """Claim the lowest scored eligible message and remove it."""

    @abstractmethod
    async def change_message_visibility(
        self, qname: str, message_id: str, expires_at: int
    ) -> bool:
        """
        Rescore an existing message.

        Returns:
            False if the message is not in the queue.
        """

    @abstractmethod
    async def delete_message(self, qname: str, message_id: str) -> bool:
        """
        Remove a message and its sidecar fields.

        Returns:
            True only if both the set entry and at least one hash field went away.
        """

    async def close(self) -> None:
        """Release connections held by the store."""
