"""
Message operations.

Each operation reads the queue configuration and the store clock in one
atomic step, derives its timing values from that snapshot, then applies one
atomic step against the store. An empty queue or an unknown message id is
an ordinary outcome reported as ``None`` or ``False``.
"""

import logging

from rsmq.constants import MAX_DELAY, MAX_VT, MIN_DELAY, MIN_VT
from rsmq.errors import InvalidMessageIdError, InvalidOptionError, MessageTooLongError
from rsmq.ids import decode_sent, is_valid_message_id, make_message_id
from rsmq.observability.metrics import get_metrics
from rsmq.queues import QueueManager, validate_qname
from rsmq.store.base import QueueStore, StoredMessage
from rsmq.types.message import Message

logger = logging.getLogger(__name__)


def _check_seconds(name: str, value: int, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise InvalidOptionError(f"{name} must be an integer between {low} and {high}")
    return value


def _validate_message_id(message_id: str) -> str:
    if not isinstance(message_id, str) or not is_valid_message_id(message_id):
        raise InvalidMessageIdError(str(message_id))
    return message_id


def _to_message(stored: StoredMessage) -> Message:
    return Message(
        id=stored.id,
        message=stored.body,
        rc=stored.rc,
        fr=stored.fr,
        sent=decode_sent(stored.id),
    )


class MessageEngine:
    """
    Send, receive, pop, delete and visibility changes for queue messages.

    Concurrent receivers never get the same eligible message: the store
    claims and rescores it in one step.
    """

    def __init__(self, store: QueueStore, queues: QueueManager):
        """
        Initialize the engine.

        Args:
            store: The store holding queue state.
            queues: Manager used to read configuration and store time.
        """
        self._store = store
        self._queues = queues
        self._metrics = get_metrics()

    async def send_message(
        self,
        qname: str,
        message: str,
        delay: int | None = None,
    ) -> str:
        """
        Add a message to a queue.

        The new id and the visibility score come from the same store clock
        reading, so the id's embedded send time matches the score.

        Args:
            qname: The queue name.
            message: The message body.
            delay: Seconds before the message becomes receivable. Defaults
                to the queue's delay.

        Returns:
            The new message id.

        Raises:
            MessageTooLongError: If the body exceeds the queue's maxsize.
            QueueNotFoundError: If the queue does not exist.
        """
        validate_qname(qname)
        if not isinstance(message, str):
            raise InvalidOptionError("message must be a string")
        if delay is not None:
            _check_seconds("delay", delay, MIN_DELAY, MAX_DELAY)

        config = await self._queues.get_queue_config(qname)
        size = len(message.encode("utf-8"))
        if not config.unlimited and size > config.maxsize:
            raise MessageTooLongError(qname, size, config.maxsize)

        message_id = make_message_id(config.time)
        effective_delay = config.delay if delay is None else delay
        await self._store.send_message(
            qname, message_id, message, config.time.after(effective_delay)
        )

        self._metrics.record_message_sent(qname)
        logger.debug(
            "Message sent",
            extra={"qname": qname, "message_id": message_id, "delay": effective_delay},
        )
        return message_id

    async def receive_message(self, qname: str, vt: int | None = None) -> Message | None:
        """
        Receive the next eligible message and hide it for ``vt`` seconds.

        The message stays in the queue; it becomes eligible again once the
        hide duration elapses unless it is deleted first.

        Args:
            qname: The queue name.
            vt: Seconds to hide the message. Defaults to the queue's vt.

        Returns:
            The message, or None if no message is eligible.
        """
        validate_qname(qname)
        if vt is not None:
            _check_seconds("vt", vt, MIN_VT, MAX_VT)

        config = await self._queues.get_queue_config(qname)
        hide_for = config.vt if vt is None else vt
        stored = await self._store.receive_message(
            qname, config.time.millis, config.time.after(hide_for)
        )
        if stored is None:
            self._metrics.record_empty_receive(qname)
            return None

        self._metrics.record_message_received(qname)
        return _to_message(stored)

    async def pop_message(self, qname: str) -> Message | None:
        """
        Receive the next eligible message and delete it in the same step.

        Returns:
            The message, or None if no message is eligible.
        """
        validate_qname(qname)
        config = await self._queues.get_queue_config(qname)
        stored = await self._store.pop_message(qname, config.time.millis)
        if stored is None:
            self._metrics.record_empty_receive(qname)
            return None

        self._metrics.record_message_received(qname)
        self._metrics.record_message_deleted(qname)
        return _to_message(stored)

    async def change_message_visibility(
        self,
        qname: str,
        message_id: str,
        vt: int,
    ) -> int | None:
        """
        Hide a message for ``vt`` seconds from now.

        Returns:
            The new visibility time in ms since epoch, or None if the
            message is not in the queue.
        """
        validate_qname(qname)
        _validate_message_id(message_id)
        _check_seconds("vt", vt, MIN_VT, MAX_VT)

        config = await self._queues.get_queue_config(qname)
        expires_at = config.time.after(vt)
        changed = await self._store.change_message_visibility(qname, message_id, expires_at)
        if not changed:
            logger.debug(
                "Visibility unchanged, message not found",
                extra={"qname": qname, "message_id": message_id},
            )
            return None
        return expires_at

    async def delete_message(self, qname: str, message_id: str) -> bool:
        """
        Delete a message.

        Returns:
            True if the message was deleted, False if it was not found.
        """
        validate_qname(qname)
        _validate_message_id(message_id)

        deleted = await self._store.delete_message(qname, message_id)
        if deleted:
            self._metrics.record_message_deleted(qname)
        return deleted
