"""
Queue metadata management.

Creates, deletes and lists queues and reads or updates their configuration.
Reading the configuration also reads the store clock in the same atomic
step, which is the snapshot every message operation times itself by.
"""

import logging
import re

from pydantic import ValidationError as PydanticValidationError

from rsmq.constants import (
    DEFAULT_DELAY,
    DEFAULT_MAXSIZE,
    DEFAULT_VT,
    FIELD_CREATED,
    FIELD_MODIFIED,
    QUEUE_NAME_PATTERN,
    CreateQueueResult,
)
from rsmq.errors import (
    InvalidOptionError,
    InvalidQueueNameError,
    NoAttributeSupplied,
    QueueNotFoundError,
)
from rsmq.store.base import QueueStore
from rsmq.types.queue import (
    QueueAttributes,
    QueueAttributeUpdate,
    QueueConfig,
    QueueOptions,
)

logger = logging.getLogger(__name__)

_QUEUE_NAME_RE = re.compile(QUEUE_NAME_PATTERN)


def validate_qname(qname: str) -> str:
    """
    Check a queue name against the allowed pattern.

    Raises:
        InvalidQueueNameError: If the name is empty, too long or has
            characters outside ``[A-Za-z0-9_-]``.
    """
    if not isinstance(qname, str) or not _QUEUE_NAME_RE.match(qname):
        raise InvalidQueueNameError(str(qname))
    return qname


def _options_error(exc: PydanticValidationError) -> InvalidOptionError:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    return InvalidOptionError(f"Invalid queue options: {details}")


class QueueManager:
    """
    Queue-level operations over a :class:`QueueStore`.

    Stateless apart from the store reference; safe for concurrent use.
    """

    def __init__(self, store: QueueStore):
        """
        Initialize the manager.

        Args:
            store: The store holding queue state.
        """
        self._store = store

    async def create_queue(
        self,
        qname: str,
        vt: int = DEFAULT_VT,
        delay: int = DEFAULT_DELAY,
        maxsize: int = DEFAULT_MAXSIZE,
    ) -> CreateQueueResult:
        """
        Create a queue if it does not exist.

        Fields are written with set-if-absent semantics, so concurrent
        creators race harmlessly and an existing configuration is kept.

        Args:
            qname: The queue name.
            vt: Default visibility timeout in seconds.
            delay: Default delivery delay in seconds.
            maxsize: Maximum message size in bytes, -1 for unlimited.

        Returns:
            CREATED if this call created the queue, EXISTED otherwise.
        """
        validate_qname(qname)
        try:
            options = QueueOptions(vt=vt, delay=delay, maxsize=maxsize)
        except PydanticValidationError as e:
            raise _options_error(e) from None

        now = await self._store.time()
        created = await self._store.create_queue(
            qname, options.vt, options.delay, options.maxsize, now
        )
        result = CreateQueueResult.CREATED if created else CreateQueueResult.EXISTED

        logger.info(
            "Queue created" if created else "Queue already exists",
            extra={"qname": qname, "result": result.value},
        )
        return result

    async def delete_queue(self, qname: str) -> bool:
        """
        Delete a queue and all of its messages.

        Deleting an absent queue is not an error.

        Returns:
            True if the queue existed.
        """
        validate_qname(qname)
        removed = await self._store.delete_queue(qname)
        logger.info("Queue deleted", extra={"qname": qname, "existed": removed})
        return removed

    async def list_queues(self) -> list[str]:
        """Return the names of all queues in this namespace."""
        return await self._store.list_queues()

    async def get_queue_config(self, qname: str) -> QueueConfig:
        """
        Read a queue's options together with the current store time.

        Raises:
            QueueNotFoundError: If the queue has no configuration.
        """
        validate_qname(qname)
        vt, delay, maxsize, now = await self._store.get_queue_config(qname)
        if vt is None or delay is None or maxsize is None:
            raise QueueNotFoundError(qname)
        return QueueConfig(qname=qname, vt=vt, delay=delay, maxsize=maxsize, time=now)

    async def get_queue_attributes(self, qname: str) -> QueueAttributes:
        """
        Read a queue's options, counters and live message counts.

        ``hiddenmsgs`` counts messages whose score is at or after the
        current store time.

        Raises:
            QueueNotFoundError: If the queue has no configuration.
        """
        validate_qname(qname)
        now = await self._store.time()
        fields, msgs, hidden = await self._store.get_queue_attributes(qname, now)
        if fields.get(FIELD_CREATED) is None:
            raise QueueNotFoundError(qname)

        return QueueAttributes(
            qname=qname,
            **{name: value or 0 for name, value in fields.items()},
            msgs=msgs,
            hiddenmsgs=hidden,
        )

    async def set_queue_attributes(
        self,
        qname: str,
        vt: int | None = None,
        delay: int | None = None,
        maxsize: int | None = None,
    ) -> QueueAttributes:
        """
        Update only the supplied options of an existing queue.

        Returns:
            The refreshed attribute snapshot.

        Raises:
            NoAttributeSupplied: If no option was given.
            QueueNotFoundError: If the queue has no configuration.
        """
        validate_qname(qname)
        try:
            update = QueueAttributeUpdate(vt=vt, delay=delay, maxsize=maxsize)
        except PydanticValidationError as e:
            raise _options_error(e) from None

        fields = update.provided()
        if not fields:
            raise NoAttributeSupplied()

        config = await self.get_queue_config(qname)
        await self._store.set_queue_attributes(qname, fields, config.time)

        logger.info(
            "Queue attributes updated",
            extra={"qname": qname, "fields": fields, FIELD_MODIFIED: config.time.seconds},
        )
        return await self.get_queue_attributes(qname)
