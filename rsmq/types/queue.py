"""
Queue-related type definitions.
"""

from dataclasses import dataclass
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from rsmq.constants import (
    DEFAULT_DELAY,
    DEFAULT_MAXSIZE,
    DEFAULT_VT,
    MAX_DELAY,
    MAX_MAXSIZE,
    MAX_VT,
    MAXSIZE_UNLIMITED,
    MIN_DELAY,
    MIN_MAXSIZE,
    MIN_VT,
)
from rsmq.types.clock import StoreTime


def _check_maxsize(value: int | None) -> int | None:
    if value is None or value == MAXSIZE_UNLIMITED:
        return value
    if not MIN_MAXSIZE <= value <= MAX_MAXSIZE:
        raise ValueError(
            f"maxsize must be between {MIN_MAXSIZE} and {MAX_MAXSIZE} "
            f"or {MAXSIZE_UNLIMITED} for unlimited"
        )
    return value


MaxSize = Annotated[int, AfterValidator(_check_maxsize)]


class QueueOptions(BaseModel):
    """
    Options accepted when creating a queue.
    Validated before anything is written to the store.
    """

    vt: int = Field(default=DEFAULT_VT, ge=MIN_VT, le=MAX_VT)
    delay: int = Field(default=DEFAULT_DELAY, ge=MIN_DELAY, le=MAX_DELAY)
    maxsize: MaxSize = DEFAULT_MAXSIZE


class QueueAttributeUpdate(BaseModel):
    """Partial update of queue options. Unset fields are left untouched."""

    vt: int | None = Field(default=None, ge=MIN_VT, le=MAX_VT)
    delay: int | None = Field(default=None, ge=MIN_DELAY, le=MAX_DELAY)
    maxsize: MaxSize | None = None

    def provided(self) -> dict[str, int]:
        """Return only the fields the caller supplied."""
        return self.model_dump(exclude_none=True)


@dataclass
class QueueConfig:
    """
    Queue configuration read together with the store clock.

    ``time`` is the snapshot taken in the same atomic step as the config
    read; send derives both the message id and its score from it.
    """

    qname: str
    vt: int
    delay: int
    maxsize: int
    time: StoreTime

    @property
    def unlimited(self) -> bool:
        """Whether message bodies are unbounded."""
        return self.maxsize == MAXSIZE_UNLIMITED


class QueueAttributes(BaseModel):
    """
    Snapshot of a queue's configuration, counters and live message counts.

    ``msgs`` is the number of messages in the queue, ``hiddenmsgs`` the
    subset still delayed or in flight. Counters are never reconciled with
    the live count.
    """

    qname: str
    vt: int
    delay: int
    maxsize: int
    totalrecv: int = 0
    totalsent: int = 0
    created: int
    modified: int
    msgs: int = 0
    hiddenmsgs: int = 0
