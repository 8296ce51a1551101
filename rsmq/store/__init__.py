"""
Store module.
Contains the store interface and its Redis and in-memory implementations.
Client lifecycle helpers live in ``rsmq.store.connection``.
"""

from rsmq.store.base import QueueStore, StoredMessage
from rsmq.store.memory import MemoryStore
from rsmq.store.redis import RedisStore

__all__ = [
    "QueueStore",
    "StoredMessage",
    "RedisStore",
    "MemoryStore",
]
