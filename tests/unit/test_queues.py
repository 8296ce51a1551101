"""
Unit tests for queue management.
"""

import pytest

from rsmq.client import RedisSMQ
from rsmq.constants import CreateQueueResult
from rsmq.errors import (
    InvalidOptionError,
    InvalidQueueNameError,
    NoAttributeSupplied,
    QueueNotFoundError,
)


class TestCreateQueue:
    """Tests for queue creation."""

    @pytest.mark.asyncio
    async def test_create_queue(self, rsmq: RedisSMQ, clock):
        """A new queue starts with default options and zero counters."""
        result = await rsmq.create_queue("jobs")

        assert result == CreateQueueResult.CREATED

        attributes = await rsmq.get_queue_attributes("jobs")
        assert attributes.vt == 30
        assert attributes.delay == 0
        assert attributes.maxsize == 65536
        assert attributes.totalrecv == 0
        assert attributes.totalsent == 0
        assert attributes.created == clock.micros // 1_000_000
        assert attributes.modified == attributes.created
        assert attributes.msgs == 0
        assert attributes.hiddenmsgs == 0

    @pytest.mark.asyncio
    async def test_create_existing_queue_keeps_config(self, rsmq: RedisSMQ, clock):
        """Creating an existing queue reports EXISTED and changes nothing."""
        await rsmq.create_queue("jobs", vt=60)
        clock.advance(100)

        result = await rsmq.create_queue("jobs", vt=5, delay=10, maxsize=2048)

        assert result == CreateQueueResult.EXISTED
        attributes = await rsmq.get_queue_attributes("jobs")
        assert attributes.vt == 60
        assert attributes.delay == 0
        assert attributes.maxsize == 65536
        assert attributes.created == (clock.micros // 1_000_000) - 100

    @pytest.mark.asyncio
    async def test_create_unlimited_queue(self, rsmq: RedisSMQ):
        await rsmq.create_queue("jobs", maxsize=-1)
        config = await rsmq.get_queue_config("jobs")
        assert config.unlimited

    @pytest.mark.asyncio
    @pytest.mark.parametrize("qname", ["", "a" * 161, "has space", "dots.not.allowed", "colon:name"])
    async def test_invalid_queue_name(self, rsmq: RedisSMQ, qname: str):
        with pytest.raises(InvalidQueueNameError):
            await rsmq.create_queue(qname)

    @pytest.mark.asyncio
    async def test_longest_queue_name(self, rsmq: RedisSMQ):
        assert await rsmq.create_queue("a" * 160) == CreateQueueResult.CREATED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "options",
        [
            {"vt": -1},
            {"vt": 10_000_000},
            {"delay": -1},
            {"delay": 10_000_000},
            {"maxsize": 1023},
            {"maxsize": 65537},
            {"maxsize": 0},
        ],
    )
    async def test_invalid_options(self, rsmq: RedisSMQ, options: dict):
        """Out-of-range options are rejected before anything is written."""
        with pytest.raises(InvalidOptionError):
            await rsmq.create_queue("jobs", **options)

        assert await rsmq.list_queues() == []

    @pytest.mark.asyncio
    async def test_boundary_options(self, rsmq: RedisSMQ):
        result = await rsmq.create_queue("jobs", vt=9_999_999, delay=9_999_999, maxsize=1024)
        assert result == CreateQueueResult.CREATED


class TestListAndDeleteQueues:
    """Tests for listing and deleting queues."""

    @pytest.mark.asyncio
    async def test_list_queues(self, rsmq: RedisSMQ):
        await rsmq.create_queue("a")
        await rsmq.create_queue("b")

        assert sorted(await rsmq.list_queues()) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_delete_queue_removes_messages(self, rsmq: RedisSMQ):
        await rsmq.create_queue("jobs")
        await rsmq.send_message("jobs", "hello")

        assert await rsmq.delete_queue("jobs") is True

        assert await rsmq.list_queues() == []
        with pytest.raises(QueueNotFoundError):
            await rsmq.get_queue_attributes("jobs")

    @pytest.mark.asyncio
    async def test_delete_absent_queue(self, rsmq: RedisSMQ):
        """Deleting a queue that does not exist is not an error."""
        assert await rsmq.delete_queue("missing") is False

    @pytest.mark.asyncio
    async def test_recreate_after_delete(self, rsmq: RedisSMQ):
        await rsmq.create_queue("jobs", vt=60)
        await rsmq.delete_queue("jobs")

        assert await rsmq.create_queue("jobs") == CreateQueueResult.CREATED
        assert (await rsmq.get_queue_attributes("jobs")).vt == 30


class TestQueueConfig:
    """Tests for reading queue configuration."""

    @pytest.mark.asyncio
    async def test_config_carries_store_time(self, rsmq: RedisSMQ, clock):
        await rsmq.create_queue("jobs", vt=45, delay=2, maxsize=4096)
        clock.advance(1.5)

        config = await rsmq.get_queue_config("jobs")

        assert (config.vt, config.delay, config.maxsize) == (45, 2, 4096)
        assert config.time.micros == clock.micros

    @pytest.mark.asyncio
    async def test_missing_queue(self, rsmq: RedisSMQ):
        with pytest.raises(QueueNotFoundError):
            await rsmq.get_queue_config("missing")


class TestQueueAttributes:
    """Tests for queue attribute reads and updates."""

    @pytest.mark.asyncio
    async def test_counts_visible_and_hidden(self, rsmq: RedisSMQ, clock):
        await rsmq.create_queue("jobs")
        await rsmq.send_message("jobs", "a")
        await rsmq.send_message("jobs", "b", delay=60)
        await rsmq.send_message("jobs", "c")
        await rsmq.receive_message("jobs")
        clock.advance(1)

        attributes = await rsmq.get_queue_attributes("jobs")

        assert attributes.msgs == 3
        assert attributes.hiddenmsgs == 2
        assert attributes.totalsent == 3
        assert attributes.totalrecv == 1

    @pytest.mark.asyncio
    async def test_set_attributes(self, rsmq: RedisSMQ, clock):
        """Only supplied options change and modified moves forward."""
        await rsmq.create_queue("jobs")
        clock.advance(10)

        attributes = await rsmq.set_queue_attributes("jobs", vt=120, maxsize=-1)

        assert attributes.vt == 120
        assert attributes.delay == 0
        assert attributes.maxsize == -1
        assert attributes.modified == attributes.created + 10

    @pytest.mark.asyncio
    async def test_set_attributes_requires_one_option(self, rsmq: RedisSMQ):
        await rsmq.create_queue("jobs")
        with pytest.raises(NoAttributeSupplied):
            await rsmq.set_queue_attributes("jobs")

    @pytest.mark.asyncio
    async def test_set_attributes_validates(self, rsmq: RedisSMQ):
        await rsmq.create_queue("jobs")
        with pytest.raises(InvalidOptionError):
            await rsmq.set_queue_attributes("jobs", delay=-5)

    @pytest.mark.asyncio
    async def test_set_attributes_missing_queue(self, rsmq: RedisSMQ):
        with pytest.raises(QueueNotFoundError):
            await rsmq.set_queue_attributes("missing", vt=10)

        assert await rsmq.list_queues() == []
