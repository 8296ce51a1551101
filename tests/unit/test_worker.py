"""
Unit tests for the worker.
"""

from collections.abc import Generator

import pytest

from rsmq.client import RedisSMQ
from rsmq.config import Settings
from rsmq.errors import QueueNotFoundError
from rsmq.types.worker import HandlerResult, MessageContext
from rsmq.worker.handlers import register_handler, unregister_handler
from rsmq.worker.main import Worker


class TestWorker:
    """Tests for polling, handling and heartbeats."""

    @pytest.fixture(autouse=True)
    def handlers(self) -> Generator[list[MessageContext]]:
        """Register handlers for the test queues and record what they saw."""
        seen: list[MessageContext] = []

        @register_handler("worker-ok")
        async def handle_ok(context: MessageContext) -> HandlerResult:
            seen.append(context)
            return HandlerResult(success=True)

        @register_handler("worker-fail")
        async def handle_fail(context: MessageContext) -> HandlerResult:
            seen.append(context)
            return HandlerResult(success=False, error="nope")

        yield seen

        unregister_handler("worker-ok")
        unregister_handler("worker-fail")

    @pytest.fixture
    def worker(self, rsmq: RedisSMQ) -> Worker:
        return Worker(
            rsmq,
            queues=["worker-ok", "worker-fail"],
            worker_id="test-worker",
            batch_size=5,
            poll_interval=0.01,
            max_receive_count=2,
        )

    @pytest.mark.asyncio
    async def test_successful_messages_are_deleted(
        self, rsmq: RedisSMQ, worker: Worker, handlers: list[MessageContext]
    ):
        await rsmq.create_queue("worker-ok")
        await rsmq.create_queue("worker-fail")
        for i in range(3):
            await rsmq.send_message("worker-ok", f"m{i}")

        processed = await worker.poll_once()

        assert processed == 3
        assert sorted(c.message.message for c in handlers) == ["m0", "m1", "m2"]
        assert all(c.worker_id == "test-worker" for c in handlers)
        assert (await rsmq.get_queue_attributes("worker-ok")).msgs == 0

    @pytest.mark.asyncio
    async def test_batch_size_limits_receives(self, rsmq: RedisSMQ, worker: Worker):
        await rsmq.create_queue("worker-ok")
        await rsmq.create_queue("worker-fail")
        for i in range(7):
            await rsmq.send_message("worker-ok", f"m{i}")

        assert await worker.poll_once() == 5
        assert await worker.poll_once() == 2
        assert await worker.poll_once() == 0

    @pytest.mark.asyncio
    async def test_zero_vt_message_is_handled_once_per_poll(
        self, rsmq: RedisSMQ, handlers: list[MessageContext]
    ):
        """A vt=0 message is handed to its handler once per poll, not batch_size times."""
        await rsmq.create_queue("worker-fail", vt=0, delay=0)
        await rsmq.send_message("worker-fail", "retry me")
        worker = Worker(
            rsmq,
            queues=["worker-fail"],
            worker_id="test-worker",
            batch_size=5,
            poll_interval=0.01,
            max_receive_count=3,
        )

        assert await worker.poll_once() == 1
        assert [c.message.rc for c in handlers] == [1]

        attributes = await rsmq.get_queue_attributes("worker-fail")
        assert attributes.msgs == 1
        assert attributes.totalrecv == 1

        assert await worker.poll_once() == 1
        assert [c.message.rc for c in handlers] == [1, 2]

    @pytest.mark.asyncio
    async def test_defaults_come_from_settings(
        self, rsmq: RedisSMQ, test_settings: Settings, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr("rsmq.worker.main.get_settings", lambda: test_settings)
        test_settings.worker_queues = ["worker-ok"]

        worker = Worker(rsmq, worker_id="test-worker")

        assert worker.queues == ["worker-ok"]
        assert worker.batch_size == 5
        assert worker.poll_interval == 0.1
        assert worker.max_receive_count == 3

    @pytest.mark.asyncio
    async def test_failed_message_is_redelivered_then_dropped(
        self, rsmq: RedisSMQ, worker: Worker, handlers: list[MessageContext], clock
    ):
        """A failing message returns after vt and is dropped past max_receive_count."""
        await rsmq.create_queue("worker-ok")
        await rsmq.create_queue("worker-fail", vt=10)
        await rsmq.send_message("worker-fail", "bad")

        assert await worker.poll_once() == 1
        assert (await rsmq.get_queue_attributes("worker-fail")).msgs == 1
        assert await worker.poll_once() == 0

        clock.advance(10)
        assert await worker.poll_once() == 1
        assert [c.message.rc for c in handlers] == [1, 2]
        assert handlers[-1].is_last_attempt

        clock.advance(10)
        assert await worker.poll_once() == 1
        # third receive exceeds max_receive_count; handler is not called
        assert len(handlers) == 2
        assert (await rsmq.get_queue_attributes("worker-fail")).msgs == 0

    @pytest.mark.asyncio
    async def test_missing_queue_is_reported(self, worker: Worker):
        with pytest.raises(QueueNotFoundError):
            await worker.poll_once()

    @pytest.mark.asyncio
    async def test_extend_visibility(self, rsmq: RedisSMQ, worker: Worker, clock):
        """The heartbeat pushes in-flight messages back by the queue's vt."""
        await rsmq.create_queue("worker-ok", vt=10)
        await rsmq.send_message("worker-ok", "slow")
        message = await rsmq.receive_message("worker-ok")
        worker._current[("worker-ok", message.id)] = None

        clock.advance(8)
        assert await worker.extend_visibility() == 1

        clock.advance(8)
        assert await rsmq.receive_message("worker-ok") is None
        clock.advance(2)
        assert (await rsmq.receive_message("worker-ok")).id == message.id

    @pytest.mark.asyncio
    async def test_extend_visibility_skips_deleted(self, rsmq: RedisSMQ, worker: Worker):
        await rsmq.create_queue("worker-ok")
        await rsmq.send_message("worker-ok", "gone")
        message = await rsmq.receive_message("worker-ok")
        await rsmq.delete_message("worker-ok", message.id)
        worker._current[("worker-ok", message.id)] = None

        assert await worker.extend_visibility() == 0

    @pytest.mark.asyncio
    async def test_stop(self, worker: Worker):
        worker._running = True
        await worker.stop()
        assert worker._running is False
