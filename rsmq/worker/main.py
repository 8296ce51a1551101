"""
Worker process for consuming messages.

The worker receives messages from its queues, runs the registered handler
and deletes each message once it was handled. A message whose handling
fails stays in its queue and is received again after its visibility
timeout, until it exceeds the maximum receive count.
"""

import asyncio
import logging
import os
import signal
import time

from rsmq.client import RedisSMQ
from rsmq.config import get_settings
from rsmq.constants import SPAN_EXTEND_VISIBILITY, SPAN_HANDLE_MESSAGE
from rsmq.observability.logging import message_log_context, setup_logging
from rsmq.observability.metrics import get_metrics
from rsmq.observability.tracing import get_tracer
from rsmq.store.connection import close_store, get_rsmq, init_store
from rsmq.types.message import Message
from rsmq.types.worker import MessageContext
from rsmq.worker.handlers import execute_message

logger = logging.getLogger(__name__)


class Worker:
    """
    Queue consumer that polls for and handles messages.

    Features:
    - Atomic claim through receive_message; no two workers get the same
      eligible message
    - Heartbeat extending the visibility of messages still being handled
    - Dropping of messages received more than max_receive_count times
    - Graceful shutdown on SIGTERM/SIGINT
    """

    def __init__(
        self,
        rsmq: RedisSMQ,
        queues: list[str] | None = None,
        worker_id: str | None = None,
        batch_size: int | None = None,
        poll_interval: float | None = None,
        max_receive_count: int | None = None,
    ):
        """
        Initialize the worker.

        Args:
            rsmq: Queue client.
            queues: Queues to consume. Defaults to the configured queues.
            worker_id: Unique worker identifier. Defaults to hostname + PID.
            batch_size: Maximum messages received per queue per poll.
            poll_interval: Seconds between polls when all queues are empty.
            max_receive_count: Receives after which a message is dropped.
        """
        settings = get_settings()

        self.rsmq = rsmq
        self.queues = list(queues or settings.worker_queues)
        self.worker_id = worker_id or settings.worker_id or f"{os.uname().nodename}-{os.getpid()}"
        self.batch_size = batch_size or settings.worker_batch_size
        self.poll_interval = poll_interval or settings.worker_poll_interval_seconds
        self.max_receive_count = max_receive_count or settings.worker_max_receive_count
        self.heartbeat_interval = settings.worker_heartbeat_interval_seconds

        self._running = False
        self._current: dict[tuple[str, str], asyncio.Task] = {}
        self._heartbeat_task: asyncio.Task | None = None
        self._metrics = get_metrics()

    async def start(self) -> None:
        """Start the worker."""
        logger.info(
            "Worker starting",
            extra={"worker_id": self.worker_id, "queues": self.queues}
        )

        self._running = True
        self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())

        while self._running:
            try:
                processed = await self.poll_once()

                if processed == 0:
                    await asyncio.sleep(self.poll_interval)

            except Exception as e:
                logger.exception(
                    f"Error in worker loop: {e}",
                    extra={"worker_id": self.worker_id}
                )
                await asyncio.sleep(self.poll_interval)

        if self._current:
            logger.info(f"Waiting for {len(self._current)} messages to complete")
            await asyncio.gather(*self._current.values(), return_exceptions=True)

        if self._heartbeat_task:
            self._heartbeat_task.cancel()
            try:
                await self._heartbeat_task
            except asyncio.CancelledError:
                pass

        logger.info("Worker stopped", extra={"worker_id": self.worker_id})

    async def stop(self) -> None:
        """Stop the worker gracefully."""
        logger.info("Worker stopping", extra={"worker_id": self.worker_id})
        self._running = False

    async def poll_once(self) -> int:
        """
        Receive up to ``batch_size`` messages from each queue and handle them.

        Returns:
            Number of messages handled.
        """
        received: list[tuple[str, Message]] = []
        for qname in self.queues:
            received.extend((qname, message) for message in await self._receive_batch(qname))

        if not received:
            return 0

        logger.debug(
            f"Received {len(received)} messages",
            extra={"worker_id": self.worker_id}
        )

        tasks = []
        for qname, message in received:
            task = asyncio.create_task(self._process_message(qname, message))
            self._current[(qname, message.id)] = task
            tasks.append(task)

        await asyncio.gather(*tasks, return_exceptions=True)

        return len(received)

    async def _receive_batch(self, qname: str) -> list[Message]:
        """
        Receive up to ``batch_size`` distinct messages from one queue.

        A queue with vt 0 hands a received message straight back out, so
        such queues yield one message per poll. Receiving stops early if a
        message id repeats, which happens when the queue's vt is lowered to
        0 between the config read and the receives.
        """
        config = await self.rsmq.get_queue_config(qname)
        limit = 1 if config.vt == 0 else self.batch_size

        messages: dict[str, Message] = {}
        for _ in range(limit):
            message = await self.rsmq.receive_message(qname)
            if message is None or message.id in messages or (qname, message.id) in self._current:
                break
            messages[message.id] = message
        return list(messages.values())

    async def _process_message(self, qname: str, message: Message) -> None:
        """
        Handle a single message.

        Deletes the message on success. On failure the message is left
        hidden and comes back when its visibility timeout elapses.

        Args:
            qname: The queue the message came from.
            message: The received message.
        """
        start_time = time.time()

        with message_log_context(qname, message.id, rc=message.rc, worker_id=self.worker_id):
            try:
                if message.rc > self.max_receive_count:
                    await self.rsmq.delete_message(qname, message.id)
                    logger.warning("Dropped message after too many receives")
                    self._metrics.record_message_processed(
                        qname, "dropped", time.time() - start_time
                    )
                    return

                context = MessageContext(
                    qname=qname,
                    message=message,
                    worker_id=self.worker_id,
                    max_receive_count=self.max_receive_count,
                )

                with get_tracer().start_as_current_span(SPAN_HANDLE_MESSAGE) as span:
                    span.set_attribute("qname", qname)
                    span.set_attribute("message_id", message.id)
                    span.set_attribute("rc", message.rc)

                    result = await execute_message(context)

                duration = time.time() - start_time

                if result.success:
                    await self.rsmq.delete_message(qname, message.id)
                    logger.info(
                        "Message handled",
                        extra={"duration": f"{duration:.2f}s"}
                    )
                    self._metrics.record_message_processed(qname, "succeeded", duration)
                else:
                    logger.warning(
                        "Message handling failed",
                        extra={"error": result.error}
                    )
                    self._metrics.record_message_processed(qname, "failed", duration)

            except Exception as e:
                logger.exception(
                    "Exception processing message",
                    extra={"error": str(e)}
                )

            finally:
                self._current.pop((qname, message.id), None)

    async def extend_visibility(self) -> int:
        """
        Push back the visibility of every message still being handled.

        Each message is hidden for its queue's vt again, counted from now.

        Returns:
            Number of messages whose visibility was extended.
        """
        extended = 0
        vts: dict[str, int] = {}

        with get_tracer().start_as_current_span(SPAN_EXTEND_VISIBILITY):
            for qname, message_id in list(self._current.keys()):
                if qname not in vts:
                    vts[qname] = (await self.rsmq.get_queue_config(qname)).vt
                visible_at = await self.rsmq.change_message_visibility(
                    qname, message_id, vts[qname]
                )
                if visible_at is not None:
                    extended += 1
                    logger.debug(
                        "Extended visibility",
                        extra={"qname": qname, "message_id": message_id}
                    )

        return extended

    async def _heartbeat_loop(self) -> None:
        """
        Periodically extend visibility of in-flight messages.

        This keeps messages that take longer than their queue's vt from
        being handed to another worker.
        """
        while self._running:
            try:
                await asyncio.sleep(self.heartbeat_interval)

                if not self._current:
                    continue

                await self.extend_visibility()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"Error in heartbeat loop: {e}")


async def run_async() -> None:
    """Run the worker asynchronously."""
    setup_logging("worker")
    await init_store()

    worker = Worker(get_rsmq())

    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: asyncio.create_task(worker.stop())
        )

    try:
        await worker.start()
    finally:
        await close_store()


def run() -> None:
    """Run the worker."""
    asyncio.run(run_async())


if __name__ == "__main__":
    run()
