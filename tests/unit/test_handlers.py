"""
Unit tests for message handlers.
"""

from collections.abc import Generator

import pytest

from rsmq.types.message import Message
from rsmq.types.worker import HandlerResult, MessageContext
from rsmq.worker.handlers import (
    execute_message,
    get_handler,
    list_handlers,
    register_handler,
    unregister_handler,
)

MESSAGE_ID = "0" * 10 + "b" * 22


def make_context(qname: str = "handlers-test", rc: int = 1, max_receive_count: int = 3) -> MessageContext:
    return MessageContext(
        qname=qname,
        message=Message(id=MESSAGE_ID, message="payload", rc=rc, fr=1_000, sent=1_000),
        worker_id="test-worker",
        max_receive_count=max_receive_count,
    )


class TestMessageHandlers:
    """Tests for the handler registry."""

    @pytest.fixture(autouse=True)
    def handlers(self) -> Generator[None]:
        """Register test handlers and remove them afterwards."""

        @register_handler("handlers-test")
        async def handle_echo(context: MessageContext) -> HandlerResult:
            return HandlerResult(success=True, output={"echo": context.message.message})

        @register_handler("handlers-failing")
        async def handle_failing(context: MessageContext) -> HandlerResult:
            return HandlerResult(success=False, error="Intentional failure")

        @register_handler("handlers-raising")
        async def handle_raising(context: MessageContext) -> HandlerResult:
            raise RuntimeError("boom")

        self.handle_echo = handle_echo
        yield
        for qname in ("handlers-test", "handlers-failing", "handlers-raising"):
            unregister_handler(qname)

    def test_list_handlers(self):
        """Test listing registered handlers."""
        handlers = list_handlers()

        assert "handlers-test" in handlers
        assert "handlers-failing" in handlers

    def test_get_handler_exists(self):
        assert get_handler("handlers-test") is self.handle_echo

    def test_get_handler_not_exists(self):
        assert get_handler("nonexistent") is None

    def test_unregister_handler(self):
        unregister_handler("handlers-test")
        assert get_handler("handlers-test") is None

    @pytest.mark.asyncio
    async def test_execute_message(self):
        result = await execute_message(make_context())

        assert result.success is True
        assert result.output == {"echo": "payload"}

    @pytest.mark.asyncio
    async def test_execute_failing_handler(self):
        result = await execute_message(make_context(qname="handlers-failing"))

        assert result.success is False
        assert "Intentional failure" in result.error

    @pytest.mark.asyncio
    async def test_execute_raising_handler(self):
        """Handler exceptions become failed results."""
        result = await execute_message(make_context(qname="handlers-raising"))

        assert result.success is False
        assert result.error == "Handler exception: boom"

    @pytest.mark.asyncio
    async def test_execute_without_handler(self):
        result = await execute_message(make_context(qname="nonexistent"))

        assert result.success is False
        assert "No handler registered" in result.error


class TestMessageContext:
    """Tests for MessageContext."""

    def test_is_last_attempt(self):
        assert make_context(rc=3, max_receive_count=3).is_last_attempt is True
        assert make_context(rc=2, max_receive_count=3).is_last_attempt is False

    def test_remaining_attempts(self):
        assert make_context(rc=1, max_receive_count=3).remaining_attempts == 2
        assert make_context(rc=5, max_receive_count=3).remaining_attempts == 0
