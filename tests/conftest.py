"""
Pytest configuration and shared fixtures.
"""

import os
from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
import redis.asyncio as redis
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import RedisError

from rsmq.api.main import create_app
from rsmq.client import RedisSMQ
from rsmq.config import Settings
from rsmq.store import MemoryStore, RedisStore
from rsmq.store.connection import close_store, init_store

# Test Redis URL - use a separate database
TEST_REDIS_URL = os.getenv("TEST_REDIS_URL", "redis://localhost:6379/15")

# 2024-01-01T00:00:00Z
START_MICROS = 1_704_067_200_000_000


class FakeClock:
    """Controllable store clock returning microseconds since epoch."""

    def __init__(self, micros: int = START_MICROS):
        self.micros = micros

    def __call__(self) -> int:
        return self.micros

    def advance(self, seconds: float) -> None:
        self.micros += int(seconds * 1_000_000)


@pytest.fixture
def clock() -> FakeClock:
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryStore:
    """Create an in-memory store driven by the fake clock."""
    return MemoryStore(namespace="test", clock=clock)


@pytest.fixture
def rsmq(memory_store: MemoryStore) -> RedisSMQ:
    """Create a client over the in-memory store."""
    return RedisSMQ(memory_store)


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        redis_url=TEST_REDIS_URL,
        redis_namespace="test",
        log_level="DEBUG",
        log_format="console",
        worker_poll_interval_seconds=0.1,
        worker_batch_size=5,
        worker_max_receive_count=3,
    )


@pytest_asyncio.fixture
async def app(rsmq: RedisSMQ) -> AsyncGenerator[FastAPI]:
    """Create a FastAPI app over the in-memory client."""
    await close_store()
    await init_store(rsmq)

    app = create_app(lifespan_handler=None)
    yield app

    await close_store()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def qname() -> str:
    """Generate a unique queue name."""
    return f"test-queue-{uuid4().hex[:8]}"


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[redis.Redis]:
    """
    Connect to the test Redis server.

    Skips the test when no server is reachable at TEST_REDIS_URL.
    """
    client = redis.from_url(TEST_REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError):
        await client.aclose()
        pytest.skip(f"Redis not available at {TEST_REDIS_URL}")

    yield client

    await client.aclose()


@pytest_asyncio.fixture
async def redis_rsmq(redis_client: redis.Redis) -> AsyncGenerator[RedisSMQ]:
    """Create a client over Redis with a namespace private to the test."""
    namespace = f"test-{uuid4().hex[:8]}"
    yield RedisSMQ(RedisStore(redis_client, namespace=namespace))

    keys = [key async for key in redis_client.scan_iter(match=f"{namespace}:*")]
    if keys:
        await redis_client.delete(*keys)
