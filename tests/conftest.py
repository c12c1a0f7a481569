"""Shared pytest fixtures for session store and execution tests."""

import fakeredis
import pytest

from mcp_server_exec.config import BridgeConfig
from mcp_server_exec.diskcache_session_store import DiskCacheSessionStore
from mcp_server_exec.redis_session_store import RedisSessionStore
from mcp_server_exec.server import CodeExecutionBridge
from mcp_server_exec.ttl_in_memory_session_store import TTLInMemorySessionStore
from tests.utils.mock_system_resources import FakeClock, FakeJudge0Backend

TTL_SECONDS = 60


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    """In-memory store on a fake clock, without the sweep thread."""
    store = TTLInMemorySessionStore(
        ttl_seconds=TTL_SECONDS, start_sweeper=False, timer=clock
    )
    yield store
    store.destroy()


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def redis_store(redis_client):
    store = RedisSessionStore(ttl_seconds=TTL_SECONDS, client=redis_client)
    yield store
    store.destroy()


@pytest.fixture
def disk_store(tmp_path):
    store = DiskCacheSessionStore(cache_dir=str(tmp_path / "cache"), ttl_seconds=TTL_SECONDS)
    yield store
    store.destroy()


@pytest.fixture(params=["memory", "redis", "disk"])
def any_store(request):
    """Each SessionStore variant in turn, for behavior that must be identical."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def fake_backend():
    return FakeJudge0Backend()


@pytest.fixture
def bridge(memory_store, fake_backend):
    """A CodeExecutionBridge wired to the in-memory store and a fake Judge0."""
    config = BridgeConfig(max_file_size=1024)
    return CodeExecutionBridge(config=config, store=memory_store, backend=fake_backend)
