from __future__ import annotations

import pytest
import pytest_asyncio
from fakeredis import aioredis

from satellite.config import Settings
from satellite.db.store import Store
from satellite.engine.personas import PersonaLibrary
from satellite.memory.short_term import MemoryStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        db_path=str(tmp_path / "satellite.db"),
        ws_url="ws://game.test",
        llm_backend="stub",
        personalities_dir=str(tmp_path / "personalities"),
        routines_dir=str(tmp_path / "routines"),
        reconnect_delay_seconds=0.01,
        shutdown_drain_seconds=0.05,
    )


@pytest_asyncio.fixture
async def store(settings):
    store = await Store.open(settings.db_path)
    yield store
    await store.close()


@pytest_asyncio.fixture
async def redis_client():
    client = aioredis.FakeRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def memory(redis_client) -> MemoryStore:
    return MemoryStore(redis_client, ttl_seconds=3600)


@pytest.fixture
def personas(settings) -> PersonaLibrary:
    library = PersonaLibrary(settings.personalities_dir, settings.routines_dir)
    library.ensure_dirs()
    return library
