from __future__ import annotations

import asyncio
import logging
import signal

import redis.asyncio as redis_asyncio
from redis.exceptions import RedisError

from satellite.config import Settings, configure_logging
from satellite.db.store import Store
from satellite.engine.personas import PersonaLibrary
from satellite.engine.routines import RoutineScheduler
from satellite.engine.satellite_engine import SatelliteEngine
from satellite.llm.client import CompletionClient
from satellite.memory.short_term import MemoryStore
from satellite.transport.supervisor import ConnectionSupervisor

log = logging.getLogger(__name__)


async def build_engine(settings: Settings, redis_client: redis_asyncio.Redis, store: Store) -> SatelliteEngine:
    personas = PersonaLibrary(settings.personalities_dir, settings.routines_dir)
    await asyncio.to_thread(personas.ensure_dirs)
    return SatelliteEngine(
        settings,
        store,
        MemoryStore(redis_client, ttl_seconds=settings.memory_ttl_seconds),
        CompletionClient(settings),
        personas,
    )


async def run(settings: Settings) -> None:
    try:
        store = await Store.open(settings.db_path)
    except Exception:
        log.critical("store_open_failed path=%s", settings.db_path, exc_info=True)
        raise SystemExit(1)

    redis_client = redis_asyncio.from_url(settings.redis_url, decode_responses=True)
    try:
        await redis_client.ping()
    except (RedisError, OSError):
        log.critical("redis_unreachable url=%s", settings.redacted()["redis_url"], exc_info=True)
        await store.close()
        raise SystemExit(1)

    engine = await build_engine(settings, redis_client, store)
    supervisor = ConnectionSupervisor(settings, engine.handle_packet)
    scheduler = RoutineScheduler(store, engine.personas, supervisor.send)

    stop_event = asyncio.Event()

    def _signal_handler(*_) -> None:
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            signal.signal(sig, lambda *_: stop_event.set())

    supervisor_task = asyncio.create_task(supervisor.run(), name="ws-supervisor")
    scheduler_task = asyncio.create_task(scheduler.run(), name="routine-scheduler")
    log.info("satellite_ready")

    await stop_event.wait()
    log.info("satellite_stopping")

    scheduler_task.cancel()
    await supervisor.stop()
    supervisor_task.cancel()
    await asyncio.gather(scheduler_task, supervisor_task, return_exceptions=True)

    await redis_client.aclose()
    await store.close()


def main() -> None:
    settings = Settings()
    configure_logging(settings.dev_mode)
    logging.getLogger(__name__).info("app_start %s", settings.redacted())
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
