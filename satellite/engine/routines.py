from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable

from satellite.db.store import Store
from satellite.engine.personas import PersonaLibrary
from satellite.transport.packets import format_chat_packet
from satellite.transport.supervisor import TransportUnavailableError

log = logging.getLogger(__name__)

Sender = Callable[[str], Awaitable[None]]


def clock_key(now: datetime) -> str:
    return now.strftime("%H:%M")


def seconds_until_next_minute(now: datetime) -> float:
    return 60.0 - now.second - now.microsecond / 1_000_000


class RoutineScheduler:
    def __init__(
        self,
        store: Store,
        personas: PersonaLibrary,
        send: Sender,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.personas = personas
        self.send = send
        self.clock = clock
        self._last_key: str | None = None

    async def tick(self, now: datetime | None = None) -> int:
        key = clock_key(now or self.clock())
        if key == self._last_key:
            return 0
        self._last_key = key
        emitted = 0
        for bot_id in await self.store.list_bot_ids():
            routine = await asyncio.to_thread(self.personas.load_routine, bot_id)
            action = routine.get(key)
            if not action:
                continue
            try:
                await self.send(format_chat_packet(bot_id, action))
            except TransportUnavailableError:
                log.warning("routine_skipped bot=%s key=%s reason=transport_down", bot_id, key)
                continue
            log.info("routine_emit bot=%s key=%s action=%s", bot_id, key, action)
            emitted += 1
        return emitted

    async def run(self) -> None:
        while True:
            await asyncio.sleep(seconds_until_next_minute(self.clock()))
            try:
                await self.tick()
            except Exception:
                log.exception("routine_tick_failed")
