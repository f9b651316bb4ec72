from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable

import websockets

from satellite.config import Settings

log = logging.getLogger(__name__)

PacketHandler = Callable[[Any], Awaitable[Any]]


class TransportUnavailableError(RuntimeError):
    pass


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionSupervisor:
    def __init__(
        self,
        settings: Settings,
        handler: PacketHandler,
        *,
        connect: Callable[[str], Any] = websockets.connect,
    ) -> None:
        self.url = settings.ws_url
        self.reconnect_delay = settings.reconnect_delay_seconds
        self.drain_timeout = settings.shutdown_drain_seconds
        self.handler = handler
        self._connect = connect
        self.state = ConnectionState.DISCONNECTED
        self.connect_attempts = 0
        self._ws: Any = None
        self._stopping = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED and self._ws is not None

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def run(self) -> None:
        while not self._stopping:
            self.state = ConnectionState.CONNECTING
            self.connect_attempts += 1
            try:
                async with self._connect(self.url) as ws:
                    self._ws = ws
                    self.state = ConnectionState.CONNECTED
                    log.info("ws_connected url=%s attempt=%s", self.url, self.connect_attempts)
                    async for raw in ws:
                        self._spawn(raw)
                log.warning("ws_closed url=%s", self.url)
            except (OSError, websockets.exceptions.WebSocketException) as exc:
                log.warning("ws_error url=%s error=%s", self.url, exc)
            finally:
                self._ws = None
                self.state = ConnectionState.DISCONNECTED
            if self._stopping:
                break
            log.warning("ws_disconnected retry_in=%s", self.reconnect_delay)
            await asyncio.sleep(self.reconnect_delay)

    def _spawn(self, raw: Any) -> asyncio.Task:
        task = asyncio.create_task(self.handler(raw))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("packet_task_failed error=%r", exc, exc_info=exc)

    async def send(self, packet: str) -> None:
        ws = self._ws
        if ws is None or self.state is not ConnectionState.CONNECTED:
            raise TransportUnavailableError("websocket is not connected")
        try:
            await ws.send(packet)
        except websockets.exceptions.ConnectionClosed as exc:
            raise TransportUnavailableError(f"websocket closed during send: {exc}") from exc
        log.debug("ws_sent chars=%s", len(packet))

    async def stop(self) -> None:
        self._stopping = True
        ws = self._ws
        if ws is not None:
            await ws.close()
        if not self._tasks:
            return
        pending = set(self._tasks)
        log.info("ws_draining tasks=%s timeout=%s", len(pending), self.drain_timeout)
        _, still_running = await asyncio.wait(pending, timeout=self.drain_timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            log.warning("ws_drain_cancelled tasks=%s", len(still_running))
            await asyncio.gather(*still_running, return_exceptions=True)
