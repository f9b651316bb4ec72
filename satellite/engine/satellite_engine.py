from __future__ import annotations

import asyncio
import logging
from typing import Any

from satellite.config import Settings
from satellite.db.store import Store
from satellite.engine.actions import ActionExecutor
from satellite.engine.context import build_context
from satellite.engine.identity import BotRegistry
from satellite.engine.locks import KeyedLock
from satellite.engine.personas import PersonaLibrary
from satellite.llm.client import CompletionClient
from satellite.llm.prompt import build_prompt, format_turn
from satellite.memory.short_term import MemoryStore
from satellite.models.core import ChatEvent, TurnResult
from satellite.transport.packets import parse_packet

log = logging.getLogger(__name__)


class SatelliteEngine:
    def __init__(
        self,
        settings: Settings,
        store: Store,
        memory: MemoryStore,
        completion_client: CompletionClient,
        personas: PersonaLibrary,
        *,
        registry: BotRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.memory = memory
        self.completion_client = completion_client
        self.personas = personas
        self.registry = registry or BotRegistry(store, default_room_id=settings.default_room_id)
        self.actions = ActionExecutor(store, settings)
        self._sender_locks = KeyedLock()

    async def handle_packet(self, raw: Any) -> TurnResult | None:
        event = parse_packet(raw)
        if event is None:
            return None
        return await self.handle_chat(event)

    async def handle_chat(self, event: ChatEvent) -> TurnResult | None:
        log.info("chat_received sender=%s text=%s", event.sender_id, event.message)
        async with self._sender_locks.hold(event.sender_id):
            try:
                return await self._run_turn(event)
            except Exception:
                log.exception("turn_failed sender=%s", event.sender_id)
                return None

    async def _run_turn(self, event: ChatEvent) -> TurnResult:
        sender_id = event.sender_id
        bot_id = await self.registry.resolve(sender_id)

        memory = await self.memory.get(sender_id)
        profile = await asyncio.to_thread(self.personas.load, bot_id)
        context = await build_context(self.store, bot_id)
        prompt = build_prompt(profile, memory, sender_id, event.message, context)

        completion = await self.completion_client.complete(prompt)
        await self.memory.append_turn(sender_id, memory, format_turn(sender_id, event.message, completion))

        action, outcome = await self.actions.dispatch(bot_id, sender_id, completion)
        await self.store.log_interaction(bot_id, sender_id, event.message, completion)
        log.info("turn_done sender=%s bot=%s action=%s ok=%s", sender_id, bot_id, action.kind, outcome.ok)
        return TurnResult(
            bot_id=bot_id,
            sender_id=sender_id,
            message=event.message,
            completion=completion,
            action=action,
            outcome=outcome,
        )
