from __future__ import annotations

import logging

from satellite.db.store import Store
from satellite.engine.locks import KeyedLock

log = logging.getLogger(__name__)

BOT_NAME_PREFIX = "NXR AI"
DEFAULT_MOTTO = "I live for NXR"
DEFAULT_LOOK = "hd-180-1.ch-255-62.lg-275-62"
DEFAULT_POSITION = (5, 5, 0)
DEFAULT_ROTATION = 2
DEFAULT_WALK_MODE = "freeroam"
DEFAULT_AI_TYPE = "generic"


def bot_name_for(sender_id: str) -> str:
    return f"{BOT_NAME_PREFIX} {sender_id}"


class BotRegistry:
    def __init__(self, store: Store, *, default_room_id: int = 1) -> None:
        self.store = store
        self.default_room_id = default_room_id
        self._cache: dict[str, int] = {}
        self._locks = KeyedLock()

    def cached(self, sender_id: str) -> int | None:
        return self._cache.get(sender_id)

    async def resolve(self, sender_id: str) -> int:
        bot_id = self._cache.get(sender_id)
        if bot_id is not None:
            return bot_id
        async with self._locks.hold(sender_id):
            bot_id = self._cache.get(sender_id)
            if bot_id is None:
                bot_id = await self._lookup_or_create(sender_id)
                self._cache[sender_id] = bot_id
            return bot_id

    async def _lookup_or_create(self, sender_id: str) -> int:
        # A sender's own named bot wins over a bot whose id happens to equal the sender id.
        name = bot_name_for(sender_id)
        bot_id = await self.store.find_bot_id_by_name(name)
        if bot_id is not None:
            log.debug("bot_resolve sender=%s bot=%s source=store", sender_id, bot_id)
            return bot_id

        if sender_id.isdigit() and await self.store.bot_exists(int(sender_id)):
            log.debug("bot_resolve sender=%s source=self", sender_id)
            return int(sender_id)

        x, y, z = DEFAULT_POSITION
        bot_id, created = await self.store.create_bot(
            name,
            room_id=self.default_room_id,
            motto=DEFAULT_MOTTO,
            look=DEFAULT_LOOK,
            x=x,
            y=y,
            z=z,
            rotation=DEFAULT_ROTATION,
            walk_mode=DEFAULT_WALK_MODE,
            ai_type=DEFAULT_AI_TYPE,
        )
        log.info("bot_resolve sender=%s bot=%s source=created created=%s", sender_id, bot_id, created)
        return bot_id
