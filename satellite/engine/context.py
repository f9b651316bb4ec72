from __future__ import annotations

import asyncio

from satellite.db.store import Store

FALLBACK_ROOM_ID = 1


async def build_context(store: Store, bot_id: int) -> str:
    bot = await store.get_bot(bot_id)
    room_id = bot["room_id"] if bot is not None and bot["room_id"] else FALLBACK_ROOM_ID
    users, item_ids = await asyncio.gather(
        store.count_room_users(room_id),
        store.list_room_item_ids(room_id),
    )
    names = ", ".join(str(item_id) for item_id in item_ids) or "no visible items"
    return f"There are {users} users and these items: {names}"
