from __future__ import annotations

import logging

from satellite.config import Settings
from satellite.db.store import Store
from satellite.llm.intent_parser import classify
from satellite.models.actions import (
    Action,
    AssignMission,
    BuyItem,
    Move,
    PlaceItem,
    SetEmotion,
    Talk,
    Trade,
)
from satellite.models.core import ActionResult

log = logging.getLogger(__name__)


class ActionExecutor:
    def __init__(self, store: Store, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    async def dispatch(self, bot_id: int, sender_id: str, completion: str) -> tuple[Action, ActionResult]:
        action = classify(completion, sender_id)
        result = await self.execute(bot_id, sender_id, action)
        return action, result

    async def execute(self, bot_id: int, sender_id: str, action: Action) -> ActionResult:
        if isinstance(action, Talk):
            await self.talk(bot_id, action.text)
            return ActionResult(ok=True, message=action.text)
        if isinstance(action, BuyItem):
            return await self._buy_and_place(bot_id, action.item)
        if isinstance(action, PlaceItem):
            item_id = await self.get_last_bought_item(bot_id)
            if item_id is None:
                log.info("bot_place_skipped bot=%s reason=nothing_bought", bot_id)
                return ActionResult(ok=False, message="nothing to place")
            await self.place_item(bot_id, item_id, self.settings.default_room_id, action.x, action.y)
            return ActionResult(ok=True, message=f"placed item {item_id} at {action.x} {action.y}", item_id=item_id)
        if isinstance(action, Trade):
            text = f"Hey {sender_id}, want to trade {action.item}?"
            await self.talk(bot_id, text)
            return ActionResult(ok=True, message=text)
        if isinstance(action, AssignMission):
            await self.assign_mission(sender_id, action.mission)
            text = f"Your mission: {action.mission}"
            await self.talk(bot_id, text)
            return ActionResult(ok=True, message=text)
        if isinstance(action, Move):
            await self.move(bot_id, action.x, action.y)
            return ActionResult(ok=True, message=f"moved to {action.x} {action.y}")
        if isinstance(action, SetEmotion):
            await self.set_emotion(bot_id, action.emotion)
            return ActionResult(ok=True, message=f"Feeling {action.emotion}")
        raise TypeError(f"unsupported action {action!r}")

    async def _buy_and_place(self, bot_id: int, item_name: str) -> ActionResult:
        item_id = await self.buy_item(bot_id, item_name)
        if item_id is None:
            return ActionResult(ok=False, message=f"no item matching {item_name}")
        if self.settings.auto_place_purchases:
            await self.place_item(
                bot_id,
                item_id,
                self.settings.default_room_id,
                self.settings.purchase_place_x,
                self.settings.purchase_place_y,
            )
        return ActionResult(ok=True, message=f"I just bought a {item_name}!", item_id=item_id)

    async def talk(self, bot_id: int, text: str) -> None:
        await self.store.add_bot_response(bot_id, text)
        log.info("bot_talk bot=%s text=%s", bot_id, text)

    async def move(self, bot_id: int, x: int = 5, y: int = 5) -> None:
        await self.store.move_bot(bot_id, x, y)
        log.info("bot_move bot=%s x=%s y=%s", bot_id, x, y)

    async def buy_item(self, bot_id: int, item_name: str) -> int | None:
        item_id = await self.store.find_catalog_item_id(item_name)
        if item_id is None:
            log.info("bot_buy_miss bot=%s item=%s", bot_id, item_name)
            return None
        await self.store.add_user_item(str(bot_id), item_id)
        await self.talk(bot_id, f"I just bought a {item_name}!")
        return item_id

    async def place_item(self, bot_id: int, item_id: int, room_id: int, x: int, y: int, rot: int = 0) -> None:
        await self.store.place_item(item_id, room_id, x, y, str(bot_id), rot=rot)
        log.info("bot_place bot=%s item=%s room=%s x=%s y=%s", bot_id, item_id, room_id, x, y)

    async def get_last_bought_item(self, bot_id: int) -> int | None:
        return await self.store.get_last_user_item_id(str(bot_id))

    async def assign_mission(self, user_id: str, mission: str) -> None:
        await self.store.add_mission(user_id, mission)
        log.info("mission_assign user=%s mission=%s", user_id, mission)

    async def set_emotion(self, bot_id: int, emotion: str) -> None:
        await self.store.set_bot_motto(bot_id, f"Feeling {emotion}")
        log.info("bot_emotion bot=%s emotion=%s", bot_id, emotion)
