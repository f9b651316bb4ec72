from __future__ import annotations

import dataclasses

import pytest
import pytest_asyncio

from satellite.engine.actions import ActionExecutor
from satellite.models.actions import AssignMission, BuyItem, Move, PlaceItem, SetEmotion, Talk, Trade


async def _rows(store, sql: str, params: tuple = ()) -> list:
    return list(await store.conn.execute_fetchall(sql, params))


@pytest_asyncio.fixture
async def bot_id(store):
    bot_id, _ = await store.create_bot("NXR AI 42", room_id=1, motto="I live for NXR", look="", x=5, y=5)
    return bot_id


@pytest.mark.asyncio
async def test_talk_records_a_response_row(store, settings, bot_id):
    executor = ActionExecutor(store, settings)

    result = await executor.execute(bot_id, "42", Talk(text="hello"))

    assert result.ok
    rows = await _rows(store, "SELECT bot_id, response_text FROM bots_responses")
    assert [(r["bot_id"], r["response_text"]) for r in rows] == [(bot_id, "hello")]


@pytest.mark.asyncio
async def test_buy_records_ownership_announces_and_places(store, settings, bot_id):
    item_id = await store.add_catalog_item("golden sword")
    executor = ActionExecutor(store, settings)

    result = await executor.execute(bot_id, "42", BuyItem(item="sword"))

    assert result.ok
    assert result.item_id == item_id
    owned = await _rows(store, "SELECT user_id, item_id FROM items_users")
    assert [(r["user_id"], r["item_id"]) for r in owned] == [(str(bot_id), item_id)]
    talks = await _rows(store, "SELECT response_text FROM bots_responses")
    assert [r["response_text"] for r in talks] == ["I just bought a sword!"]
    placed = await _rows(store, "SELECT item_id, room_id, x, y, user_id FROM items_rooms")
    assert [tuple(r) for r in placed] == [(item_id, 1, 4, 4, str(bot_id))]


@pytest.mark.asyncio
async def test_buy_miss_takes_no_action(store, settings, bot_id):
    executor = ActionExecutor(store, settings)

    result = await executor.execute(bot_id, "42", BuyItem(item="dragon"))

    assert not result.ok
    assert await _rows(store, "SELECT * FROM items_users") == []
    assert await _rows(store, "SELECT * FROM bots_responses") == []
    assert await _rows(store, "SELECT * FROM items_rooms") == []


@pytest.mark.asyncio
async def test_buy_without_auto_place(store, settings, bot_id):
    await store.add_catalog_item("lamp")
    executor = ActionExecutor(store, dataclasses.replace(settings, auto_place_purchases=False))

    result = await executor.execute(bot_id, "42", BuyItem(item="lamp"))

    assert result.ok
    assert await _rows(store, "SELECT * FROM items_rooms") == []


@pytest.mark.asyncio
async def test_place_uses_most_recent_purchase(store, settings, bot_id):
    lamp = await store.add_catalog_item("lamp")
    rug = await store.add_catalog_item("rug")
    executor = ActionExecutor(store, dataclasses.replace(settings, auto_place_purchases=False))
    await executor.buy_item(bot_id, "lamp")
    await executor.buy_item(bot_id, "rug")

    result = await executor.execute(bot_id, "42", PlaceItem(item="lamp", x=8, y=9))

    assert result.ok
    assert result.item_id == rug != lamp
    assert result.message == f"placed item {rug} at 8 9"
    placed = await _rows(store, "SELECT item_id, x, y FROM items_rooms")
    assert [tuple(r) for r in placed] == [(rug, 8, 9)]


@pytest.mark.asyncio
async def test_place_with_nothing_bought_is_a_no_op(store, settings, bot_id):
    result = await ActionExecutor(store, settings).execute(bot_id, "42", PlaceItem(item="lamp", x=1, y=1))

    assert not result.ok
    assert await _rows(store, "SELECT * FROM items_rooms") == []


@pytest.mark.asyncio
async def test_trade_proposes_to_sender(store, settings, bot_id):
    result = await ActionExecutor(store, settings).execute(bot_id, "42", Trade(item="hats"))

    assert result.message == "Hey 42, want to trade hats?"
    talks = await _rows(store, "SELECT response_text FROM bots_responses")
    assert [r["response_text"] for r in talks] == ["Hey 42, want to trade hats?"]


@pytest.mark.asyncio
async def test_mission_is_recorded_for_sender_and_announced(store, settings, bot_id):
    await ActionExecutor(store, settings).execute(bot_id, "42", AssignMission(mission="patrol sector 7"))

    missions = await _rows(store, "SELECT user_id, mission_text FROM user_missions")
    assert [tuple(r) for r in missions] == [("42", "patrol sector 7")]
    talks = await _rows(store, "SELECT response_text FROM bots_responses")
    assert [r["response_text"] for r in talks] == ["Your mission: patrol sector 7"]


@pytest.mark.asyncio
async def test_move_and_emotion_update_the_bot(store, settings, bot_id):
    executor = ActionExecutor(store, settings)

    await executor.execute(bot_id, "42", Move(x=10, y=20))
    await executor.execute(bot_id, "42", SetEmotion(emotion="curious"))

    bot = await store.get_bot(bot_id)
    assert (bot["x"], bot["y"]) == (10, 20)
    assert bot["motto"] == "Feeling curious"


@pytest.mark.asyncio
async def test_dispatch_classifies_then_executes(store, settings, bot_id):
    action, result = await ActionExecutor(store, settings).dispatch(bot_id, "42", "move to abc def")

    assert action == Talk(text="move to abc def")
    assert result.ok
    bot = await store.get_bot(bot_id)
    assert (bot["x"], bot["y"]) == (5, 5)
