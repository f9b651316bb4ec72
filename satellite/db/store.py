from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from satellite.db.schema import init_db

log = logging.getLogger(__name__)


class Store:
    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self._write_lock = asyncio.Lock()

    @classmethod
    async def open(cls, db_path: str) -> Store:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(db_path)
        conn.row_factory = aiosqlite.Row
        await init_db(conn)
        log.info("store_open path=%s", db_path)
        return cls(conn)

    async def close(self) -> None:
        await self.conn.close()

    @asynccontextmanager
    async def tx(self) -> AsyncIterator[aiosqlite.Connection]:
        # One shared connection: writers take turns so a rollback never discards another task's rows.
        async with self._write_lock:
            log.debug("transaction_start")
            try:
                yield self.conn
                await self.conn.commit()
                log.debug("transaction_commit")
            except Exception:
                await self.conn.rollback()
                log.exception("transaction_rollback")
                raise

    async def _fetchone(self, sql: str, params: tuple = ()) -> aiosqlite.Row | None:
        async with self.conn.execute(sql, params) as cursor:
            return await cursor.fetchone()

    # bots

    async def get_bot(self, bot_id: int) -> aiosqlite.Row | None:
        return await self._fetchone("SELECT * FROM bots WHERE id = ?", (bot_id,))

    async def bot_exists(self, bot_id: int) -> bool:
        row = await self._fetchone("SELECT id FROM bots WHERE id = ? LIMIT 1", (bot_id,))
        return row is not None

    async def find_bot_id_by_name(self, name: str) -> int | None:
        row = await self._fetchone("SELECT id FROM bots WHERE name = ? LIMIT 1", (name,))
        return int(row["id"]) if row else None

    async def create_bot(
        self,
        name: str,
        *,
        room_id: int,
        motto: str,
        look: str,
        x: int,
        y: int,
        z: int = 0,
        rotation: int = 2,
        walk_mode: str = "freeroam",
        ai_type: str = "generic",
    ) -> tuple[int, bool]:
        async with self.tx() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO bots(room_id, name, motto, look, x, y, z, rotation, walk_mode, ai_type)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(name) DO NOTHING
                """,
                (room_id, name, motto, look, x, y, z, rotation, walk_mode, ai_type),
            )
            created = cursor.rowcount == 1
            bot_id = cursor.lastrowid if created else None
        if bot_id is None:
            bot_id = await self.find_bot_id_by_name(name)
            if bot_id is None:
                raise LookupError(f"bot {name!r} vanished after insert conflict")
        log.info("bot_create name=%s bot=%s created=%s", name, bot_id, created)
        return int(bot_id), created

    async def list_bot_ids(self) -> list[int]:
        rows = await self.conn.execute_fetchall("SELECT id FROM bots ORDER BY id")
        return [int(row["id"]) for row in rows]

    async def add_bot_response(self, bot_id: int, text: str) -> None:
        async with self.tx() as conn:
            await conn.execute(
                """
                INSERT INTO bots_responses(bot_id, keywords, response_text, serve_id, trigger_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                (bot_id, "", text, 0, 0),
            )

    async def move_bot(self, bot_id: int, x: int, y: int) -> None:
        async with self.tx() as conn:
            await conn.execute("UPDATE bots SET x = ?, y = ? WHERE id = ?", (x, y, bot_id))

    async def set_bot_motto(self, bot_id: int, motto: str) -> None:
        async with self.tx() as conn:
            await conn.execute("UPDATE bots SET motto = ? WHERE id = ?", (motto, bot_id))

    # rooms

    async def count_room_users(self, room_id: int) -> int:
        row = await self._fetchone("SELECT COUNT(*) AS total FROM rooms_users WHERE room_id = ?", (room_id,))
        return int(row["total"]) if row else 0

    async def add_room_user(self, room_id: int, user_id: str) -> None:
        async with self.tx() as conn:
            await conn.execute("INSERT INTO rooms_users(room_id, user_id) VALUES (?, ?)", (room_id, user_id))

    async def list_room_item_ids(self, room_id: int) -> list[int]:
        rows = await self.conn.execute_fetchall(
            "SELECT item_id FROM items_rooms WHERE room_id = ? ORDER BY id",
            (room_id,),
        )
        return [int(row["item_id"]) for row in rows]

    async def place_item(
        self,
        item_id: int,
        room_id: int,
        x: int,
        y: int,
        user_id: str,
        *,
        z: int = 0,
        rot: int = 0,
    ) -> int:
        async with self.tx() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO items_rooms(item_id, room_id, x, y, z, rot, user_id)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (item_id, room_id, x, y, z, rot, user_id),
            )
            return int(cursor.lastrowid)

    # items

    async def add_catalog_item(self, item_name: str) -> int:
        async with self.tx() as conn:
            cursor = await conn.execute("INSERT INTO items_base(item_name) VALUES (?)", (item_name,))
            return int(cursor.lastrowid)

    async def find_catalog_item_id(self, item_name: str) -> int | None:
        row = await self._fetchone(
            "SELECT id FROM items_base WHERE item_name LIKE ? ORDER BY id LIMIT 1",
            (f"%{item_name}%",),
        )
        return int(row["id"]) if row else None

    async def add_user_item(self, user_id: str, item_id: int) -> int:
        async with self.tx() as conn:
            cursor = await conn.execute(
                "INSERT INTO items_users(user_id, item_id) VALUES (?, ?)",
                (user_id, item_id),
            )
            return int(cursor.lastrowid)

    async def get_last_user_item_id(self, user_id: str) -> int | None:
        row = await self._fetchone(
            "SELECT item_id FROM items_users WHERE user_id = ? ORDER BY id DESC LIMIT 1",
            (user_id,),
        )
        return int(row["item_id"]) if row else None

    # missions and logs

    async def add_mission(self, user_id: str, mission_text: str) -> None:
        async with self.tx() as conn:
            await conn.execute(
                "INSERT INTO user_missions(user_id, mission_text) VALUES (?, ?)",
                (user_id, mission_text),
            )

    async def log_interaction(self, bot_id: int, user_id: str, input_text: str, output_text: str) -> None:
        log.info("interaction_log bot=%s user=%s", bot_id, user_id)
        async with self.tx() as conn:
            await conn.execute(
                """
                INSERT INTO ia_logs(bot_id, user_id, input_text, output_text, timestamp)
                VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
                """,
                (bot_id, user_id, input_text, output_text),
            )
