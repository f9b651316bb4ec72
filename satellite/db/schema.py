from __future__ import annotations

import aiosqlite

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS bots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id INTEGER NOT NULL DEFAULT 1,
    name TEXT NOT NULL,
    motto TEXT,
    look TEXT,
    x INTEGER NOT NULL,
    y INTEGER NOT NULL,
    z INTEGER NOT NULL DEFAULT 0,
    rotation INTEGER NOT NULL DEFAULT 2,
    walk_mode TEXT NOT NULL DEFAULT 'freeroam',
    ai_type TEXT NOT NULL DEFAULT 'generic'
);
CREATE TABLE IF NOT EXISTS bots_responses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    bot_id INTEGER NOT NULL REFERENCES bots(id),
    keywords TEXT,
    response_text TEXT NOT NULL,
    serve_id INTEGER,
    trigger_id INTEGER
);
CREATE TABLE IF NOT EXISTS rooms_users (
    room_id INTEGER NOT NULL,
    user_id TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS items_rooms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id INTEGER NOT NULL,
    room_id INTEGER NOT NULL,
    x INTEGER NOT NULL,
    y INTEGER NOT NULL,
    z INTEGER NOT NULL,
    rot INTEGER NOT NULL,
    user_id TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS items_base (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_name TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS items_users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    item_id INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS user_missions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    mission_text TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS ia_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    bot_id INTEGER NOT NULL,
    user_id TEXT NOT NULL,
    input_text TEXT NOT NULL,
    output_text TEXT NOT NULL,
    timestamp DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_bots_name ON bots(name);
CREATE INDEX IF NOT EXISTS idx_rooms_users_room ON rooms_users(room_id);
CREATE INDEX IF NOT EXISTS idx_items_rooms_room ON items_rooms(room_id);
CREATE INDEX IF NOT EXISTS idx_items_users_user ON items_users(user_id, id);
CREATE INDEX IF NOT EXISTS idx_ia_logs_bot ON ia_logs(bot_id, timestamp);
"""


async def init_db(conn: aiosqlite.Connection) -> None:
    await conn.executescript(SCHEMA_SQL)
    await conn.commit()
