from __future__ import annotations

import logging

from redis.asyncio import Redis
from redis.exceptions import WatchError

log = logging.getLogger(__name__)

KEY_PREFIX = "memory"


class MemoryConflictError(RuntimeError):
    pass


def memory_key(sender_id: str) -> str:
    return f"{KEY_PREFIX}:{sender_id}"


def extend_transcript(previous: str | None, turn: str) -> str:
    if not previous:
        return turn
    return f"{previous}\n{turn}"


class MemoryStore:
    def __init__(self, redis: Redis, ttl_seconds: int = 3600) -> None:
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def get(self, sender_id: str) -> str | None:
        value = await self.redis.get(memory_key(sender_id))
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, sender_id: str, text: str, ttl_seconds: int | None = None) -> None:
        await self.redis.set(memory_key(sender_id), text, ex=ttl_seconds or self.ttl_seconds)

    async def append_turn(self, sender_id: str, previous: str | None, turn: str) -> str:
        """Write ``previous`` extended by ``turn``, refusing if the entry moved since it was read."""
        key = memory_key(sender_id)
        async with self.redis.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(key)
                current = await pipe.get(key)
                if isinstance(current, bytes):
                    current = current.decode("utf-8")
                if current is None and previous is not None:
                    # Expired while the turn ran; a stale transcript is not carried forward.
                    log.debug("memory_expired_mid_turn sender=%s", sender_id)
                    previous = None
                if current != previous:
                    raise MemoryConflictError(f"memory for sender {sender_id} changed during the turn")
                updated = extend_transcript(previous, turn)
                pipe.multi()
                pipe.set(key, updated, ex=self.ttl_seconds)
                await pipe.execute()
            except WatchError as exc:
                log.warning("memory_lost_update sender=%s detail=watch_failed", sender_id)
                raise MemoryConflictError(str(exc)) from exc
            except MemoryConflictError:
                log.warning("memory_lost_update sender=%s detail=value_changed", sender_id)
                raise
        return updated
