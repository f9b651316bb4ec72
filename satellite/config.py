from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    db_path: str = os.getenv("DB_PATH", "satellite.db")
    redis_url: str = os.getenv("REDIS_URL", "redis://127.0.0.1:6379")
    ws_url: str = os.getenv("WS_URL", "ws://localhost:3000")
    dev_mode: bool = os.getenv("DEV_MODE", "0") == "1"
    llm_backend: str = os.getenv("LLM_BACKEND", "ollama").strip().lower()
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3")
    llm_timeout_seconds: float = _env_float("LLM_TIMEOUT_SECONDS", 120.0)
    memory_ttl_seconds: int = _env_int("MEMORY_TTL_SECONDS", 3600)
    reconnect_delay_seconds: float = _env_float("RECONNECT_DELAY_SECONDS", 5.0)
    shutdown_drain_seconds: float = _env_float("SHUTDOWN_DRAIN_SECONDS", 5.0)
    personalities_dir: str = os.getenv("PERSONALITIES_DIR", "personalities")
    routines_dir: str = os.getenv("ROUTINES_DIR", "routines")
    default_room_id: int = _env_int("DEFAULT_ROOM_ID", 1)
    purchase_place_x: int = _env_int("PURCHASE_PLACE_X", 4)
    purchase_place_y: int = _env_int("PURCHASE_PLACE_Y", 4)
    auto_place_purchases: bool = os.getenv("AUTO_PLACE_PURCHASES", "1") == "1"

    def redacted(self) -> dict[str, object]:
        return {
            "db_path": self.db_path,
            "redis_url": _strip_credentials(self.redis_url),
            "ws_url": self.ws_url,
            "dev_mode": self.dev_mode,
            "llm_backend": self.llm_backend,
            "ollama_base_url": self.ollama_base_url,
            "ollama_model": self.ollama_model,
            "memory_ttl_seconds": self.memory_ttl_seconds,
            "reconnect_delay_seconds": self.reconnect_delay_seconds,
            "personalities_dir": self.personalities_dir,
            "routines_dir": self.routines_dir,
            "auto_place_purchases": self.auto_place_purchases,
        }


def _strip_credentials(url: str) -> str:
    scheme, sep, rest = url.partition("://")
    if not sep or "@" not in rest:
        return url
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


def configure_logging(dev_mode: bool) -> None:
    level = logging.DEBUG if dev_mode else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
