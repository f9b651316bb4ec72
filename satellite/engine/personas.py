from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

log = logging.getLogger(__name__)

ROUTINE_KEY_PATTERN = re.compile(r"^\d{2}:\d{2}$")


class PersonaProfile(BaseModel):
    name: str = "NXR AI"
    tone: str = "neutral"
    interests: list[str] = Field(default_factory=lambda: ["technology", "exploration"])
    emotions: bool = True
    routines: dict[str, str] = Field(default_factory=dict)


DEFAULT_PERSONA = PersonaProfile()


def _resource_name(bot_id: int) -> str:
    return f"bot_{bot_id}.json"


class PersonaLibrary:
    def __init__(self, personalities_dir: str | Path, routines_dir: str | Path) -> None:
        self.personalities_dir = Path(personalities_dir)
        self.routines_dir = Path(routines_dir)

    def ensure_dirs(self) -> None:
        for directory in (self.personalities_dir, self.routines_dir):
            if not directory.exists():
                directory.mkdir(parents=True, exist_ok=True)
                log.info("dir_created path=%s", directory)

    def persona_path(self, bot_id: int) -> Path:
        return self.personalities_dir / _resource_name(bot_id)

    def routine_path(self, bot_id: int) -> Path:
        return self.routines_dir / _resource_name(bot_id)

    def load(self, bot_id: int) -> PersonaProfile:
        path = self.persona_path(bot_id)
        try:
            profile = PersonaProfile.model_validate_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return DEFAULT_PERSONA.model_copy(deep=True)
        except (OSError, ValidationError, ValueError):
            log.warning("persona_invalid bot=%s path=%s fallback=default", bot_id, path, exc_info=True)
            return DEFAULT_PERSONA.model_copy(deep=True)

        if profile.routines:
            self._sync_routines(bot_id, profile.routines)
        return profile

    def _sync_routines(self, bot_id: int, routines: dict[str, str]) -> None:
        out_path = self.routine_path(bot_id)
        try:
            self.routines_dir.mkdir(parents=True, exist_ok=True)
            out_path.write_text(json.dumps(routines, indent=2, sort_keys=True), encoding="utf-8")
        except OSError:
            log.warning("routine_sync_failed bot=%s path=%s", bot_id, out_path, exc_info=True)
            return
        log.info("routine_sync bot=%s path=%s", bot_id, out_path)

    def load_routine(self, bot_id: int) -> dict[str, str]:
        path = self.routine_path(bot_id)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            log.debug("routine_unreadable bot=%s path=%s", bot_id, path)
            return {}
        if not isinstance(data, dict):
            log.debug("routine_malformed bot=%s path=%s", bot_id, path)
            return {}
        return {
            key: value
            for key, value in data.items()
            if isinstance(key, str) and ROUTINE_KEY_PATTERN.match(key) and isinstance(value, str) and value.strip()
        }
