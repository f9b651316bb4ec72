from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod

import requests
from pydantic import BaseModel, ValidationError

from satellite.config import Settings

log = logging.getLogger(__name__)


class CompletionServiceError(RuntimeError):
    pass


class GenerateResponse(BaseModel):
    response: str


class BaseProvider(ABC):
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @abstractmethod
    def generate(self, prompt: str) -> str:
        raise NotImplementedError


class StubProvider(BaseProvider):
    def generate(self, prompt: str) -> str:
        lines = prompt.strip().splitlines()
        heard = lines[-2] if len(lines) > 1 else prompt.strip()
        return f"[stub] {heard[:80]}"


class OllamaProvider(BaseProvider):
    def generate(self, prompt: str) -> str:
        payload = {
            "model": self.settings.ollama_model,
            "prompt": prompt,
            "stream": False,
        }
        try:
            response = requests.post(
                f"{self.settings.ollama_base_url}/api/generate",
                headers={"Content-Type": "application/json"},
                data=json.dumps(payload),
                timeout=self.settings.llm_timeout_seconds,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            raise CompletionServiceError(f"ollama_unreachable: {exc}") from exc
        except ValueError as exc:
            raise CompletionServiceError("ollama_invalid_json") from exc

        try:
            parsed = GenerateResponse.model_validate(body)
        except ValidationError as exc:
            raise CompletionServiceError("ollama_unexpected_response") from exc
        return parsed.response.strip()


class CompletionClient:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._providers: dict[str, BaseProvider] = {
            "stub": StubProvider(settings),
            "ollama": OllamaProvider(settings),
        }
        self.backend = self._select_backend(settings.llm_backend)

    def _select_backend(self, backend: str) -> str:
        normalized = (backend or "").strip().lower()
        if normalized in self._providers:
            return normalized
        log.warning("llm_backend_unknown backend=%s fallback=ollama", backend)
        return "ollama"

    async def complete(self, prompt: str) -> str:
        provider = self._providers[self.backend]
        text = await asyncio.to_thread(provider.generate, prompt)
        log.debug("completion_done backend=%s chars=%s", self.backend, len(text))
        return text
