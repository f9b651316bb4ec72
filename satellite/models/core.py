from __future__ import annotations

from dataclasses import dataclass

from satellite.models.actions import Action

ANONYMOUS_SENDER = "anonymous"


@dataclass(frozen=True)
class ChatEvent:
    sender_id: str
    message: str

    @property
    def is_anonymous(self) -> bool:
        return self.sender_id == ANONYMOUS_SENDER


@dataclass
class ActionResult:
    ok: bool
    message: str
    item_id: int | None = None


@dataclass
class TurnResult:
    bot_id: int
    sender_id: str
    message: str
    completion: str
    action: Action
    outcome: ActionResult
