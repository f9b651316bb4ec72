from __future__ import annotations

from satellite.engine.personas import PersonaProfile
from satellite.models.core import ANONYMOUS_SENDER

GUEST_LABEL = "Guest"
BOT_LABEL = "Bot"


def speaker_label(sender_id: str) -> str:
    if sender_id == ANONYMOUS_SENDER:
        return GUEST_LABEL
    return f"User({sender_id})"


def format_turn(sender_id: str, message: str, response: str) -> str:
    return f"{speaker_label(sender_id)}: {message}\n{BOT_LABEL}: {response}"


def build_prompt(
    profile: PersonaProfile,
    memory: str | None,
    sender_id: str,
    message: str,
    context: str,
) -> str:
    lines = [
        f"You are {profile.name}, a {profile.tone} AI who loves {', '.join(profile.interests)}.",
        f"Current context: {context}",
        "Conversation so far:",
        memory or "",
        f"{speaker_label(sender_id)}: {message}",
        f"{BOT_LABEL}:",
    ]
    return "\n".join(lines).strip()
