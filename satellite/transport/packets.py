from __future__ import annotations

import logging
import re

from satellite.models.core import ANONYMOUS_SENDER, ChatEvent

log = logging.getLogger(__name__)

SAY_PATTERN = re.compile(r'say"\s+"(.+?)"', re.IGNORECASE)
USER_ID_PATTERN = re.compile(r"user_id=(\d+)")


def decode_payload(raw: str | bytes | bytearray) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")
    return str(raw)


def extract_message(packet: str) -> str | None:
    match = SAY_PATTERN.search(packet)
    return match.group(1) if match else None


def extract_user_id(packet: str) -> str:
    match = USER_ID_PATTERN.search(packet)
    return match.group(1) if match else ANONYMOUS_SENDER


def parse_packet(raw: str | bytes | bytearray) -> ChatEvent | None:
    text = decode_payload(raw)
    message = extract_message(text)
    if not message:
        log.debug("packet_skipped reason=no_chat length=%s", len(text))
        return None
    return ChatEvent(sender_id=extract_user_id(text), message=message)


def format_chat_packet(bot_id: int, message: str) -> str:
    # Quotes would terminate the message early on the receiving side.
    safe = message.replace('"', "'")
    return f'say" "{safe}" user_id={bot_id}'
