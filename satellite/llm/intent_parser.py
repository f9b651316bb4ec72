from __future__ import annotations

import logging
import re
from typing import Callable

from satellite.models.actions import (
    Action,
    AssignMission,
    BuyItem,
    Move,
    PlaceItem,
    SetEmotion,
    Talk,
    Trade,
)

log = logging.getLogger(__name__)

DEFAULT_ITEM = "chair"
MISSION_PATTERN = re.compile(r"mission:", re.IGNORECASE)

PLACE_PATTERN = re.compile(r"\bplace\s+(\w+)\s+at\s+(-?\d+)\s+(-?\d+)\b", re.IGNORECASE)
MOVE_PATTERN = re.compile(r"\bmove\s+to\s+(-?\d+)\s+(-?\d+)\b", re.IGNORECASE)
EMOTION_PATTERN = re.compile(r"\*([^*\n]+)\*")

Classifier = Callable[[str, str], "Action | None"]


def has_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text, flags=re.IGNORECASE) is not None


def word_after(text: str, keyword: str, default: str = DEFAULT_ITEM) -> str:
    match = re.search(rf"\b{re.escape(keyword)}\s+(\w+)", text, flags=re.IGNORECASE)
    return match.group(1) if match else default


def classify_buy(text: str, sender_id: str) -> Action | None:
    if not has_word(text, "buy"):
        return None
    return BuyItem(item=word_after(text, "buy"))


def classify_place(text: str, sender_id: str) -> Action | None:
    if not has_word(text, "place"):
        return None
    match = PLACE_PATTERN.search(text)
    if match is None:
        return None
    return PlaceItem(item=match.group(1), x=int(match.group(2)), y=int(match.group(3)))


def classify_trade(text: str, sender_id: str) -> Action | None:
    if not has_word(text, "trade"):
        return None
    return Trade(item=word_after(text, "trade"))


def classify_mission(text: str, sender_id: str) -> Action | None:
    match = MISSION_PATTERN.search(text)
    if match is None:
        return None
    mission = text[match.end() :].strip()
    if not mission:
        return None
    return AssignMission(mission=mission)


def classify_interact(text: str, sender_id: str) -> Action | None:
    if not has_word(text, "interact"):
        return None
    return Talk(text=f"I'm here to help you, {sender_id}!")


def classify_move(text: str, sender_id: str) -> Action | None:
    if "move to" not in text.lower():
        return None
    match = MOVE_PATTERN.search(text)
    if match is None:
        return None
    return Move(x=int(match.group(1)), y=int(match.group(2)))


def classify_emotion(text: str, sender_id: str) -> Action | None:
    match = EMOTION_PATTERN.search(text)
    if match is None or not match.group(1).strip():
        return None
    return SetEmotion(emotion=match.group(1).strip())


# Priority order is behavior: the first classifier that returns an action wins.
CLASSIFIERS: tuple[Classifier, ...] = (
    classify_buy,
    classify_place,
    classify_trade,
    classify_mission,
    classify_interact,
    classify_move,
    classify_emotion,
)


def classify(text: str, sender_id: str) -> Action:
    for classifier in CLASSIFIERS:
        action = classifier(text, sender_id)
        if action is not None:
            log.info("intent_classified rule=%s kind=%s", classifier.__name__, action.kind)
            return action
    log.info("intent_classified rule=default kind=talk")
    return Talk(text=text)
