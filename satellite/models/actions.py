from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class Talk(BaseModel):
    kind: Literal["talk"] = "talk"
    text: str


class Move(BaseModel):
    kind: Literal["move"] = "move"
    x: int = 5
    y: int = 5


class BuyItem(BaseModel):
    kind: Literal["buy_item"] = "buy_item"
    item: str = Field(min_length=1)


class PlaceItem(BaseModel):
    kind: Literal["place_item"] = "place_item"
    item: str = Field(min_length=1)
    x: int
    y: int


class Trade(BaseModel):
    kind: Literal["trade"] = "trade"
    item: str = Field(min_length=1)


class AssignMission(BaseModel):
    kind: Literal["assign_mission"] = "assign_mission"
    mission: str = Field(min_length=1)


class SetEmotion(BaseModel):
    kind: Literal["set_emotion"] = "set_emotion"
    emotion: str = Field(min_length=1)


Action = Annotated[
    Union[Talk, Move, BuyItem, PlaceItem, Trade, AssignMission, SetEmotion],
    Field(discriminator="kind"),
]
