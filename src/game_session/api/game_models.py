"""Pydantic models for game session HTTP payloads."""

from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field


class StartGamePayload(BaseModel):
    """Start or restart a game."""

    type: Literal["start_game"]


class CheckWordPayload(BaseModel):
    """Submit a guess."""

    type: Literal["check_word"]
    word: str


class GameActionRequest(BaseModel):
    """Body of a user action request."""

    action: Annotated[
        StartGamePayload | CheckWordPayload, Field(discriminator="type")
    ]


class GameStartedPayload(BaseModel):
    """Wordle service accepted a new game."""

    type: Literal["game_started"]
    user: str


class WordCheckedPayload(BaseModel):
    """Wordle service checked a guess."""

    type: Literal["word_checked"]
    user: str
    correct_positions: list[int] = Field(default_factory=list)
    contained_in_word: list[int] = Field(default_factory=list)


class WordleReplyRequest(BaseModel):
    """Reply delivered by the Wordle service."""

    reply_to: UUID
    event: Annotated[
        GameStartedPayload | WordCheckedPayload, Field(discriminator="type")
    ]
