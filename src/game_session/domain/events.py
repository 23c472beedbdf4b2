"""User-facing actions and events of a game session."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from game_session.domain.wordle import GameStarted, WordleEvent


class GameStatus(str, Enum):
    """Terminal outcome of a game."""

    WIN = "win"
    LOSE = "lose"


@dataclass(frozen=True)
class StartGame:
    """User asks to start (or restart) a game."""


@dataclass(frozen=True)
class CheckWord:
    """User submits a guess."""

    word: str


@dataclass(frozen=True)
class CheckGameStatus:
    """Delayed self-signal checking whether a game ran out of time."""

    user: str
    session_id: UUID


GameSessionAction = StartGame | CheckWord | CheckGameStatus


@dataclass(frozen=True)
class StartSuccess:
    """The game has started and the user may submit guesses."""


@dataclass(frozen=True)
class CheckWordResult:
    """Positions of matched letters for the last guess."""

    correct_positions: tuple[int, ...]
    contained_in_word: tuple[int, ...]


@dataclass(frozen=True)
class GameOver:
    """The game has finished."""

    status: GameStatus


GameSessionEvent = StartSuccess | CheckWordResult | GameOver


def progress_event(event: WordleEvent) -> GameSessionEvent:
    """Translate a Wordle service event into a user-facing progress event."""
    if isinstance(event, GameStarted):
        return StartSuccess()
    return CheckWordResult(
        correct_positions=event.correct_positions,
        contained_in_word=event.contained_in_word,
    )
