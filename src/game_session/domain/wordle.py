"""Messages exchanged with the remote Wordle service."""

from dataclasses import dataclass

WORD_LENGTH = 5


@dataclass(frozen=True)
class WordleStartGame:
    """Ask the Wordle service to pick a secret word for a user."""

    user: str


@dataclass(frozen=True)
class WordleCheckWord:
    """Ask the Wordle service to compare a guess with the secret word."""

    user: str
    word: str


WordleAction = WordleStartGame | WordleCheckWord


@dataclass(frozen=True)
class GameStarted:
    """The Wordle service accepted a new game."""

    user: str

    def has_guessed(self) -> bool:
        return False


@dataclass(frozen=True)
class WordChecked:
    """Result of comparing a guess with the secret word."""

    user: str
    correct_positions: tuple[int, ...]
    contained_in_word: tuple[int, ...]

    def has_guessed(self) -> bool:
        """Return True when every letter is in its correct position."""
        return self.correct_positions == tuple(range(WORD_LENGTH))


WordleEvent = GameStarted | WordChecked
