"""Domain models for per-user game sessions."""

from dataclasses import dataclass, field
from uuid import UUID

from game_session.domain.correlation import CorrelationLedger
from game_session.domain.events import GameStatus
from game_session.domain.wordle import WordleEvent

MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class Init:
    """No game has been started yet."""


@dataclass(frozen=True)
class AwaitingRemoteStart:
    """Waiting for the Wordle service to accept a new game."""


@dataclass(frozen=True)
class AwaitingUserInput:
    """Waiting for the user to submit a guess."""


@dataclass(frozen=True)
class AwaitingRemoteCheck:
    """Waiting for the Wordle service to check a guess."""


@dataclass(frozen=True)
class ReplyReady:
    """The Wordle service replied; the suspended invocation may complete."""

    event: WordleEvent


@dataclass(frozen=True)
class Finished:
    """The game is over."""

    outcome: GameStatus


SessionStatus = (
    Init
    | AwaitingRemoteStart
    | AwaitingUserInput
    | AwaitingRemoteCheck
    | ReplyReady
    | Finished
)


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session record."""

    status: SessionStatus
    round_id: UUID | None
    pending_request_id: UUID | None
    outbound_request_id: UUID | None
    attempts: int


@dataclass
class SessionRecord:
    """Mutable state machine instance for one user."""

    status: SessionStatus = field(default_factory=Init)
    ledger: CorrelationLedger = field(default_factory=CorrelationLedger)
    attempts: int = 0

    def is_awaiting_reply(self) -> bool:
        """Return True while a Wordle reply is expected."""
        return isinstance(self.status, AwaitingRemoteStart | AwaitingRemoteCheck)

    def is_finished(self) -> bool:
        return isinstance(self.status, Finished)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self.status,
            round_id=self.ledger.round_id,
            pending_request_id=self.ledger.pending_request_id,
            outbound_request_id=self.ledger.outbound_request_id,
            attempts=self.attempts,
        )


@dataclass(frozen=True)
class GameSessionState:
    """Snapshot of every session known to the orchestrator."""

    wordle_address: str
    sessions: tuple[tuple[str, SessionSnapshot], ...]
