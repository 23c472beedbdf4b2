"""Session state machine mediating games with the Wordle service.

Every entry point may be re-run from the top after the runtime wakes a
suspended invocation, so all decisions are taken from the session record
alone and no local state is expected to survive a suspension.
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from game_session.domain.events import (
    CheckGameStatus,
    CheckWord,
    GameOver,
    GameSessionAction,
    GameSessionEvent,
    GameStatus,
    StartGame,
    progress_event,
)
from game_session.domain.sessions import (
    MAX_ATTEMPTS,
    AwaitingRemoteCheck,
    AwaitingRemoteStart,
    AwaitingUserInput,
    Finished,
    GameSessionState,
    Init,
    ReplyReady,
    SessionRecord,
    SessionStatus,
)
from game_session.domain.wordle import (
    WORD_LENGTH,
    WordleCheckWord,
    WordleEvent,
    WordleStartGame,
)
from game_session.errors import IllegalUseError, InvalidWordError
from game_session.services.runtime import Runtime
from game_session.services.session_table import SessionTable
from game_session.services.timeout import TimeoutGuard

logger = logging.getLogger(__name__)


@dataclass
class GameSessionService:
    """Drives each user's game through start, guesses and a final outcome."""

    runtime: Runtime
    wordle_address: str
    timeout_seconds: float
    table: SessionTable = field(default_factory=SessionTable)
    timeout_guard: TimeoutGuard = field(init=False)

    def __post_init__(self) -> None:
        self.timeout_guard = TimeoutGuard(runtime=self.runtime, table=self.table)

    async def handle(self, action: GameSessionAction) -> None:
        """Entry point for user actions and self-addressed signals."""
        if isinstance(action, StartGame):
            await self._start_game()
        elif isinstance(action, CheckWord):
            await self._check_word(action.word)
        elif isinstance(action, CheckGameStatus):
            await self.timeout_guard.check_game_status(action.user, action.session_id)
        else:
            raise TypeError(f"Unsupported action: {action!r}")

    async def handle_reply(self, reply_to: UUID, event: WordleEvent) -> None:
        """Entry point for replies from the Wordle service."""
        record = self.table.get(event.user)
        if (
            record is None
            or not record.is_awaiting_reply()
            or not record.ledger.matches_reply(reply_to)
        ):
            logger.debug(
                "Dropping unmatched Wordle reply",
                extra={"user": event.user, "reply_to": str(reply_to)},
            )
            return
        self.runtime.wake(record.ledger.pending_request_id)
        record.status = ReplyReady(event)

    def state(self) -> GameSessionState:
        """Return a read-only snapshot of every session."""
        return GameSessionState(
            wordle_address=self.wordle_address,
            sessions=self.table.snapshot(),
        )

    async def _start_game(self) -> None:
        user = self.runtime.current_sender()
        status = self._status_of(user)

        if isinstance(status, ReplyReady):
            await self.runtime.reply(progress_event(status.event))
            self.table.get_or_create(user).status = AwaitingUserInput()
            return
        if isinstance(status, AwaitingUserInput | AwaitingRemoteCheck):
            raise IllegalUseError("User is already in game")

        invocation_id = self.runtime.current_invocation_id()
        outbound_id = await self.runtime.send(
            self.wordle_address, WordleStartGame(user=user)
        )
        await self.runtime.send_delayed(
            self.runtime.self_identity(),
            CheckGameStatus(user=user, session_id=invocation_id),
            self.timeout_seconds,
        )
        record = self.table.get_or_create(user)
        self._discard_superseded(record, invocation_id)
        record.ledger.open_round(invocation_id, outbound_id)
        record.attempts = 0
        record.status = AwaitingRemoteStart()
        logger.info("Game started", extra={"user": user})
        self.runtime.suspend_current()

    async def _check_word(self, word: str) -> None:
        user = self.runtime.current_sender()
        status = self._status_of(user)

        if isinstance(status, ReplyReady):
            await self._finish_round(user, status.event)
            return
        if not isinstance(status, AwaitingUserInput | AwaitingRemoteCheck):
            raise IllegalUseError("User is not in game")
        if not is_valid_word(word):
            raise InvalidWordError("Invalid word")

        invocation_id = self.runtime.current_invocation_id()
        outbound_id = await self.runtime.send(
            self.wordle_address, WordleCheckWord(user=user, word=word)
        )
        record = self.table.get_or_create(user)
        self._discard_superseded(record, invocation_id)
        record.ledger.await_reply(invocation_id, outbound_id)
        record.status = AwaitingRemoteCheck()
        self.runtime.suspend_current()

    async def _finish_round(self, user: str, event: WordleEvent) -> None:
        record = self.table.get_or_create(user)
        attempts = record.attempts + 1
        reply: GameSessionEvent
        next_status: SessionStatus
        if event.has_guessed():
            reply = GameOver(GameStatus.WIN)
            next_status = Finished(GameStatus.WIN)
        elif attempts == MAX_ATTEMPTS:
            reply = GameOver(GameStatus.LOSE)
            next_status = Finished(GameStatus.LOSE)
        else:
            reply = progress_event(event)
            next_status = AwaitingUserInput()

        await self.runtime.reply(reply)
        record.attempts = attempts
        record.status = next_status
        if isinstance(next_status, Finished):
            logger.info(
                "Game finished",
                extra={
                    "user": user,
                    "outcome": next_status.outcome.value,
                    "attempts": attempts,
                },
            )

    def _discard_superseded(self, record: SessionRecord, invocation_id: UUID) -> None:
        pending = record.ledger.pending_request_id
        if record.is_awaiting_reply() and pending not in (None, invocation_id):
            self.runtime.discard(pending)

    def _status_of(self, user: str) -> SessionStatus:
        record = self.table.get(user)
        return record.status if record is not None else Init()


def is_valid_word(word: str) -> bool:
    """Return True for words of exactly five lowercase characters."""
    return len(word) == WORD_LENGTH and all(char.islower() for char in word)
