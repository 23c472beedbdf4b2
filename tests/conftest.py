"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from typing import NoReturn
from uuid import UUID, uuid4

import pytest

from game_session.adapters.mailbox_runtime import MailboxRuntime
from game_session.adapters.wordle_client import WordleClient
from game_session.config import Settings
from game_session.containers import AppContainer, build_container
from game_session.domain.events import GameSessionAction
from game_session.domain.wordle import (
    GameStarted,
    WordChecked,
    WordleAction,
    WordleEvent,
    WordleStartGame,
)
from game_session.errors import DependencyError
from game_session.services.orchestrator import GameSessionService
from game_session.services.runtime import InvocationSuspended, Runtime

WORDLE_ADDRESS = "http://wordle.test/"
PROGRAM_ID = "game-session"
WORDLE_TOKEN = "reply-token"


@dataclass
class FakeRuntime(Runtime):
    """Runtime that records every effect instead of delivering it."""

    program_id: str = PROGRAM_ID
    sent: list[tuple[UUID, str, object]] = field(default_factory=list)
    delayed: list[tuple[UUID, str, object, float]] = field(default_factory=list)
    replies: list[tuple[str, object]] = field(default_factory=list)
    woken: list[UUID] = field(default_factory=list)
    discarded: list[UUID] = field(default_factory=list)
    fail_sends: bool = False
    invocation_id: UUID | None = None
    sender: str | None = None

    def enter(self, sender: str, invocation_id: UUID | None = None) -> UUID:
        self.sender = sender
        self.invocation_id = invocation_id or uuid4()
        return self.invocation_id

    async def send(self, target: str, payload: object) -> UUID:
        if self.fail_sends:
            raise DependencyError("transport unavailable")
        message_id = uuid4()
        self.sent.append((message_id, target, payload))
        return message_id

    async def send_delayed(
        self, target: str, payload: object, delay_seconds: float
    ) -> UUID:
        message_id = uuid4()
        self.delayed.append((message_id, target, payload, delay_seconds))
        return message_id

    async def reply(self, payload: object) -> None:
        self.replies.append((self.current_sender(), payload))

    def suspend_current(self) -> NoReturn:
        raise InvocationSuspended(self.current_invocation_id())

    def wake(self, invocation_id: UUID) -> None:
        self.woken.append(invocation_id)

    def discard(self, invocation_id: UUID) -> None:
        self.discarded.append(invocation_id)

    def current_invocation_id(self) -> UUID:
        assert self.invocation_id is not None
        return self.invocation_id

    def current_sender(self) -> str:
        assert self.sender is not None
        return self.sender

    def self_identity(self) -> str:
        return self.program_id


@dataclass
class FakeWordleClient(WordleClient):
    """Wordle client that records deliveries."""

    deliveries: list[tuple[str, UUID, WordleAction]] = field(default_factory=list)
    fail: bool = False
    closed: bool = False

    async def deliver(
        self, address: str, message_id: UUID, action: WordleAction
    ) -> None:
        if self.fail:
            raise DependencyError("Wordle service unavailable")
        self.deliveries.append((address, message_id, action))

    async def close(self) -> None:
        self.closed = True


@dataclass
class AutoReplyWordleClient(FakeWordleClient):
    """Wordle client that answers every request against a fixed secret word."""

    secret: str = "house"
    runtime: MailboxRuntime | None = None

    async def deliver(
        self, address: str, message_id: UUID, action: WordleAction
    ) -> None:
        await super().deliver(address, message_id, action)
        assert self.runtime is not None
        await self.runtime.submit_reply(message_id, self.answer(action))

    def answer(self, action: WordleAction) -> WordleEvent:
        if isinstance(action, WordleStartGame):
            return GameStarted(user=action.user)
        correct = tuple(
            index
            for index, (guess, actual) in enumerate(
                zip(action.word, self.secret, strict=True)
            )
            if guess == actual
        )
        contained = tuple(
            index
            for index, guess in enumerate(action.word)
            if guess in self.secret and index not in correct
        )
        return WordChecked(
            user=action.user, correct_positions=correct, contained_in_word=contained
        )


def invoke(
    service: GameSessionService,
    runtime: FakeRuntime,
    sender: str,
    action: GameSessionAction,
    invocation_id: UUID | None = None,
) -> bool:
    """Run the action entry point once; return True if it suspended."""
    runtime.enter(sender, invocation_id)
    try:
        asyncio.run(service.handle(action))
    except InvocationSuspended:
        return True
    return False


def deliver_reply(
    service: GameSessionService,
    runtime: FakeRuntime,
    reply_to: UUID,
    event: WordleEvent,
) -> None:
    """Run the reply entry point once as the Wordle service."""
    runtime.enter(WORDLE_ADDRESS)
    asyncio.run(service.handle_reply(reply_to, event))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        wordle_service_url="http://wordle.test",
        wordle_reply_token=WORDLE_TOKEN,
        program_id=PROGRAM_ID,
        game_timeout_seconds=600.0,
        reply_wait_seconds=2.0,
    )


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def service(runtime: FakeRuntime) -> GameSessionService:
    return GameSessionService(
        runtime=runtime, wordle_address=WORDLE_ADDRESS, timeout_seconds=600.0
    )


@pytest.fixture
def wordle_client() -> AutoReplyWordleClient:
    return AutoReplyWordleClient()


@pytest.fixture
def container(
    settings: Settings, wordle_client: AutoReplyWordleClient
) -> AppContainer:
    app_container = build_container(settings, wordle_client=wordle_client)
    wordle_client.runtime = app_container.runtime
    return app_container
