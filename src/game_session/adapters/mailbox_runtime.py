"""Single-worker asyncio runtime hosting the game session entry points.

Invocations are processed one at a time from a FIFO mailbox. Suspending an
invocation parks its envelope in a waitlist; waking it puts the same envelope
back on the mailbox so the entry point runs again from the top.

A reply future lives until the invocation settles or its caller stops
waiting. Each user mailbox keeps only the newest mailbox_size messages.
"""

import asyncio
import contextlib
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import NoReturn
from uuid import UUID, uuid4

from game_session.adapters.wordle_client import WordleClient
from game_session.domain.events import GameSessionAction, GameSessionEvent
from game_session.domain.wordle import WordleEvent
from game_session.errors import GameSessionError
from game_session.services.runtime import InvocationSuspended

logger = logging.getLogger(__name__)

ActionHandler = Callable[[GameSessionAction], Awaitable[None]]
ReplyHandler = Callable[[UUID, WordleEvent], Awaitable[None]]


@dataclass(frozen=True)
class Envelope:
    """A message addressed to the runtime's program."""

    id: UUID
    source: str
    destination: str
    payload: object
    reply_to: UUID | None = None


@dataclass
class MailboxRuntime:
    """Runtime implementation backed by an asyncio queue and a waitlist."""

    program_id: str
    wordle_address: str
    wordle_client: WordleClient
    mailbox_size: int = 100
    _handle: ActionHandler | None = field(default=None, init=False)
    _handle_reply: ReplyHandler | None = field(default=None, init=False)
    _queue: asyncio.Queue[Envelope] = field(default_factory=asyncio.Queue, init=False)
    _waitlist: dict[UUID, Envelope] = field(default_factory=dict, init=False)
    _replies: dict[UUID, asyncio.Future] = field(default_factory=dict, init=False)
    _mailboxes: dict[str, deque[object]] = field(default_factory=dict, init=False)
    _timers: dict[UUID, asyncio.TimerHandle] = field(default_factory=dict, init=False)
    _current: Envelope | None = field(default=None, init=False)
    _worker: asyncio.Task | None = field(default=None, init=False)

    def mount(self, handle: ActionHandler, handle_reply: ReplyHandler) -> None:
        """Attach the program entry points served by this runtime."""
        self._handle = handle
        self._handle_reply = handle_reply

    def start(self) -> None:
        """Start the worker task on the running event loop."""
        if self._worker is None:
            self._worker = asyncio.get_running_loop().create_task(self.run())

    async def run(self) -> None:
        """Process envelopes one at a time until cancelled."""
        while True:
            envelope = await self._queue.get()
            try:
                await self._dispatch(envelope)
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued envelope has been processed."""
        await self._queue.join()

    async def close(self) -> None:
        """Cancel pending timers, stop the worker and release the client."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
        await self.wordle_client.close()

    async def submit(self, source: str, action: GameSessionAction) -> UUID:
        """Queue a user action and return its invocation id."""
        if source in (self.program_id, self.wordle_address):
            raise ValueError(f"Reserved identity cannot submit actions: {source}")
        envelope = Envelope(
            id=uuid4(), source=source, destination=self.program_id, payload=action
        )
        self._replies[envelope.id] = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(envelope)
        return envelope.id

    async def submit_reply(self, reply_to: UUID, event: WordleEvent) -> None:
        """Queue a reply received from the Wordle service."""
        self._queue.put_nowait(
            Envelope(
                id=uuid4(),
                source=self.wordle_address,
                destination=self.program_id,
                payload=event,
                reply_to=reply_to,
            )
        )

    async def wait_for_reply(
        self, invocation_id: UUID, timeout: float
    ) -> GameSessionEvent | None:
        """Wait for the reply to an invocation; None if it is still pending.

        Errors raised while handling the invocation are re-raised here. The
        future is released on return, so a later reply only reaches the
        user's mailbox.
        """
        future = self._replies.get(invocation_id)
        if future is None:
            raise LookupError(f"Unknown invocation {invocation_id}")
        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout)
        except TimeoutError:
            return None
        finally:
            self._replies.pop(invocation_id, None)

    def discard(self, invocation_id: UUID) -> None:
        """Drop a parked invocation that will never be woken."""
        if self._waitlist.pop(invocation_id, None) is not None:
            logger.debug(
                "Discarded invocation", extra={"invocation_id": str(invocation_id)}
            )
        self._settle(invocation_id)

    def messages_for(self, user: str) -> list[object]:
        """Return every event replied or sent to a user, oldest first."""
        return list(self._mailboxes.get(user, ()))

    def is_suspended(self, invocation_id: UUID) -> bool:
        return invocation_id in self._waitlist

    async def send(self, target: str, payload: object) -> UUID:
        """Route a message to the Wordle service, this program or a user."""
        message_id = uuid4()
        if target == self.wordle_address:
            await self.wordle_client.deliver(target, message_id, payload)
        else:
            self._deliver_local(message_id, target, payload)
        return message_id

    async def send_delayed(
        self, target: str, payload: object, delay_seconds: float
    ) -> UUID:
        """Deliver a local message after delay_seconds."""
        if target == self.wordle_address:
            raise ValueError("Delayed delivery to the Wordle service is unsupported")
        message_id = uuid4()
        self._timers[message_id] = asyncio.get_running_loop().call_later(
            delay_seconds, self._fire_timer, message_id, target, payload
        )
        return message_id

    async def reply(self, payload: object) -> None:
        """Reply to the sender of the current invocation."""
        envelope = self._require_current()
        self._append_message(envelope.source, payload)
        future = self._replies.pop(envelope.id, None)
        if future is not None and not future.done():
            future.set_result(payload)

    def suspend_current(self) -> NoReturn:
        raise InvocationSuspended(self._require_current().id)

    def wake(self, invocation_id: UUID) -> None:
        """Put a parked invocation back on the mailbox."""
        envelope = self._waitlist.pop(invocation_id, None)
        if envelope is None:
            raise LookupError(f"No suspended invocation {invocation_id}")
        logger.debug("Waking invocation", extra={"invocation_id": str(invocation_id)})
        self._queue.put_nowait(envelope)

    def current_invocation_id(self) -> UUID:
        return self._require_current().id

    def current_sender(self) -> str:
        return self._require_current().source

    def self_identity(self) -> str:
        return self.program_id

    async def _dispatch(self, envelope: Envelope) -> None:
        if self._handle is None or self._handle_reply is None:
            raise RuntimeError("No program mounted on the runtime")
        self._current = envelope
        try:
            if envelope.reply_to is None:
                await self._handle(envelope.payload)
            else:
                await self._handle_reply(envelope.reply_to, envelope.payload)
        except InvocationSuspended:
            self._waitlist[envelope.id] = envelope
            logger.debug(
                "Invocation suspended", extra={"invocation_id": str(envelope.id)}
            )
            return
        except GameSessionError as exc:
            logger.warning(
                "Invocation rejected: %s",
                exc,
                extra={"invocation_id": str(envelope.id), "source": envelope.source},
            )
            self._settle(envelope.id, error=exc)
            return
        except Exception as exc:
            logger.exception(
                "Invocation failed", extra={"invocation_id": str(envelope.id)}
            )
            self._settle(envelope.id, error=exc)
            return
        finally:
            self._current = None
        self._settle(envelope.id)

    def _settle(self, invocation_id: UUID, error: Exception | None = None) -> None:
        future = self._replies.pop(invocation_id, None)
        if future is None or future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(None)

    def _fire_timer(self, message_id: UUID, target: str, payload: object) -> None:
        self._timers.pop(message_id, None)
        self._deliver_local(message_id, target, payload)

    def _deliver_local(self, message_id: UUID, target: str, payload: object) -> None:
        if target == self.program_id:
            self._queue.put_nowait(
                Envelope(
                    id=message_id,
                    source=self.program_id,
                    destination=target,
                    payload=payload,
                )
            )
            return
        self._append_message(target, payload)

    def _append_message(self, user: str, payload: object) -> None:
        mailbox = self._mailboxes.get(user)
        if mailbox is None:
            mailbox = self._mailboxes[user] = deque(maxlen=self.mailbox_size)
        mailbox.append(payload)

    def _require_current(self) -> Envelope:
        if self._current is None:
            raise RuntimeError("No invocation is being handled")
        return self._current
