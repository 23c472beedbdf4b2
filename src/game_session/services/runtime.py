"""Contract between the orchestrator and its hosting runtime."""

from typing import NoReturn, Protocol
from uuid import UUID


class InvocationSuspended(Exception):  # noqa: N818
    """Raised by the runtime to park the current invocation until woken."""

    def __init__(self, invocation_id: UUID) -> None:
        super().__init__(f"invocation {invocation_id} suspended")
        self.invocation_id = invocation_id


class Runtime(Protocol):
    """Message-passing primitives available to an invocation."""

    async def send(self, target: str, payload: object) -> UUID:
        """Send a message and return its id."""

    async def send_delayed(
        self, target: str, payload: object, delay_seconds: float
    ) -> UUID:
        """Schedule a message for later delivery and return its id."""

    async def reply(self, payload: object) -> None:
        """Reply to the sender of the current invocation."""

    def suspend_current(self) -> NoReturn:
        """Park the current invocation; never returns."""

    def wake(self, invocation_id: UUID) -> None:
        """Re-queue a parked invocation."""

    def discard(self, invocation_id: UUID) -> None:
        """Drop a parked invocation that will never be woken."""

    def current_invocation_id(self) -> UUID:
        """Return the id of the invocation being handled."""

    def current_sender(self) -> str:
        """Return the identity that sent the current invocation."""

    def self_identity(self) -> str:
        """Return the runtime's own identity."""
