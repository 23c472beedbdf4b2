"""Correlation identifiers tracked for each session."""

from dataclasses import dataclass
from uuid import UUID


@dataclass
class CorrelationLedger:
    """Ties an outbound Wordle request to the invocation waiting on it."""

    round_id: UUID | None = None
    pending_request_id: UUID | None = None
    outbound_request_id: UUID | None = None

    def open_round(self, invocation_id: UUID, outbound_id: UUID) -> None:
        """Start a new game round owned by the given invocation."""
        self.round_id = invocation_id
        self.await_reply(invocation_id, outbound_id)

    def await_reply(self, invocation_id: UUID, outbound_id: UUID) -> None:
        """Record the suspended invocation and the request it waits on."""
        self.pending_request_id = invocation_id
        self.outbound_request_id = outbound_id

    def is_current_round(self, round_id: UUID) -> bool:
        return self.round_id is not None and self.round_id == round_id

    def matches_reply(self, reply_to: UUID) -> bool:
        return (
            self.outbound_request_id is not None
            and self.outbound_request_id == reply_to
        )
