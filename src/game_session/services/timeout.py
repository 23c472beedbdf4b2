"""Timeout handling for games that never resolve."""

import logging
from dataclasses import dataclass
from uuid import UUID

from game_session.domain.events import GameOver, GameStatus
from game_session.domain.sessions import Finished
from game_session.services.runtime import Runtime
from game_session.services.session_table import SessionTable

logger = logging.getLogger(__name__)


@dataclass
class TimeoutGuard:
    """Ends a game as lost when its delayed status check fires in time."""

    runtime: Runtime
    table: SessionTable

    async def check_game_status(self, user: str, session_id: UUID) -> None:
        """Force a loss if the round identified by session_id is still open."""
        sender = self.runtime.current_sender()
        if sender != self.runtime.self_identity():
            logger.warning(
                "Ignoring game status check from untrusted sender",
                extra={"sender": sender, "user": user},
            )
            return
        record = self.table.get(user)
        if record is None or record.is_finished():
            return
        if not record.ledger.is_current_round(session_id):
            return
        if record.is_awaiting_reply():
            self.runtime.discard(record.ledger.pending_request_id)
        await self.runtime.send(user, GameOver(GameStatus.LOSE))
        record.status = Finished(GameStatus.LOSE)
        logger.info("Game timed out", extra={"user": user})
