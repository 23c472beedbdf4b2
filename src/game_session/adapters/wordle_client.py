"""Wordle service client adapter."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import httpx

from game_session.domain.wordle import WordleAction, WordleCheckWord
from game_session.errors import DependencyError


class WordleClient(Protocol):
    """Interface for delivering requests to the Wordle service."""

    async def deliver(
        self, address: str, message_id: UUID, action: WordleAction
    ) -> None:
        """Deliver a request; the reply arrives later tagged with message_id."""

    async def close(self) -> None:
        """Release any transport resources."""


@dataclass
class HttpxWordleClient(WordleClient):
    """Wordle client implemented with httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxWordleClient":
        """Create a Wordle client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def deliver(
        self, address: str, message_id: UUID, action: WordleAction
    ) -> None:
        """Post a request to the Wordle service's actions endpoint."""
        url = f"{address.rstrip('/')}/actions"
        payload = {"message_id": str(message_id), "action": action_payload(action)}
        try:
            response = await self.http_client.post(url, json=payload, timeout=10)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DependencyError(f"Wordle service rejected request: {exc}") from exc

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()


def action_payload(action: WordleAction) -> dict[str, object]:
    """Encode a Wordle request as JSON-compatible data."""
    if isinstance(action, WordleCheckWord):
        return {"type": "check_word", "user": action.user, "word": action.word}
    return {"type": "start_game", "user": action.user}
