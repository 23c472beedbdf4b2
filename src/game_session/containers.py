"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from game_session.adapters.mailbox_runtime import MailboxRuntime
from game_session.adapters.wordle_client import HttpxWordleClient, WordleClient
from game_session.config import Settings, load_init_payload
from game_session.services.orchestrator import GameSessionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    runtime: MailboxRuntime
    game_session_service: GameSessionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, wordle_client: WordleClient | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    init_payload = load_init_payload(resolved_settings)
    wordle_address = str(init_payload.wordle_address)
    runtime = MailboxRuntime(
        program_id=resolved_settings.program_id,
        wordle_address=wordle_address,
        wordle_client=wordle_client or HttpxWordleClient.create(),
        mailbox_size=resolved_settings.mailbox_size,
    )
    game_session_service = GameSessionService(
        runtime=runtime,
        wordle_address=wordle_address,
        timeout_seconds=resolved_settings.game_timeout_seconds,
    )
    runtime.mount(game_session_service.handle, game_session_service.handle_reply)

    async def close_resources() -> None:
        await runtime.close()

    return AppContainer(
        settings=resolved_settings,
        runtime=runtime,
        game_session_service=game_session_service,
        close_resources=close_resources,
    )
