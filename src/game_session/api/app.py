"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import (
    Depends,
    FastAPI,
    Header,
    HTTPException,
    Request,
    Response,
    status,
)

from game_session.api.game_models import (
    CheckWordPayload,
    GameActionRequest,
    GameStartedPayload,
    StartGamePayload,
    WordCheckedPayload,
    WordleReplyRequest,
)
from game_session.app_logging import configure_logging
from game_session.containers import AppContainer
from game_session.domain.events import (
    CheckWord,
    CheckWordResult,
    GameOver,
    GameSessionAction,
    StartGame,
    StartSuccess,
)
from game_session.domain.sessions import (
    AwaitingRemoteCheck,
    AwaitingRemoteStart,
    AwaitingUserInput,
    Finished,
    GameSessionState,
    Init,
    ReplyReady,
    SessionStatus,
)
from game_session.domain.wordle import GameStarted, WordChecked, WordleEvent
from game_session.errors import DependencyError, IllegalUseError, InvalidWordError

_STATUS_NAMES: dict[type, str] = {
    Init: "init",
    AwaitingRemoteStart: "awaiting_remote_start",
    AwaitingUserInput: "awaiting_user_input",
    AwaitingRemoteCheck: "awaiting_remote_check",
    ReplyReady: "reply_ready",
    Finished: "finished",
}


def require_user_id(request: Request, x_user_id: str = Header()) -> str:
    """Return the calling user, refusing identities reserved for services."""
    container: AppContainer = request.app.state.container
    reserved = {container.settings.program_id, container.runtime.wordle_address}
    if x_user_id in reserved:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
    return x_user_id


def _get_wordle_reply_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.wordle_reply_token


async def require_wordle_token(
    x_wordle_token: str | None = Header(default=None),
    wordle_reply_token: str = Depends(_get_wordle_reply_token),
) -> None:
    """Ensure Wordle replies carry the shared reply token."""
    if not x_wordle_token or x_wordle_token != wordle_reply_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.runtime.start()
        logger.info(
            "Game session runtime started",
            extra={"program_id": app.state.container.settings.program_id},
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/game/actions")
    async def game_action(
        body: GameActionRequest,
        request: Request,
        response: Response,
        x_user_id: str = Depends(require_user_id),
    ) -> dict[str, object]:
        """Submit a user action and wait briefly for its reply."""
        state_container: AppContainer = request.app.state.container
        runtime = state_container.runtime
        invocation_id = await runtime.submit(x_user_id, _action_from_payload(body))
        try:
            event = await runtime.wait_for_reply(
                invocation_id, state_container.settings.reply_wait_seconds
            )
        except IllegalUseError as exc:
            raise HTTPException(status.HTTP_409_CONFLICT, str(exc)) from exc
        except InvalidWordError as exc:
            raise HTTPException(
                status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)
            ) from exc
        except DependencyError as exc:
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, str(exc)) from exc
        if event is None:
            response.status_code = status.HTTP_202_ACCEPTED
            return {"status": "accepted", "invocation_id": str(invocation_id)}
        return {
            "status": "ok",
            "invocation_id": str(invocation_id),
            "event": _event_payload(event),
        }

    @app.get("/game/messages")
    async def game_messages(
        request: Request, x_user_id: str = Depends(require_user_id)
    ) -> dict[str, object]:
        """Return every event delivered to the user."""
        state_container: AppContainer = request.app.state.container
        messages = state_container.runtime.messages_for(x_user_id)
        return {"messages": [_event_payload(message) for message in messages]}

    @app.get("/game/state")
    async def game_state(request: Request) -> dict[str, object]:
        """Return a read-only snapshot of every session."""
        state_container: AppContainer = request.app.state.container
        return _state_payload(state_container.game_session_service.state())

    @app.post(
        "/wordle/reply",
        status_code=status.HTTP_202_ACCEPTED,
        dependencies=[Depends(require_wordle_token)],
    )
    async def wordle_reply(
        body: WordleReplyRequest, request: Request
    ) -> dict[str, str]:
        """Accept a reply from the Wordle service."""
        state_container: AppContainer = request.app.state.container
        await state_container.runtime.submit_reply(
            body.reply_to, _wordle_event_from_payload(body)
        )
        return {"status": "accepted"}

    return app


def _action_from_payload(body: GameActionRequest) -> GameSessionAction:
    action = body.action
    if isinstance(action, StartGamePayload):
        return StartGame()
    if isinstance(action, CheckWordPayload):
        return CheckWord(word=action.word)
    raise ValueError(f"Unsupported action payload: {action!r}")


def _wordle_event_from_payload(body: WordleReplyRequest) -> WordleEvent:
    event = body.event
    if isinstance(event, GameStartedPayload):
        return GameStarted(user=event.user)
    if isinstance(event, WordCheckedPayload):
        return WordChecked(
            user=event.user,
            correct_positions=tuple(event.correct_positions),
            contained_in_word=tuple(event.contained_in_word),
        )
    raise ValueError(f"Unsupported Wordle event payload: {event!r}")


def _event_payload(event: object) -> dict[str, object]:
    """Encode a user-facing event as JSON-compatible data."""
    if isinstance(event, StartSuccess):
        return {"type": "start_success"}
    if isinstance(event, CheckWordResult):
        return {
            "type": "check_word_result",
            "correct_positions": list(event.correct_positions),
            "contained_in_word": list(event.contained_in_word),
        }
    if isinstance(event, GameOver):
        return {"type": "game_over", "status": event.status.value}
    raise ValueError(f"Unsupported event: {event!r}")


def _wordle_event_payload(event: WordleEvent) -> dict[str, object]:
    if isinstance(event, GameStarted):
        return {"type": "game_started", "user": event.user}
    return {
        "type": "word_checked",
        "user": event.user,
        "correct_positions": list(event.correct_positions),
        "contained_in_word": list(event.contained_in_word),
    }


def _status_payload(session_status: SessionStatus) -> dict[str, object]:
    payload: dict[str, object] = {"type": _STATUS_NAMES[type(session_status)]}
    if isinstance(session_status, ReplyReady):
        payload["event"] = _wordle_event_payload(session_status.event)
    elif isinstance(session_status, Finished):
        payload["outcome"] = session_status.outcome.value
    return payload


def _state_payload(state: GameSessionState) -> dict[str, object]:
    sessions = []
    for user, snapshot in state.sessions:
        sessions.append(
            {
                "user": user,
                "status": _status_payload(snapshot.status),
                "round_id": _optional_id(snapshot.round_id),
                "attempts": snapshot.attempts,
            }
        )
    return {"wordle_address": state.wordle_address, "sessions": sessions}


def _optional_id(value: object) -> str | None:
    return str(value) if value is not None else None
