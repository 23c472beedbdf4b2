"""Tests for the game timeout guard."""

from uuid import uuid4

from game_session.domain.events import (
    CheckGameStatus,
    CheckWord,
    GameOver,
    GameStatus,
    StartGame,
)
from game_session.domain.sessions import (
    AwaitingRemoteStart,
    AwaitingUserInput,
    Finished,
)
from game_session.domain.wordle import GameStarted, WordChecked
from game_session.services.orchestrator import GameSessionService
from tests.conftest import PROGRAM_ID, FakeRuntime, deliver_reply, invoke


def _fire_timeout(
    service: GameSessionService,
    runtime: FakeRuntime,
    session_id,
    sender: str = PROGRAM_ID,
) -> None:
    action = CheckGameStatus(user="alice", session_id=session_id)
    invoke(service, runtime, sender, action)


def _lose_notifications(runtime: FakeRuntime) -> list:
    return [
        payload
        for _, target, payload in runtime.sent
        if target == "alice" and payload == GameOver(GameStatus.LOSE)
    ]


def test_timeout_without_reply_loses_game_once(
    service: GameSessionService, runtime: FakeRuntime
) -> None:
    round_id = uuid4()
    invoke(service, runtime, "alice", StartGame(), round_id)

    _fire_timeout(service, runtime, round_id)
    _fire_timeout(service, runtime, round_id)

    assert _lose_notifications(runtime) == [GameOver(GameStatus.LOSE)]
    assert service.table.get("alice").status == Finished(GameStatus.LOSE)
    assert runtime.discarded == [round_id]


def test_timeout_mid_game_loses_game(
    service: GameSessionService, runtime: FakeRuntime
) -> None:
    round_id = uuid4()
    invoke(service, runtime, "alice", StartGame(), round_id)
    deliver_reply(service, runtime, runtime.sent[0][0], GameStarted(user="alice"))
    invoke(service, runtime, "alice", StartGame(), round_id)

    _fire_timeout(service, runtime, round_id)

    assert service.table.get("alice").status == Finished(GameStatus.LOSE)
    assert len(_lose_notifications(runtime)) == 1
    assert runtime.discarded == []


def test_stale_timeout_is_ignored(
    service: GameSessionService, runtime: FakeRuntime
) -> None:
    invoke(service, runtime, "alice", StartGame())

    _fire_timeout(service, runtime, uuid4())

    assert service.table.get("alice").status == AwaitingRemoteStart()
    assert _lose_notifications(runtime) == []


def test_timeout_from_previous_game_does_not_end_new_game(
    service: GameSessionService, runtime: FakeRuntime
) -> None:
    first_round = uuid4()
    invoke(service, runtime, "alice", StartGame(), first_round)
    _fire_timeout(service, runtime, first_round)
    second_round = uuid4()
    invoke(service, runtime, "alice", StartGame(), second_round)
    deliver_reply(service, runtime, runtime.sent[-1][0], GameStarted(user="alice"))
    invoke(service, runtime, "alice", StartGame(), second_round)

    _fire_timeout(service, runtime, first_round)

    assert service.table.get("alice").status == AwaitingUserInput()
    assert len(_lose_notifications(runtime)) == 1


def test_timeout_from_untrusted_sender_is_ignored(
    service: GameSessionService, runtime: FakeRuntime
) -> None:
    round_id = uuid4()
    invoke(service, runtime, "alice", StartGame(), round_id)

    _fire_timeout(service, runtime, round_id, sender="alice")

    assert service.table.get("alice").status == AwaitingRemoteStart()
    assert _lose_notifications(runtime) == []


def test_timeout_for_unknown_user_is_ignored(
    service: GameSessionService, runtime: FakeRuntime
) -> None:
    _fire_timeout(service, runtime, uuid4())

    assert service.table.get("alice") is None
    assert runtime.sent == []


def test_timeout_after_win_is_ignored(
    service: GameSessionService, runtime: FakeRuntime
) -> None:
    round_id = uuid4()
    invoke(service, runtime, "alice", StartGame(), round_id)
    deliver_reply(service, runtime, runtime.sent[-1][0], GameStarted(user="alice"))
    invoke(service, runtime, "alice", StartGame(), round_id)
    check_id = uuid4()
    invoke(service, runtime, "alice", CheckWord("house"), check_id)
    deliver_reply(
        service,
        runtime,
        runtime.sent[-1][0],
        WordChecked(
            user="alice", correct_positions=(0, 1, 2, 3, 4), contained_in_word=()
        ),
    )
    invoke(service, runtime, "alice", CheckWord("house"), check_id)

    _fire_timeout(service, runtime, round_id)

    assert service.table.get("alice").status == Finished(GameStatus.WIN)
    assert _lose_notifications(runtime) == []


def test_late_reply_after_timeout_is_dropped(
    service: GameSessionService, runtime: FakeRuntime
) -> None:
    round_id = uuid4()
    invoke(service, runtime, "alice", StartGame(), round_id)
    outbound_id = runtime.sent[0][0]
    _fire_timeout(service, runtime, round_id)

    deliver_reply(service, runtime, outbound_id, GameStarted(user="alice"))

    assert service.table.get("alice").status == Finished(GameStatus.LOSE)
    assert runtime.woken == []
