"""ASGI entrypoint for the game session API."""

from game_session.api.app import create_app
from game_session.containers import build_container

app = create_app(build_container())
