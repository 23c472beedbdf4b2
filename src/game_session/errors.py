"""Errors raised while handling a game session invocation."""


class GameSessionError(Exception):
    """Base error for a rejected invocation."""


class IllegalUseError(GameSessionError):
    """Action is not allowed in the session's current status."""


class InvalidWordError(GameSessionError):
    """Submitted word is not five lowercase characters."""


class DependencyError(GameSessionError):
    """Transport refused an outgoing message."""
