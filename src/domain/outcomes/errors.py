"""Exceptions raised by the outcome engine."""

from __future__ import annotations


class OutcomeError(Exception):
    """Base exception for outcome engine errors."""

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class NotFoundError(OutcomeError):
    """Raised when a game, round, match or player does not exist."""

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(
            f"{entity} id={entity_id} not found",
            f"{entity} not found",
        )
        self.entity = entity
        self.entity_id = entity_id


class InvalidStateError(OutcomeError):
    """Raised when the game's results are in the wrong state for an operation."""


class VersionConflictError(InvalidStateError):
    """Raised when results were modified since the caller last read them."""

    def __init__(self, game_id: int, expected: int, actual: int) -> None:
        super().__init__(
            f"game_id={game_id} results_version={actual} does not match base_version={expected}",
            "Results have been modified by another user. Please reload and try again.",
        )
        self.expected = expected
        self.actual = actual


class InvalidConfigurationError(OutcomeError):
    """Raised when a game's team or set configuration cannot be scored."""


__all__ = [
    "InvalidConfigurationError",
    "InvalidStateError",
    "NotFoundError",
    "OutcomeError",
    "VersionConflictError",
]
