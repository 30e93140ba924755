"""Results status transitions for a game."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from domain.outcomes.errors import InvalidStateError, VersionConflictError
from domain.outcomes.protocol import RESULTS_BASED_ENTITY_TYPES, EntityType, ResultsStatus


class ResultsTransition(str, Enum):
    FINALIZE = "FINALIZE"
    EDIT = "EDIT"
    RESET = "RESET"
    DELETE = "DELETE"


_TARGETS: dict[ResultsTransition, ResultsStatus] = {
    ResultsTransition.FINALIZE: ResultsStatus.FINAL,
    ResultsTransition.EDIT: ResultsStatus.IN_PROGRESS,
    ResultsTransition.RESET: ResultsStatus.NONE,
    ResultsTransition.DELETE: ResultsStatus.NONE,
}

_ALLOWED_SOURCES: dict[ResultsTransition, frozenset[ResultsStatus]] = {
    ResultsTransition.FINALIZE: frozenset(ResultsStatus),
    ResultsTransition.EDIT: frozenset({ResultsStatus.FINAL}),
    ResultsTransition.RESET: frozenset(ResultsStatus),
    ResultsTransition.DELETE: frozenset(ResultsStatus),
}


def next_status(game_id: int, current: ResultsStatus, transition: ResultsTransition) -> ResultsStatus:
    if current not in _ALLOWED_SOURCES[transition]:
        raise InvalidStateError(
            f"game_id={game_id} cannot {transition.value.lower()} results in status {current.value}",
            f"Results can only be edited when they are final (current status: {current.value})",
        )
    return _TARGETS[transition]


def check_base_version(game_id: int, base_version: int | None, current_version: int) -> None:
    """Reject a write based on a stale read of the game's results."""
    if base_version is not None and base_version != current_version:
        raise VersionConflictError(game_id, base_version, current_version)


def should_stamp_finished_date(entity_type: EntityType, finished_date: datetime | None) -> bool:
    return entity_type in RESULTS_BASED_ENTITY_TYPES and finished_date is None


__all__ = [
    "ResultsTransition",
    "check_base_version",
    "next_status",
    "should_stamp_finished_date",
]
