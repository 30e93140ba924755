"""Persistence helpers for game outcomes, round outcomes and the level-change ledger."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import and_, delete, func, select
from sqlalchemy.orm import Session, aliased

from domain.outcomes.common import pair_key
from domain.outcomes.protocol import (
    SOCIAL_EXCLUDED_ENTITY_TYPES,
    LevelChangeEventType,
    ResultsStatus,
)
from models import Game, GameOutcome, GameParticipant, LevelChangeEvent, Round, RoundOutcome


def fetch_game_outcomes(session: Session, game_id: int) -> list[GameOutcome]:
    return list(
        session.execute(
            select(GameOutcome)
            .where(GameOutcome.game_id == game_id)
            .order_by(GameOutcome.position.is_(None), GameOutcome.position, GameOutcome.user_id)
        ).scalars()
    )


def delete_game_outcomes(session: Session, game_id: int) -> None:
    session.execute(delete(GameOutcome).where(GameOutcome.game_id == game_id))


def fetch_round_outcomes(session: Session, game_id: int) -> list[RoundOutcome]:
    return list(
        session.execute(
            select(RoundOutcome)
            .join(Round, Round.id == RoundOutcome.round_id)
            .where(Round.game_id == game_id)
            .order_by(Round.round_number, RoundOutcome.user_id)
        ).scalars()
    )


def delete_round_outcomes(session: Session, game_id: int) -> None:
    round_ids = select(Round.id).where(Round.game_id == game_id).scalar_subquery()
    session.execute(delete(RoundOutcome).where(RoundOutcome.round_id.in_(round_ids)))


def fetch_level_change_events(
    session: Session,
    game_id: int,
    event_types: Sequence[LevelChangeEventType],
    *,
    user_id: int | None = None,
) -> list[LevelChangeEvent]:
    conditions = [LevelChangeEvent.game_id == game_id, LevelChangeEvent.event_type.in_(list(event_types))]
    if user_id is not None:
        conditions.append(LevelChangeEvent.user_id == user_id)
    return list(
        session.execute(
            select(LevelChangeEvent).where(*conditions).order_by(LevelChangeEvent.id)
        ).scalars()
    )


def delete_level_change_events(
    session: Session,
    game_id: int,
    event_types: Sequence[LevelChangeEventType],
) -> None:
    session.execute(
        delete(LevelChangeEvent).where(
            LevelChangeEvent.game_id == game_id,
            LevelChangeEvent.event_type.in_(list(event_types)),
        )
    )


def count_co_played_games(
    session: Session,
    *,
    game_id: int,
    start_time: datetime,
    user_ids: Iterable[int],
) -> dict[tuple[int, int], int]:
    """Count earlier finalized games each pair of users both played in.

    Only games that started strictly before ``start_time`` count, and
    informal or season-aggregate entity types are ignored.
    """
    ids = sorted(set(user_ids))
    if len(ids) < 2:
        return {}

    first = aliased(GameParticipant)
    second = aliased(GameParticipant)
    statement = (
        select(first.user_id, second.user_id, func.count(func.distinct(Game.id)))
        .select_from(first)
        .join(
            second,
            and_(second.game_id == first.game_id, second.user_id > first.user_id),
        )
        .join(Game, Game.id == first.game_id)
        .where(
            first.user_id.in_(ids),
            second.user_id.in_(ids),
            first.is_playing.is_(True),
            second.is_playing.is_(True),
            Game.id != game_id,
            Game.start_time < start_time,
            Game.results_status == ResultsStatus.FINAL,
            Game.entity_type.not_in(list(SOCIAL_EXCLUDED_ENTITY_TYPES)),
        )
        .group_by(first.user_id, second.user_id)
    )
    return {
        pair_key(user_a, user_b): int(count)
        for user_a, user_b, count in session.execute(statement).all()
    }


__all__ = [
    "count_co_played_games",
    "delete_game_outcomes",
    "delete_level_change_events",
    "delete_round_outcomes",
    "fetch_game_outcomes",
    "fetch_level_change_events",
    "fetch_round_outcomes",
]
