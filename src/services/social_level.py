"""Apply and revert social-level boosts for a game inside the caller's session."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from domain.outcomes.common import GameRecord
from domain.outcomes.explanation import SocialExplanation
from domain.outcomes.protocol import SOCIAL_EVENT_TYPES, EntityType, SocialRole
from domain.outcomes.social import (
    RelationshipBoost,
    SocialBoost,
    SocialParameters,
    calculate_social_boosts,
    is_social_eligible,
)
from models import LevelChangeEvent
from repositories.game_repository import fetch_users
from repositories.outcome_repository import (
    count_co_played_games,
    delete_level_change_events,
    fetch_level_change_events,
)

logger = logging.getLogger(__name__)


def _boost_details(boost: SocialBoost) -> dict[str, Any]:
    return {
        "role": boost.role.value,
        "multiplier": boost.multiplier,
        "base_boost": boost.base_boost,
        "relationships": [
            {
                "other_user_id": relationship.other_user_id,
                "games_played_together": relationship.games_played_together,
                "boost": relationship.boost,
            }
            for relationship in boost.relationships
        ],
    }


def apply_social_level_changes(
    session: Session,
    game: GameRecord,
    params: SocialParameters = SocialParameters(),
) -> list[SocialBoost]:
    """Add each participant's boost to their social level and record a ledger event."""
    if not is_social_eligible(game):
        logger.debug("game_id=%s entity_type=%s skips social boosts", game.game_id, game.entity_type.value)
        return []

    co_played_counts: dict[tuple[int, int], int] = {}
    if game.entity_type != EntityType.BAR:
        co_played_counts = count_co_played_games(
            session,
            game_id=game.game_id,
            start_time=game.start_time,
            user_ids=[participant.user_id for participant in game.participants],
        )

    boosts = calculate_social_boosts(game, co_played_counts, params)
    users = fetch_users(session, [boost.user_id for boost in boosts], lock=True)

    applied: list[SocialBoost] = []
    for boost in boosts:
        user = users.get(boost.user_id)
        if user is None:
            logger.warning("game_id=%s social boost for missing user_id=%s skipped", game.game_id, boost.user_id)
            continue
        level_before = user.social_level
        user.social_level = level_before + boost.total_boost
        session.add(
            LevelChangeEvent(
                user_id=user.id,
                game_id=game.game_id,
                event_type=boost.event_type,
                level_before=level_before,
                level_after=user.social_level,
                details_json=_boost_details(boost),
            )
        )
        applied.append(boost)

    logger.info("game_id=%s applied social boosts=%s", game.game_id, len(applied))
    return applied


def has_social_level_changes(session: Session, game_id: int) -> bool:
    return bool(fetch_level_change_events(session, game_id, SOCIAL_EVENT_TYPES))


def revert_social_level_changes(session: Session, game_id: int) -> int:
    """Take the game's boosts back off each participant's social level, then delete the events."""
    events = fetch_level_change_events(session, game_id, SOCIAL_EVENT_TYPES)
    if not events:
        return 0

    users = fetch_users(session, [event.user_id for event in events], lock=True)
    for event in events:
        user = users.get(event.user_id)
        if user is None:
            logger.warning("game_id=%s social revert for missing user_id=%s skipped", game_id, event.user_id)
            continue
        # Restore exactly when untouched since; otherwise remove only this game's boost.
        if user.social_level == event.level_after:
            user.social_level = event.level_before
        else:
            user.social_level -= event.level_after - event.level_before

    delete_level_change_events(session, game_id, SOCIAL_EVENT_TYPES)
    logger.info("game_id=%s reverted social events=%s", game_id, len(events))
    return len(events)


def load_social_explanation(session: Session, game_id: int, user_id: int) -> SocialExplanation | None:
    events = fetch_level_change_events(session, game_id, SOCIAL_EVENT_TYPES, user_id=user_id)
    if not events:
        return None

    event = events[-1]
    details = event.details_json or {}
    return SocialExplanation(
        event_type=event.event_type,
        role=SocialRole(details.get("role", SocialRole.PARTICIPANT.value)),
        multiplier=float(details.get("multiplier", 1.0)),
        base_boost=float(details.get("base_boost", event.level_after - event.level_before)),
        total=event.level_after - event.level_before,
        social_level_before=event.level_before,
        social_level_after=event.level_after,
        relationships=tuple(
            RelationshipBoost(
                other_user_id=int(item["other_user_id"]),
                games_played_together=int(item["games_played_together"]),
                boost=float(item["boost"]),
            )
            for item in details.get("relationships", [])
        ),
    )


__all__ = [
    "apply_social_level_changes",
    "has_social_level_changes",
    "load_social_explanation",
    "revert_social_level_changes",
]
