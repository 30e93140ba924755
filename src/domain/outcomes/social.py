"""Social-level boosts from co-participation history and participant roles."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from domain.outcomes.common import GameRecord, ParticipantRecord, pair_key
from domain.outcomes.protocol import (
    EntityType,
    LevelChangeEventType,
    ParticipantRole,
    SocialRole,
)


@dataclass(frozen=True)
class SocialParameters:
    max_boost_per_relationship: float = 0.06
    reduction_per_game: float = 0.005
    max_games_for_reduction: int = 10
    min_boost_per_relationship: float = 0.01
    bar_increment_per_participant: float = 0.05

    @property
    def floor_boost_per_relationship(self) -> float:
        reduced = self.max_boost_per_relationship - self.max_games_for_reduction * self.reduction_per_game
        return max(reduced, self.min_boost_per_relationship)


# (played, not played) multipliers.
ROLE_MULTIPLIERS: dict[SocialRole, tuple[float, float]] = {
    SocialRole.OWNER: (1.5, 0.5),
    SocialRole.PARENT_OWNER: (1.2, 0.2),
    SocialRole.ADMIN: (1.2, 0.2),
    SocialRole.PARENT_ADMIN: (1.1, 0.1),
    SocialRole.PARTICIPANT: (1.0, 0.0),
}


@dataclass(frozen=True)
class RelationshipBoost:
    other_user_id: int
    games_played_together: int
    boost: float


@dataclass(frozen=True)
class SocialBoost:
    """Social-level change for one participant of one game."""

    user_id: int
    event_type: LevelChangeEventType
    role: SocialRole
    multiplier: float
    base_boost: float
    total_boost: float
    relationships: tuple[RelationshipBoost, ...] = ()


def relationship_boost(games_played_together: int, params: SocialParameters = SocialParameters()) -> float:
    """Boost earned against one other player, decaying with shared history."""
    counted_games = min(max(games_played_together, 0), params.max_games_for_reduction)
    boost = params.max_boost_per_relationship - counted_games * params.reduction_per_game
    return max(boost, params.min_boost_per_relationship)


def resolve_social_role(role: ParticipantRole, parent_role: ParticipantRole | None) -> SocialRole:
    """Pick the highest-priority social role from the game and parent-event roles."""
    candidates = (
        (SocialRole.OWNER, role == ParticipantRole.OWNER),
        (SocialRole.PARENT_OWNER, parent_role == ParticipantRole.OWNER),
        (SocialRole.ADMIN, role == ParticipantRole.ADMIN),
        (SocialRole.PARENT_ADMIN, parent_role == ParticipantRole.ADMIN),
    )
    for social_role, matches in candidates:
        if matches:
            return social_role
    return SocialRole.PARTICIPANT


def role_multiplier(social_role: SocialRole, *, is_playing: bool) -> float:
    played, not_played = ROLE_MULTIPLIERS[social_role]
    return played if is_playing else not_played


def is_social_eligible(game: GameRecord) -> bool:
    if game.entity_type == EntityType.LEAGUE_SEASON:
        return False
    if game.entity_type == EntityType.BAR:
        return bool(game.participants)
    return len(game.playing_participants()) >= 2


def calculate_participant_boost(
    participant: ParticipantRecord,
    *,
    playing_participants: tuple[ParticipantRecord, ...],
    co_played_counts: Mapping[tuple[int, int], int],
    params: SocialParameters = SocialParameters(),
) -> SocialBoost:
    relationships: list[RelationshipBoost] = []
    for other in playing_participants:
        if other.user_id == participant.user_id:
            continue
        games_together = co_played_counts.get(pair_key(participant.user_id, other.user_id), 0)
        relationships.append(
            RelationshipBoost(
                other_user_id=other.user_id,
                games_played_together=games_together,
                boost=relationship_boost(games_together, params),
            )
        )

    base_boost = sum(relationship.boost for relationship in relationships)
    social_role = resolve_social_role(participant.role, participant.parent_role)
    multiplier = role_multiplier(social_role, is_playing=participant.is_playing)
    return SocialBoost(
        user_id=participant.user_id,
        event_type=LevelChangeEventType.SOCIAL_PARTICIPANT,
        role=social_role,
        multiplier=multiplier,
        base_boost=base_boost,
        total_boost=base_boost * multiplier,
        relationships=tuple(relationships),
    )


def calculate_social_boosts(
    game: GameRecord,
    co_played_counts: Mapping[tuple[int, int], int],
    params: SocialParameters = SocialParameters(),
) -> list[SocialBoost]:
    """Return positive boosts for every participant of a finalized game.

    ``co_played_counts`` maps an ordered user pair (see ``pair_key``) to the
    number of earlier finalized games both played in.
    """
    if not is_social_eligible(game):
        return []
    if game.entity_type == EntityType.BAR:
        return calculate_bar_boosts(game, params)

    playing_participants = game.playing_participants()
    boosts = [
        calculate_participant_boost(
            participant,
            playing_participants=playing_participants,
            co_played_counts=co_played_counts,
            params=params,
        )
        for participant in game.participants
    ]
    return [boost for boost in boosts if boost.total_boost > 0.0]


def calculate_bar_boosts(game: GameRecord, params: SocialParameters = SocialParameters()) -> list[SocialBoost]:
    """Flat boost for informal events, scaled only by how many people came."""
    participant_count = len(game.participants)
    total = params.bar_increment_per_participant * participant_count
    if total <= 0.0:
        return []
    return [
        SocialBoost(
            user_id=participant.user_id,
            event_type=LevelChangeEventType.SOCIAL_BAR,
            role=resolve_social_role(participant.role, participant.parent_role),
            multiplier=1.0,
            base_boost=total,
            total_boost=total,
        )
        for participant in game.participants
    ]


__all__ = [
    "ROLE_MULTIPLIERS",
    "RelationshipBoost",
    "SocialBoost",
    "SocialParameters",
    "calculate_bar_boosts",
    "calculate_participant_boost",
    "calculate_social_boosts",
    "is_social_eligible",
    "relationship_boost",
    "resolve_social_role",
    "role_multiplier",
]
