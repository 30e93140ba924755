"""Per-match level, reliability and points arithmetic."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.outcomes.common import SetScore
from domain.outcomes.protocol import MatchResult

MIN_LEVEL = 1.0
MAX_LEVEL = 7.0
MIN_RELIABILITY = 0.0
MAX_RELIABILITY = 100.0

# (upper bound inclusive, name); the first band whose bound is >= level wins.
LEVEL_BANDS: tuple[tuple[float, str], ...] = (
    (0.99, "Initiation"),
    (1.49, "Beginner"),
    (2.49, "Initiation Intermediate"),
    (3.49, "Intermediate"),
    (4.49, "Intermediate High"),
    (5.49, "Intermediate Advanced"),
    (5.69, "Competition"),
    (MAX_LEVEL, "Professional"),
)


@dataclass(frozen=True)
class RatingParameters:
    base_level_change: float = 0.05
    max_level_change: float = 0.3
    reliability_increment: float = 0.1
    points_per_win: int = 10
    min_multiplier: float = 0.3
    max_multiplier: float = 3.0
    close_match_threshold: int = 3
    blowout_threshold: int = 15
    endurance_points_divisor: float = 20.0
    balls_in_games_endurance_factor: float = 5.0
    reliability_decay_base: float = 0.95


@dataclass(frozen=True)
class PlayerRatingState:
    level: float
    reliability: float
    games_played: int = 0


@dataclass(frozen=True)
class RatingUpdate:
    """Result of one match for one player, with every term that shaped it."""

    level_change: float
    reliability_change: float
    points_earned: int
    base_level_change: float
    multiplier: float
    total_point_differential: int | None
    endurance_coefficient: float
    reliability_coefficient: float


def clamp_level(level: float) -> float:
    return max(MIN_LEVEL, min(MAX_LEVEL, level))


def clamp_reliability(reliability: float) -> float:
    return max(MIN_RELIABILITY, min(MAX_RELIABILITY, reliability))


def level_name(level: float) -> str:
    """Return the named skill band for a level."""
    for upper_bound, name in LEVEL_BANDS:
        if level <= upper_bound:
            return name
    return LEVEL_BANDS[-1][1]


def game_points(
    *,
    wins: int,
    ties: int,
    losses: int,
    points_per_win: int,
    points_per_tie: int,
    points_per_loose: int,
) -> int:
    """Reward points for a game from the game's own win/tie/loss weights."""
    return wins * points_per_win + ties * points_per_tie + losses * points_per_loose


def calculate_endurance_coefficient(
    set_scores: Sequence[SetScore] | None,
    *,
    balls_in_games: bool = False,
    params: RatingParameters = RatingParameters(),
) -> float:
    """Scale by how long the match was: total points played over a reference total."""
    if not set_scores:
        return 1.0

    total_points = sum(score.team_a_score + score.team_b_score for score in set_scores)
    coefficient = total_points / params.endurance_points_divisor
    if balls_in_games:
        coefficient *= params.balls_in_games_endurance_factor
    return coefficient


def calculate_differential_multiplier(
    set_scores: Sequence[SetScore],
    params: RatingParameters = RatingParameters(),
) -> tuple[float, int]:
    """Return (multiplier, total point differential) for scores seen from the player's side."""
    total_point_differential = sum(
        score.team_a_score - score.team_b_score for score in set_scores if score.is_played
    )
    magnitude = abs(total_point_differential)

    if magnitude <= params.close_match_threshold:
        ratio = magnitude / params.close_match_threshold
        return params.min_multiplier + (1.0 - params.min_multiplier) * ratio, total_point_differential

    if magnitude >= params.blowout_threshold:
        return params.max_multiplier, total_point_differential

    span = params.blowout_threshold - params.close_match_threshold
    ratio = (magnitude - params.close_match_threshold) / span
    return 1.0 + (params.max_multiplier - 1.0) * ratio, total_point_differential


def _base_level_change(result: MatchResult, level_difference: float, params: RatingParameters) -> float:
    if result == MatchResult.WIN:
        return min(params.base_level_change * (1.0 + level_difference / 10.0), params.max_level_change)
    # Ties are rated as losses for both sides.
    return max(-params.base_level_change * (1.0 - level_difference / 10.0), -params.max_level_change)


def calculate_rating_update(
    player: PlayerRatingState,
    *,
    result: MatchResult,
    opponents_level: float,
    set_scores: Sequence[SetScore] | None = None,
    balls_in_games: bool = False,
    params: RatingParameters = RatingParameters(),
) -> RatingUpdate:
    """Compute one player's level/reliability/points delta for one match.

    ``set_scores`` must already be oriented so that ``team_a_score`` is the
    player's own side.
    """
    level_difference = opponents_level - player.level
    base_change = _base_level_change(result, level_difference, params)

    played_sets = [score for score in set_scores or () if score.is_played]
    multiplier = 1.0
    total_point_differential: int | None = None
    if played_sets:
        multiplier, total_point_differential = calculate_differential_multiplier(played_sets, params)

    endurance_coefficient = calculate_endurance_coefficient(
        played_sets,
        balls_in_games=balls_in_games,
        params=params,
    )
    reliability_coefficient = params.reliability_decay_base ** clamp_reliability(player.reliability)

    level_change = base_change * multiplier * endurance_coefficient * reliability_coefficient
    level_change = max(-params.max_level_change, min(params.max_level_change, level_change))

    return RatingUpdate(
        level_change=level_change,
        reliability_change=params.reliability_increment,
        points_earned=params.points_per_win if result == MatchResult.WIN else 0,
        base_level_change=base_change,
        multiplier=multiplier,
        total_point_differential=total_point_differential,
        endurance_coefficient=endurance_coefficient,
        reliability_coefficient=reliability_coefficient,
    )


__all__ = [
    "MAX_LEVEL",
    "MAX_RELIABILITY",
    "MIN_LEVEL",
    "MIN_RELIABILITY",
    "PlayerRatingState",
    "RatingParameters",
    "RatingUpdate",
    "calculate_differential_multiplier",
    "calculate_endurance_coefficient",
    "calculate_rating_update",
    "clamp_level",
    "clamp_reliability",
    "game_points",
    "level_name",
]
