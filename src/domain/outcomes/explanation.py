"""Match-by-match derivation of one player's level change in a game."""

from __future__ import annotations

from dataclasses import dataclass
from statistics import fmean

from domain.outcomes.aggregator import MatchRatingStep, aggregate_game
from domain.outcomes.common import GameRecord, MatchRecord, MatchSide
from domain.outcomes.protocol import LevelChangeEventType, MatchResult, SocialRole
from domain.outcomes.rating import RatingParameters, clamp_level, clamp_reliability, level_name
from domain.outcomes.social import RelationshipBoost


@dataclass(frozen=True)
class PlayerLevel:
    user_id: int
    level: float


@dataclass(frozen=True)
class SetExplanation:
    set_number: int
    own_score: int
    opponent_score: int
    is_tie_break: bool

    @property
    def won(self) -> bool | None:
        if self.own_score == self.opponent_score:
            return None
        return self.own_score > self.opponent_score


@dataclass(frozen=True)
class MatchExplanation:
    round_number: int
    match_number: int
    result: MatchResult
    level_before: float
    opponents_level: float
    level_difference: float
    level_change: float
    reliability_change: float
    points_earned: int
    base_level_change: float
    multiplier: float
    endurance_coefficient: float
    reliability_coefficient: float
    total_point_differential: int | None
    teammates: tuple[PlayerLevel, ...]
    opponents: tuple[PlayerLevel, ...]
    sets: tuple[SetExplanation, ...]


@dataclass(frozen=True)
class ExplanationSummary:
    total_matches: int
    wins: int
    losses: int
    draws: int
    average_opponent_level: float


@dataclass(frozen=True)
class SocialExplanation:
    event_type: LevelChangeEventType
    role: SocialRole
    multiplier: float
    base_boost: float
    total: float
    social_level_before: float
    social_level_after: float
    relationships: tuple[RelationshipBoost, ...] = ()


@dataclass(frozen=True)
class Explanation:
    game_id: int
    user_id: int
    level_before: float
    level_after: float
    level_change: float
    reliability_before: float
    reliability_after: float
    reliability_change: float
    games_played: int
    level_name_before: str
    level_name_after: str
    matches: tuple[MatchExplanation, ...]
    summary: ExplanationSummary
    social: SocialExplanation | None = None


def _match_index(game: GameRecord) -> dict[int, MatchRecord]:
    return {match.match_id: match for round_record in game.rounds for match in round_record.matches}


def _sides_for(match: MatchRecord, team_id: int) -> tuple[MatchSide, MatchSide] | None:
    if match.team_a is None or match.team_b is None:
        return None
    if match.team_a.team_id == team_id:
        return match.team_a, match.team_b
    return match.team_b, match.team_a


def _player_levels(game: GameRecord, user_ids: tuple[int, ...], exclude: int | None = None) -> tuple[PlayerLevel, ...]:
    return tuple(
        PlayerLevel(user_id=user_id, level=game.players[user_id].level)
        for user_id in user_ids
        if user_id != exclude and user_id in game.players
    )


def explain_match(game: GameRecord, match: MatchRecord, step: MatchRatingStep) -> MatchExplanation:
    sides = _sides_for(match, step.team_id)
    teammates: tuple[PlayerLevel, ...] = ()
    opponents: tuple[PlayerLevel, ...] = ()
    if sides is not None:
        own_side, opponent_side = sides
        teammates = _player_levels(game, own_side.player_ids, exclude=step.user_id)
        opponents = _player_levels(game, opponent_side.player_ids)

    update = step.update
    return MatchExplanation(
        round_number=step.round_number,
        match_number=step.match_number,
        result=step.result,
        level_before=step.level_before,
        opponents_level=step.opponents_level,
        level_difference=step.opponents_level - step.level_before,
        level_change=update.level_change,
        reliability_change=update.reliability_change,
        points_earned=update.points_earned,
        base_level_change=update.base_level_change,
        multiplier=update.multiplier,
        endurance_coefficient=update.endurance_coefficient,
        reliability_coefficient=update.reliability_coefficient,
        total_point_differential=update.total_point_differential,
        teammates=teammates,
        opponents=opponents,
        sets=tuple(
            SetExplanation(
                set_number=score.set_number,
                own_score=score.team_a_score,
                opponent_score=score.team_b_score,
                is_tie_break=score.is_tie_break,
            )
            for score in step.set_scores
        ),
    )


def explain_player_outcome(
    game: GameRecord,
    user_id: int,
    *,
    params: RatingParameters = RatingParameters(),
    social: SocialExplanation | None = None,
) -> Explanation:
    """Replay the game's aggregation and keep the target player's steps.

    ``game`` must already carry the starting levels captured when the game
    was finalized, so the replay never sees levels changed by later games.
    """
    aggregation = aggregate_game(game, params)
    snapshot = game.players.get(user_id)
    score = aggregation.scores.get(user_id)
    level_before = snapshot.level if snapshot is not None else 0.0
    reliability_before = snapshot.reliability if snapshot is not None else 0.0
    games_played = snapshot.games_played if snapshot is not None else 0

    matches_by_id = _match_index(game)
    steps = score.steps if score is not None else ()
    matches = tuple(explain_match(game, matches_by_id[step.match_id], step) for step in steps)

    level_change = score.level_change if score is not None else 0.0
    reliability_change = score.reliability_change if score is not None else 0.0
    level_after = clamp_level(level_before + level_change)

    summary = ExplanationSummary(
        total_matches=len(matches),
        wins=sum(1 for match in matches if match.result == MatchResult.WIN),
        losses=sum(1 for match in matches if match.result == MatchResult.LOSS),
        draws=sum(1 for match in matches if match.result == MatchResult.TIE),
        average_opponent_level=fmean(match.opponents_level for match in matches) if matches else 0.0,
    )

    return Explanation(
        game_id=game.game_id,
        user_id=user_id,
        level_before=level_before,
        level_after=level_after,
        level_change=level_change,
        reliability_before=reliability_before,
        reliability_after=clamp_reliability(reliability_before + reliability_change),
        reliability_change=reliability_change,
        games_played=games_played,
        level_name_before=level_name(level_before),
        level_name_after=level_name(level_after),
        matches=matches,
        summary=summary,
        social=social,
    )


__all__ = [
    "Explanation",
    "ExplanationSummary",
    "MatchExplanation",
    "PlayerLevel",
    "SetExplanation",
    "SocialExplanation",
    "explain_match",
    "explain_player_outcome",
]
