"""Walk a game's rounds and matches, accumulating per-player stats and level deltas."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from domain.outcomes.common import GameRecord, MatchRecord, MatchSide, RoundRecord, SetScore
from domain.outcomes.protocol import MatchResult
from domain.outcomes.rating import (
    PlayerRatingState,
    RatingParameters,
    RatingUpdate,
    calculate_rating_update,
    game_points,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchRatingStep:
    """One player's rating step for one match, oriented to the player's side."""

    round_id: int
    round_number: int
    match_id: int
    match_number: int
    user_id: int
    team_id: int
    result: MatchResult
    level_before: float
    opponents_level: float
    set_scores: tuple[SetScore, ...]
    update: RatingUpdate

    @property
    def scores_made(self) -> int:
        return sum(score.team_a_score for score in self.set_scores)

    @property
    def scores_lost(self) -> int:
        return sum(score.team_b_score for score in self.set_scores)


@dataclass(frozen=True)
class PlayerGameScore:
    """Running tally for one player across a game."""

    user_id: int
    starting_level: float
    starting_reliability: float
    games_played: int = 0
    matches_played: int = 0
    wins: int = 0
    ties: int = 0
    losses: int = 0
    total_points: int = 0
    scores_lost: int = 0
    level_change: float = 0.0
    reliability_change: float = 0.0
    points_earned: int = 0
    steps: tuple[MatchRatingStep, ...] = ()

    @property
    def matches_won(self) -> int:
        return self.wins

    @property
    def scores_delta(self) -> int:
        return self.total_points - self.scores_lost

    @property
    def running_level(self) -> float:
        return self.starting_level + self.level_change

    def round_level_change(self, round_id: int) -> float:
        return sum(step.update.level_change for step in self.steps if step.round_id == round_id)

    def round_summary(self, round_id: int) -> dict[str, int]:
        round_steps = [step for step in self.steps if step.round_id == round_id]
        return {
            "matches_played": len(round_steps),
            "matches_won": sum(1 for step in round_steps if step.result == MatchResult.WIN),
            "total_scores": sum(step.scores_made for step in round_steps),
        }


@dataclass(frozen=True)
class GameAggregation:
    """Per-player tallies plus the ordered round ids they were accumulated over."""

    game_id: int
    scores: Mapping[int, PlayerGameScore] = field(default_factory=dict)
    round_ids: tuple[int, ...] = ()
    skipped_match_ids: tuple[int, ...] = ()

    def ordered_scores(self) -> list[PlayerGameScore]:
        return [self.scores[user_id] for user_id in sorted(self.scores)]


def apply_match_step(
    score: PlayerGameScore,
    step: MatchRatingStep,
) -> PlayerGameScore:
    """Fold one match step into a player's tally."""
    return replace(
        score,
        matches_played=score.matches_played + 1,
        wins=score.wins + (1 if step.result == MatchResult.WIN else 0),
        ties=score.ties + (1 if step.result == MatchResult.TIE else 0),
        losses=score.losses + (1 if step.result == MatchResult.LOSS else 0),
        total_points=score.total_points + step.scores_made,
        scores_lost=score.scores_lost + step.scores_lost,
        level_change=score.level_change + step.update.level_change,
        reliability_change=score.reliability_change + step.update.reliability_change,
        steps=score.steps + (step,),
    )


def finalize_points(score: PlayerGameScore, game: GameRecord) -> PlayerGameScore:
    return replace(
        score,
        points_earned=game_points(
            wins=score.wins,
            ties=score.ties,
            losses=score.losses,
            points_per_win=game.points_per_win,
            points_per_tie=game.points_per_tie,
            points_per_loose=game.points_per_loose,
        ),
    )


def _initial_scores(game: GameRecord) -> dict[int, PlayerGameScore]:
    scores: dict[int, PlayerGameScore] = {}
    for participant in game.playing_participants():
        snapshot = game.players.get(participant.user_id)
        if snapshot is None:
            logger.warning(
                "game_id=%s playing participant user_id=%s has no player row; skipping",
                game.game_id,
                participant.user_id,
            )
            continue
        scores[participant.user_id] = _new_score(game, participant.user_id)
    return scores


def _new_score(game: GameRecord, user_id: int) -> PlayerGameScore:
    snapshot = game.players[user_id]
    return PlayerGameScore(
        user_id=user_id,
        starting_level=snapshot.level,
        starting_reliability=snapshot.reliability,
        games_played=snapshot.games_played,
    )


def _resolvable_members(game: GameRecord, match: MatchRecord, side: MatchSide) -> tuple[int, ...]:
    members: list[int] = []
    for user_id in side.player_ids:
        if user_id in game.players:
            members.append(user_id)
        else:
            logger.warning(
                "game_id=%s match_id=%s drops unknown player user_id=%s from team_id=%s",
                game.game_id,
                match.match_id,
                user_id,
                side.team_id,
            )
    return tuple(members)


def _side_result(match: MatchRecord, side: MatchSide, opponent: MatchSide) -> MatchResult:
    if match.winner_id == side.team_id:
        return MatchResult.WIN
    if match.winner_id == opponent.team_id:
        return MatchResult.LOSS
    return MatchResult.TIE


def _average_starting_level(game: GameRecord, user_ids: tuple[int, ...]) -> float:
    return sum(game.players[user_id].level for user_id in user_ids) / len(user_ids)


def _match_steps(
    game: GameRecord,
    round_record: RoundRecord,
    match: MatchRecord,
    scores: Mapping[int, PlayerGameScore],
    params: RatingParameters,
) -> list[MatchRatingStep] | None:
    if match.team_a is None or match.team_b is None:
        logger.warning("game_id=%s match_id=%s does not have two sides; skipping", game.game_id, match.match_id)
        return None

    team_a_members = _resolvable_members(game, match, match.team_a)
    team_b_members = _resolvable_members(game, match, match.team_b)
    if not team_a_members or not team_b_members:
        logger.warning(
            "game_id=%s match_id=%s has a side without known players; skipping",
            game.game_id,
            match.match_id,
        )
        return None

    played_sets = match.played_sets
    sides = (
        (match.team_a, match.team_b, team_a_members, team_b_members, played_sets),
        (
            match.team_b,
            match.team_a,
            team_b_members,
            team_a_members,
            tuple(score.flipped() for score in played_sets),
        ),
    )

    steps: list[MatchRatingStep] = []
    for side, opponent, members, opponent_members, oriented_sets in sides:
        result = _side_result(match, side, opponent)
        opponents_level = _average_starting_level(game, opponent_members)
        for user_id in members:
            score = scores.get(user_id) or _new_score(game, user_id)
            update = calculate_rating_update(
                PlayerRatingState(
                    level=score.running_level,
                    reliability=score.starting_reliability,
                    games_played=score.games_played,
                ),
                result=result,
                opponents_level=opponents_level,
                set_scores=oriented_sets,
                balls_in_games=game.balls_in_games,
                params=params,
            )
            steps.append(
                MatchRatingStep(
                    round_id=round_record.round_id,
                    round_number=round_record.round_number,
                    match_id=match.match_id,
                    match_number=match.match_number,
                    user_id=user_id,
                    team_id=side.team_id,
                    result=result,
                    level_before=score.running_level,
                    opponents_level=opponents_level,
                    set_scores=oriented_sets,
                    update=update,
                )
            )
    return steps


def aggregate_game(game: GameRecord, params: RatingParameters = RatingParameters()) -> GameAggregation:
    """Accumulate every played match of a game in round/match order.

    Opponent averages use each opponent's starting level; a player's own
    level runs forward through the game without intermediate clamping.
    """
    scores = _initial_scores(game)
    skipped: list[int] = []
    rounds = game.ordered_rounds()

    for round_record in rounds:
        for match in round_record.matches:
            if not match.is_played:
                continue
            steps = _match_steps(game, round_record, match, scores, params)
            if steps is None:
                skipped.append(match.match_id)
                continue
            for step in steps:
                score = scores.get(step.user_id) or _new_score(game, step.user_id)
                scores[step.user_id] = apply_match_step(score, step)

    finalized = {user_id: finalize_points(score, game) for user_id, score in scores.items()}
    logger.debug(
        "game_id=%s aggregated players=%s rounds=%s skipped_matches=%s",
        game.game_id,
        len(finalized),
        len(rounds),
        len(skipped),
    )
    return GameAggregation(
        game_id=game.game_id,
        scores=finalized,
        round_ids=tuple(round_record.round_id for round_record in rounds),
        skipped_match_ids=tuple(skipped),
    )


__all__ = [
    "GameAggregation",
    "MatchRatingStep",
    "PlayerGameScore",
    "aggregate_game",
    "apply_match_step",
    "finalize_points",
]
