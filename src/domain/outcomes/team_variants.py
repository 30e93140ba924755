"""Turn player tallies into final placements for individual, fixed-team and mixed-pair games."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from statistics import fmean

from domain.outcomes.aggregator import GameAggregation, PlayerGameScore
from domain.outcomes.common import FixedTeamRecord, GameRecord
from domain.outcomes.head_to_head import build_player_head_to_head, build_team_head_to_head
from domain.outcomes.protocol import Gender, GenderTeams, WinnerRule
from domain.outcomes.winner_resolver import (
    RankedEntry,
    RankingEntry,
    rank_entries,
    rank_player_scores,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerPlacement:
    user_id: int
    position: int | None = None
    is_winner: bool = False
    team_id: int | None = None


@dataclass(frozen=True)
class GameRanking:
    """Placements for every aggregated player plus presentation ordering."""

    placements: Mapping[int, PlayerPlacement] = field(default_factory=dict)
    ordered_user_ids: tuple[int, ...] = ()
    winning_team_ids: tuple[int, ...] = ()
    display_groups: tuple[tuple[int, ...], ...] = ()

    @property
    def winner_ids(self) -> tuple[int, ...]:
        return tuple(user_id for user_id in self.ordered_user_ids if self.placements[user_id].is_winner)


def team_entry(team: FixedTeamRecord, member_scores: Sequence[PlayerGameScore]) -> RankingEntry:
    """Composite entry: counts take the best member, totals are summed, level is averaged."""
    return RankingEntry(
        entity_id=team.team_id,
        matches_won=max(score.matches_won for score in member_scores),
        ties=max(score.ties for score in member_scores),
        losses=max(score.losses for score in member_scores),
        total_points=sum(score.total_points for score in member_scores),
        scores_delta=sum(score.scores_delta for score in member_scores),
        points_earned=sum(score.points_earned for score in member_scores),
        level=fmean(score.starting_level for score in member_scores),
    )


def _unranked(aggregation: GameAggregation) -> GameRanking:
    user_ids = tuple(sorted(aggregation.scores))
    return GameRanking(
        placements={user_id: PlayerPlacement(user_id=user_id) for user_id in user_ids},
        ordered_user_ids=user_ids,
    )


def _with_unplaced(
    placements: dict[int, PlayerPlacement],
    ordered: list[int],
    aggregation: GameAggregation,
) -> tuple[dict[int, PlayerPlacement], tuple[int, ...]]:
    for user_id in sorted(aggregation.scores):
        if user_id not in placements:
            placements[user_id] = PlayerPlacement(user_id=user_id)
            ordered.append(user_id)
    return placements, tuple(ordered)


def rank_individuals(game: GameRecord, aggregation: GameAggregation) -> GameRanking:
    ranked = rank_player_scores(
        aggregation.ordered_scores(),
        game.winner_rule,
        build_player_head_to_head(game),
    )
    placements = {
        item.entity_id: PlayerPlacement(user_id=item.entity_id, position=item.position, is_winner=item.is_winner)
        for item in ranked
    }
    placements, ordered = _with_unplaced(placements, [item.entity_id for item in ranked], aggregation)
    return GameRanking(placements=placements, ordered_user_ids=ordered)


def rank_fixed_teams(game: GameRecord, aggregation: GameAggregation) -> GameRanking:
    entries: list[RankingEntry] = []
    members_by_team: dict[int, tuple[int, ...]] = {}
    for team in sorted(game.fixed_teams, key=lambda t: (t.team_number, t.team_id)):
        member_scores = [aggregation.scores[user_id] for user_id in team.player_ids if user_id in aggregation.scores]
        if not member_scores:
            logger.warning("game_id=%s team_id=%s has no scored members; skipping", game.game_id, team.team_id)
            continue
        entries.append(team_entry(team, member_scores))
        members_by_team[team.team_id] = tuple(sorted(score.user_id for score in member_scores))

    head_to_head = build_team_head_to_head(
        game,
        {team.team_id: frozenset(team.player_ids) for team in game.fixed_teams},
    )
    ranked_teams = rank_entries(entries, game.winner_rule, head_to_head)

    placements: dict[int, PlayerPlacement] = {}
    ordered: list[int] = []
    for item in ranked_teams:
        for user_id in members_by_team[item.entity_id]:
            placements[user_id] = PlayerPlacement(
                user_id=user_id,
                position=item.position,
                is_winner=item.is_winner,
                team_id=item.entity_id,
            )
            ordered.append(user_id)

    placements, ordered_ids = _with_unplaced(placements, ordered, aggregation)
    return GameRanking(
        placements=placements,
        ordered_user_ids=ordered_ids,
        winning_team_ids=tuple(item.entity_id for item in ranked_teams if item.is_winner),
        display_groups=tuple(members_by_team[item.entity_id] for item in ranked_teams),
    )


def rank_mixed_pairs(game: GameRecord, aggregation: GameAggregation) -> GameRanking:
    """Rank men and women separately; place i pairs the i-th man with the i-th woman."""
    pools: dict[Gender, list[PlayerGameScore]] = {Gender.MALE: [], Gender.FEMALE: []}
    for score in aggregation.ordered_scores():
        snapshot = game.players.get(score.user_id)
        gender = snapshot.gender if snapshot is not None else None
        if gender in pools:
            pools[gender].append(score)
        else:
            logger.warning(
                "game_id=%s user_id=%s has gender=%s; not ranked in mixed pairs",
                game.game_id,
                score.user_id,
                gender,
            )

    head_to_head = build_player_head_to_head(game)
    ranked_pools: dict[Gender, list[RankedEntry]] = {
        gender: rank_player_scores(scores, game.winner_rule, head_to_head) for gender, scores in pools.items()
    }

    placements: dict[int, PlayerPlacement] = {}
    for ranked in ranked_pools.values():
        for item in ranked:
            placements[item.entity_id] = PlayerPlacement(
                user_id=item.entity_id,
                position=item.position,
                is_winner=item.is_winner,
            )

    men = [item.entity_id for item in ranked_pools[Gender.MALE]]
    women = [item.entity_id for item in ranked_pools[Gender.FEMALE]]
    groups: list[tuple[int, ...]] = []
    ordered: list[int] = []
    for index in range(max(len(men), len(women))):
        group = tuple(pool[index] for pool in (men, women) if index < len(pool))
        groups.append(group)
        ordered.extend(group)

    placements, ordered_ids = _with_unplaced(placements, ordered, aggregation)
    return GameRanking(placements=placements, ordered_user_ids=ordered_ids, display_groups=tuple(groups))


def resolve_game_ranking(game: GameRecord, aggregation: GameAggregation) -> GameRanking:
    """Pick the ranking variant for a game and produce its placements."""
    if game.winner_rule == WinnerRule.PLAYOFF_FINALS:
        return _unranked(aggregation)
    if game.has_fixed_teams and game.fixed_teams:
        return rank_fixed_teams(game, aggregation)
    if game.gender_teams == GenderTeams.MIX_PAIRS:
        return rank_mixed_pairs(game, aggregation)
    return rank_individuals(game, aggregation)


__all__ = [
    "GameRanking",
    "PlayerPlacement",
    "rank_fixed_teams",
    "rank_individuals",
    "rank_mixed_pairs",
    "resolve_game_ranking",
    "team_entry",
]
