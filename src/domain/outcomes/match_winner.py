"""Derive a match's winning side from its set scores."""

from __future__ import annotations

import logging

from domain.outcomes.common import GameRecord, MatchRecord
from domain.outcomes.protocol import MatchWinnerRule

logger = logging.getLogger(__name__)


def side_totals(match: MatchRecord, rule: MatchWinnerRule) -> tuple[int, int]:
    """Return (team A, team B) totals under the rule: sets won or points scored."""
    played_sets = match.played_sets
    if rule == MatchWinnerRule.BY_SETS:
        team_a_sets = sum(1 for score in played_sets if score.team_a_score > score.team_b_score)
        team_b_sets = sum(1 for score in played_sets if score.team_b_score > score.team_a_score)
        return team_a_sets, team_b_sets
    return (
        sum(score.team_a_score for score in played_sets),
        sum(score.team_b_score for score in played_sets),
    )


def compute_match_winner(match: MatchRecord, rule: MatchWinnerRule) -> int | None:
    """Return the winning side's team id, or None for a tie or an unplayed match."""
    if not match.is_played:
        return None
    if match.team_a is None or match.team_b is None:
        logger.warning("match_id=%s is missing a side; no winner", match.match_id)
        return None

    team_a_total, team_b_total = side_totals(match, rule)
    if team_a_total > team_b_total:
        return match.team_a.team_id
    if team_b_total > team_a_total:
        return match.team_b.team_id
    return None


def compute_match_winners(game: GameRecord) -> dict[int, int | None]:
    """Recompute the winner of every match of a game from its current set scores."""
    winners: dict[int, int | None] = {}
    for round_record in game.ordered_rounds():
        for match in round_record.matches:
            winners[match.match_id] = compute_match_winner(match, game.match_winner_rule)
    return winners


__all__ = ["compute_match_winner", "compute_match_winners", "side_totals"]
