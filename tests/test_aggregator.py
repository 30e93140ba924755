"""Unit tests for walking a game's matches into per-player tallies."""

from __future__ import annotations

from dataclasses import replace

import pytest

from builders import game, match, sets
from domain.outcomes.aggregator import aggregate_game
from domain.outcomes.common import RoundRecord
from domain.outcomes.protocol import MatchResult

CLOSE_WIN = 0.05 * (0.3 + 0.7 * 2 / 3) * 0.5


def test_single_match_produces_symmetric_changes() -> None:
    record = game(
        rounds=(RoundRecord(round_id=7, round_number=1, matches=(match(1, (1,), (2,), sets((6, 4)), winner="a"),)),),
        levels={1: 3.0, 2: 3.0},
        points_per_win=3,
        points_per_loose=1,
    )
    aggregation = aggregate_game(record)

    winner = aggregation.scores[1]
    loser = aggregation.scores[2]
    assert winner.wins == 1
    assert winner.total_points == 6
    assert winner.scores_lost == 4
    assert winner.scores_delta == 2
    assert winner.points_earned == 3
    assert winner.level_change == pytest.approx(CLOSE_WIN)
    assert winner.reliability_change == pytest.approx(0.1)
    assert loser.losses == 1
    assert loser.points_earned == 1
    assert loser.level_change == pytest.approx(-CLOSE_WIN)
    assert aggregation.round_ids == (7,)
    assert winner.round_summary(7) == {"matches_played": 1, "matches_won": 1, "total_scores": 6}
    assert loser.round_level_change(7) == pytest.approx(-CLOSE_WIN)


def test_own_level_runs_forward_while_opponents_use_starting_level() -> None:
    record = game(
        rounds=(
            RoundRecord(round_id=2, round_number=2, matches=(match(2, (1,), (3,), sets((6, 4)), winner="a"),)),
            RoundRecord(round_id=1, round_number=1, matches=(match(1, (1,), (2,), sets((6, 4)), winner="a"),)),
        ),
        levels={1: 3.0, 2: 3.0, 3: 3.0},
    )
    aggregation = aggregate_game(record)

    steps = aggregation.scores[1].steps
    assert [step.round_number for step in steps] == [1, 2]
    assert steps[0].level_before == pytest.approx(3.0)
    assert steps[1].level_before == pytest.approx(3.0 + CLOSE_WIN)
    assert steps[1].opponents_level == pytest.approx(3.0)
    assert aggregation.round_ids == (1, 2)


def test_doubles_use_average_opponent_level() -> None:
    record = game(
        rounds=(RoundRecord(round_id=1, round_number=1, matches=(match(1, (1, 2), (3, 4), sets((6, 6)), winner=None),)),),
        levels={1: 2.0, 2: 4.0, 3: 3.0, 4: 5.0},
    )
    aggregation = aggregate_game(record)

    step = aggregation.scores[1].steps[0]
    assert step.result == MatchResult.TIE
    assert step.opponents_level == pytest.approx(4.0)
    assert aggregation.scores[3].steps[0].opponents_level == pytest.approx(3.0)
    assert aggregation.scores[1].ties == 1


def test_unplayed_and_malformed_matches_are_skipped() -> None:
    malformed = replace(match(2, (1,), (2,), sets((6, 1)), winner="a"), team_b=None)
    record = game(
        rounds=(
            RoundRecord(
                round_id=1,
                round_number=1,
                matches=(match(1, (1,), (2,), sets((0, 0))), malformed),
            ),
        ),
        levels={1: 3.0, 2: 3.0},
    )
    aggregation = aggregate_game(record)

    assert aggregation.skipped_match_ids == (2,)
    assert aggregation.scores[1].matches_played == 0
    assert aggregation.scores[1].level_change == pytest.approx(0.0)


def test_unknown_players_are_dropped_from_sides() -> None:
    record = game(
        rounds=(RoundRecord(round_id=1, round_number=1, matches=(match(1, (1, 99), (2,), sets((6, 4)), winner="a"),)),),
        levels={1: 3.0, 2: 3.0},
    )
    aggregation = aggregate_game(record)

    assert set(aggregation.scores) == {1, 2}
    assert aggregation.scores[1].wins == 1


def test_spectators_are_not_scored() -> None:
    record = game(
        rounds=(RoundRecord(round_id=1, round_number=1, matches=(match(1, (1,), (2,), sets((6, 4)), winner="a"),)),),
        levels={1: 3.0, 2: 3.0},
        spectators=(5,),
    )
    aggregation = aggregate_game(record)

    assert set(aggregation.scores) == {1, 2}
