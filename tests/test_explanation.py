"""Unit tests for replaying a player's level change match by match."""

from __future__ import annotations

import pytest

from builders import game, match, sets, single_round
from domain.outcomes.aggregator import aggregate_game
from domain.outcomes.common import GameRecord
from domain.outcomes.explanation import PlayerLevel, explain_player_outcome
from domain.outcomes.protocol import MatchResult


def _doubles_game() -> GameRecord:
    return game(
        rounds=single_round(
            match(1, (1, 2), (3, 4), sets((6, 4)), winner="a"),
            match(2, (1, 3), (2, 4), sets((3, 6)), winner="b"),
        ),
        levels={1: 3.0, 2: 3.2, 3: 2.8, 4: 3.0},
    )


def test_explanation_matches_aggregated_change() -> None:
    record = _doubles_game()
    explanation = explain_player_outcome(record, 1)
    score = aggregate_game(record).scores[1]

    assert explanation.level_before == pytest.approx(3.0)
    assert explanation.level_change == pytest.approx(score.level_change)
    assert explanation.level_after == pytest.approx(3.0 + score.level_change)
    assert sum(item.level_change for item in explanation.matches) == pytest.approx(score.level_change)
    assert explanation.reliability_after == pytest.approx(0.2)
    assert explanation.level_name_before == "Intermediate"


def test_explanation_lists_teammates_opponents_and_own_sets() -> None:
    explanation = explain_player_outcome(_doubles_game(), 1)
    first, second = explanation.matches

    assert first.result == MatchResult.WIN
    assert first.teammates == (PlayerLevel(user_id=2, level=3.2),)
    assert first.opponents == (PlayerLevel(user_id=3, level=2.8), PlayerLevel(user_id=4, level=3.0))
    assert first.opponents_level == pytest.approx(2.9)
    assert first.sets[0].own_score == 6
    assert first.sets[0].won is True
    assert first.multiplier == pytest.approx(0.3 + 0.7 * 2 / 3)

    assert second.result == MatchResult.LOSS
    assert second.level_before == pytest.approx(3.0 + first.level_change)
    assert second.sets[0].opponent_score == 6


def test_explanation_summary_counts_results() -> None:
    summary = explain_player_outcome(_doubles_game(), 4).summary

    assert summary.total_matches == 2
    assert summary.wins == 1
    assert summary.losses == 1
    assert summary.draws == 0
    assert summary.average_opponent_level == pytest.approx((3.1 + 2.9) / 2)


def test_explanation_for_player_without_matches_is_empty() -> None:
    record = game(rounds=single_round(match(1, (1,), (2,), sets((6, 4)), winner="a")), levels={1: 3.0, 2: 3.0, 3: 4.0})
    explanation = explain_player_outcome(record, 3)

    assert explanation.matches == ()
    assert explanation.level_change == pytest.approx(0.0)
    assert explanation.summary.average_opponent_level == pytest.approx(0.0)
