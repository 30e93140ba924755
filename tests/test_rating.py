"""Unit tests for per-match level, reliability and points arithmetic."""

from __future__ import annotations

import pytest

from builders import sets
from domain.outcomes.protocol import MatchResult
from domain.outcomes.rating import (
    PlayerRatingState,
    RatingParameters,
    calculate_differential_multiplier,
    calculate_endurance_coefficient,
    calculate_rating_update,
    clamp_level,
    clamp_reliability,
    game_points,
    level_name,
)


def test_rating_parameters_defaults_are_expected_constants() -> None:
    params = RatingParameters()
    assert params.base_level_change == pytest.approx(0.05)
    assert params.max_level_change == pytest.approx(0.3)
    assert params.reliability_increment == pytest.approx(0.1)
    assert params.points_per_win == 10
    assert params.min_multiplier == pytest.approx(0.3)
    assert params.max_multiplier == pytest.approx(3.0)
    assert params.close_match_threshold == 3
    assert params.blowout_threshold == 15
    assert params.reliability_decay_base == pytest.approx(0.95)


def test_equal_levels_win_without_sets_uses_base_change() -> None:
    update = calculate_rating_update(
        PlayerRatingState(level=3.0, reliability=0.0),
        result=MatchResult.WIN,
        opponents_level=3.0,
    )
    assert update.level_change == pytest.approx(0.05)
    assert update.reliability_change == pytest.approx(0.1)
    assert update.points_earned == 10
    assert update.multiplier == pytest.approx(1.0)
    assert update.endurance_coefficient == pytest.approx(1.0)
    assert update.total_point_differential is None


def test_win_against_stronger_opponent_gains_more() -> None:
    update = calculate_rating_update(
        PlayerRatingState(level=3.0, reliability=0.0),
        result=MatchResult.WIN,
        opponents_level=4.0,
    )
    assert update.base_level_change == pytest.approx(0.055)


def test_loss_against_stronger_opponent_loses_less() -> None:
    update = calculate_rating_update(
        PlayerRatingState(level=3.0, reliability=0.0),
        result=MatchResult.LOSS,
        opponents_level=4.0,
    )
    assert update.base_level_change == pytest.approx(-0.045)
    assert update.points_earned == 0


def test_tie_costs_both_sides_like_a_loss() -> None:
    weaker = calculate_rating_update(
        PlayerRatingState(level=3.0, reliability=0.0),
        result=MatchResult.TIE,
        opponents_level=4.0,
    )
    stronger = calculate_rating_update(
        PlayerRatingState(level=4.0, reliability=0.0),
        result=MatchResult.TIE,
        opponents_level=3.0,
    )
    assert weaker.level_change == pytest.approx(-0.045)
    assert stronger.level_change == pytest.approx(-0.055)
    assert weaker.points_earned == 0


def test_tie_between_equal_levels_still_loses_level() -> None:
    update = calculate_rating_update(
        PlayerRatingState(level=3.0, reliability=0.0),
        result=MatchResult.TIE,
        opponents_level=3.0,
        set_scores=sets((5, 5)),
    )
    assert update.multiplier == pytest.approx(0.3)
    assert update.endurance_coefficient == pytest.approx(0.5)
    assert update.level_change == pytest.approx(-0.05 * 0.3 * 0.5)


def test_base_change_is_capped_at_max_level_change() -> None:
    params = RatingParameters(base_level_change=0.25)
    update = calculate_rating_update(
        PlayerRatingState(level=1.0, reliability=0.0),
        result=MatchResult.WIN,
        opponents_level=7.0,
        params=params,
    )
    assert update.base_level_change == pytest.approx(0.3)


def test_final_change_is_clamped_after_all_coefficients() -> None:
    params = RatingParameters(base_level_change=0.25)
    update = calculate_rating_update(
        PlayerRatingState(level=1.0, reliability=0.0),
        result=MatchResult.WIN,
        opponents_level=7.0,
        set_scores=sets((21, 0)),
        params=params,
    )
    assert update.multiplier == pytest.approx(3.0)
    assert update.endurance_coefficient == pytest.approx(1.05)
    assert update.level_change == pytest.approx(0.3)


@pytest.mark.parametrize(
    ("scores", "expected_multiplier", "expected_differential"),
    [
        (((5, 5),), 0.3, 0),
        (((6, 4),), 0.3 + 0.7 * 2 / 3, 2),
        (((6, 3),), 1.0, 3),
        (((6, 4), (6, 1)), 1.0 + 2.0 * 4 / 12, 7),
        (((6, 0), (6, 0), (6, 3)), 3.0, 15),
        (((0, 21),), 3.0, -21),
    ],
)
def test_differential_multiplier_bands(
    scores: tuple[tuple[int, int], ...],
    expected_multiplier: float,
    expected_differential: int,
) -> None:
    multiplier, differential = calculate_differential_multiplier(sets(*scores))
    assert multiplier == pytest.approx(expected_multiplier)
    assert differential == expected_differential


def test_endurance_coefficient_scales_with_points_played() -> None:
    assert calculate_endurance_coefficient(None) == pytest.approx(1.0)
    assert calculate_endurance_coefficient(sets((6, 4))) == pytest.approx(0.5)
    assert calculate_endurance_coefficient(sets((6, 4)), balls_in_games=True) == pytest.approx(2.5)


def test_reliability_dampens_level_change() -> None:
    update = calculate_rating_update(
        PlayerRatingState(level=3.0, reliability=10.0),
        result=MatchResult.WIN,
        opponents_level=3.0,
    )
    assert update.reliability_coefficient == pytest.approx(0.95**10)
    assert update.level_change == pytest.approx(0.05 * 0.95**10)


def test_close_set_win_combines_all_coefficients() -> None:
    update = calculate_rating_update(
        PlayerRatingState(level=3.0, reliability=0.0),
        result=MatchResult.WIN,
        opponents_level=3.0,
        set_scores=sets((6, 4)),
    )
    assert update.total_point_differential == 2
    assert update.level_change == pytest.approx(0.05 * (0.3 + 0.7 * 2 / 3) * 0.5)


def test_unplayed_sets_are_ignored() -> None:
    update = calculate_rating_update(
        PlayerRatingState(level=3.0, reliability=0.0),
        result=MatchResult.WIN,
        opponents_level=3.0,
        set_scores=sets((0, 0)),
    )
    assert update.multiplier == pytest.approx(1.0)
    assert update.endurance_coefficient == pytest.approx(1.0)


def test_clamps_keep_level_and_reliability_in_range() -> None:
    assert clamp_level(0.4) == pytest.approx(1.0)
    assert clamp_level(7.3) == pytest.approx(7.0)
    assert clamp_reliability(-1.0) == pytest.approx(0.0)
    assert clamp_reliability(100.5) == pytest.approx(100.0)


@pytest.mark.parametrize(
    ("level", "expected"),
    [
        (0.5, "Initiation"),
        (1.0, "Beginner"),
        (2.0, "Initiation Intermediate"),
        (3.0, "Intermediate"),
        (3.5, "Intermediate High"),
        (5.0, "Intermediate Advanced"),
        (5.6, "Competition"),
        (7.0, "Professional"),
    ],
)
def test_level_name_bands(level: float, expected: str) -> None:
    assert level_name(level) == expected


def test_game_points_uses_game_weights() -> None:
    points = game_points(wins=2, ties=1, losses=3, points_per_win=3, points_per_tie=1, points_per_loose=0)
    assert points == 7
