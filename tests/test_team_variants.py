"""Unit tests for individual, fixed-team and mixed-pair placements."""

from __future__ import annotations

from builders import game, match, sets, single_round
from domain.outcomes.aggregator import aggregate_game
from domain.outcomes.common import FixedTeamRecord
from domain.outcomes.protocol import Gender, GenderTeams, WinnerRule
from domain.outcomes.team_variants import resolve_game_ranking


def test_individual_ranking_orders_by_matches_won() -> None:
    record = game(
        rounds=single_round(
            match(1, (1,), (2,), sets((6, 2)), winner="a"),
            match(2, (3,), (1,), sets((6, 4)), winner="a"),
            match(3, (3,), (2,), sets((6, 1)), winner="a"),
        ),
        levels={1: 3.0, 2: 3.0, 3: 3.0},
    )
    ranking = resolve_game_ranking(record, aggregate_game(record))

    assert ranking.ordered_user_ids == (3, 1, 2)
    assert ranking.winner_ids == (3,)
    assert ranking.placements[2].position == 3
    assert ranking.winning_team_ids == ()


def test_fixed_teams_share_team_placement() -> None:
    record = game(
        rounds=single_round(match(1, (1, 2), (3, 4), sets((6, 3)), winner="a")),
        levels={1: 3.0, 2: 3.0, 3: 3.0, 4: 3.0},
        fixed_teams=(
            FixedTeamRecord(team_id=100, team_number=1, player_ids=(1, 2)),
            FixedTeamRecord(team_id=200, team_number=2, player_ids=(3, 4)),
        ),
    )
    ranking = resolve_game_ranking(record, aggregate_game(record))

    assert ranking.winning_team_ids == (100,)
    assert ranking.display_groups == ((1, 2), (3, 4))
    assert ranking.placements[1].team_id == 100
    assert ranking.placements[2].is_winner
    assert ranking.placements[3].position == 2
    assert not ranking.placements[4].is_winner


def test_fixed_teams_with_equal_totals_both_win() -> None:
    record = game(
        rounds=single_round(match(1, (1, 2), (3, 4), sets((5, 5)))),
        levels={1: 3.0, 2: 3.0, 3: 3.0, 4: 3.0},
        fixed_teams=(
            FixedTeamRecord(team_id=100, team_number=1, player_ids=(1, 2)),
            FixedTeamRecord(team_id=200, team_number=2, player_ids=(3, 4)),
        ),
    )
    ranking = resolve_game_ranking(record, aggregate_game(record))

    assert ranking.winning_team_ids == (100, 200)
    assert {placement.position for placement in ranking.placements.values()} == {1}


def test_mixed_pairs_rank_each_gender_separately() -> None:
    record = game(
        rounds=single_round(match(1, (1, 3), (2, 4), sets((6, 2)), winner="a")),
        levels={1: 3.0, 2: 3.0, 3: 3.0, 4: 3.0},
        genders={1: Gender.MALE, 2: Gender.MALE, 3: Gender.FEMALE, 4: Gender.FEMALE},
        gender_teams=GenderTeams.MIX_PAIRS,
    )
    ranking = resolve_game_ranking(record, aggregate_game(record))

    assert ranking.display_groups == ((1, 3), (2, 4))
    assert ranking.ordered_user_ids == (1, 3, 2, 4)
    assert ranking.winner_ids == (1, 3)
    assert ranking.placements[2].position == 2
    assert ranking.placements[4].position == 2


def test_mixed_pairs_leave_other_genders_unranked() -> None:
    record = game(
        rounds=single_round(match(1, (1, 3), (2, 4), sets((6, 2)), winner="a")),
        levels={1: 3.0, 2: 3.0, 3: 3.0, 4: 3.0},
        genders={1: Gender.MALE, 2: Gender.MALE, 3: Gender.FEMALE, 4: Gender.PREFER_NOT_TO_SAY},
        gender_teams=GenderTeams.MIX_PAIRS,
    )
    ranking = resolve_game_ranking(record, aggregate_game(record))

    assert ranking.placements[4].position is None
    assert ranking.ordered_user_ids[-1] == 4


def test_playoff_finals_leave_everyone_unplaced() -> None:
    record = game(
        rounds=single_round(match(1, (1,), (2,), sets((6, 2)), winner="a")),
        levels={1: 3.0, 2: 3.0},
        winner_rule=WinnerRule.PLAYOFF_FINALS,
    )
    ranking = resolve_game_ranking(record, aggregate_game(record))

    assert ranking.winner_ids == ()
    assert all(placement.position is None for placement in ranking.placements.values())
