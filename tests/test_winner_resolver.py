"""Unit tests for ranking entries under each winner rule."""

from __future__ import annotations

from domain.outcomes.head_to_head import HeadToHead
from domain.outcomes.protocol import WinnerRule
from domain.outcomes.winner_resolver import RankingEntry, rank_entries


def _entry(
    entity_id: int,
    *,
    matches_won: int = 0,
    ties: int = 0,
    scores_delta: int = 0,
    points_earned: int = 0,
    level: float = 3.0,
) -> RankingEntry:
    return RankingEntry(
        entity_id=entity_id,
        matches_won=matches_won,
        ties=ties,
        losses=0,
        total_points=0,
        scores_delta=scores_delta,
        points_earned=points_earned,
        level=level,
    )


def _order(ranked: list) -> list[tuple[int, int]]:
    return [(item.entity_id, item.position) for item in ranked]


def test_matches_won_then_scores_delta() -> None:
    ranked = rank_entries(
        [
            _entry(1, matches_won=2, scores_delta=3),
            _entry(2, matches_won=2, scores_delta=5),
            _entry(3, matches_won=3, scores_delta=-4),
        ],
        WinnerRule.BY_MATCHES_WON,
    )
    assert _order(ranked) == [(3, 1), (2, 2), (1, 3)]
    assert [item.is_winner for item in ranked] == [True, False, False]


def test_by_points_ranks_points_first() -> None:
    ranked = rank_entries(
        [
            _entry(1, matches_won=3, points_earned=6),
            _entry(2, matches_won=1, points_earned=9),
        ],
        WinnerRule.BY_POINTS,
    )
    assert _order(ranked) == [(2, 1), (1, 2)]


def test_by_scores_delta_ranks_delta_first() -> None:
    ranked = rank_entries(
        [
            _entry(1, matches_won=3, scores_delta=2),
            _entry(2, matches_won=1, scores_delta=8),
        ],
        WinnerRule.BY_SCORES_DELTA,
    )
    assert _order(ranked) == [(2, 1), (1, 2)]


def test_head_to_head_breaks_equal_totals() -> None:
    head_to_head = HeadToHead(winners={(1, 2): 2})
    ranked = rank_entries(
        [_entry(1, matches_won=2), _entry(2, matches_won=2)],
        WinnerRule.BY_MATCHES_WON,
        head_to_head,
    )
    assert _order(ranked) == [(2, 1), (1, 2)]


def test_lower_level_breaks_remaining_ties() -> None:
    ranked = rank_entries(
        [_entry(1, matches_won=2, level=4.0), _entry(2, matches_won=2, level=3.0)],
        WinnerRule.BY_MATCHES_WON,
    )
    assert _order(ranked) == [(2, 1), (1, 2)]


def test_inseparable_entries_share_a_dense_position() -> None:
    ranked = rank_entries(
        [_entry(3, matches_won=2), _entry(1, matches_won=2), _entry(2, matches_won=1)],
        WinnerRule.BY_MATCHES_WON,
    )
    assert _order(ranked) == [(1, 1), (3, 1), (2, 2)]
    assert [item.is_winner for item in ranked] == [True, True, False]


def test_playoff_finals_are_not_ranked() -> None:
    assert rank_entries([_entry(1, matches_won=2)], WinnerRule.PLAYOFF_FINALS) == []
