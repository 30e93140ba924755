"""Rank players or teams under a game's winner rule and assign positions."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import cmp_to_key

from domain.outcomes.aggregator import PlayerGameScore
from domain.outcomes.head_to_head import HeadToHead
from domain.outcomes.protocol import WinnerRule


@dataclass(frozen=True)
class RankingEntry:
    """Comparable totals for one player or one team."""

    entity_id: int
    matches_won: int
    ties: int
    losses: int
    total_points: int
    scores_delta: int
    points_earned: int
    level: float


@dataclass(frozen=True)
class RankedEntry:
    entry: RankingEntry
    position: int
    is_winner: bool

    @property
    def entity_id(self) -> int:
        return self.entry.entity_id


Comparator = Callable[[RankingEntry, RankingEntry], int]

# Fields compared descending, in order, before head-to-head and level.
RULE_FIELDS: dict[WinnerRule, tuple[str, ...]] = {
    WinnerRule.BY_MATCHES_WON: ("matches_won", "ties", "scores_delta"),
    WinnerRule.BY_POINTS: ("points_earned", "matches_won", "ties", "scores_delta"),
    WinnerRule.BY_SCORES_DELTA: ("scores_delta", "matches_won", "ties"),
}


def entry_from_score(score: PlayerGameScore) -> RankingEntry:
    return RankingEntry(
        entity_id=score.user_id,
        matches_won=score.matches_won,
        ties=score.ties,
        losses=score.losses,
        total_points=score.total_points,
        scores_delta=score.scores_delta,
        points_earned=score.points_earned,
        level=score.starting_level,
    )


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def build_comparator(rule: WinnerRule, head_to_head: HeadToHead | None = None) -> Comparator:
    """Return a comparator where a negative result ranks the first entry higher."""
    fields = RULE_FIELDS[rule]

    def compare(left: RankingEntry, right: RankingEntry) -> int:
        for field_name in fields:
            result = _sign(getattr(right, field_name) - getattr(left, field_name))
            if result != 0:
                return result
        if head_to_head is not None:
            result = head_to_head.compare(left.entity_id, right.entity_id)
            if result != 0:
                return result
        # Lower level ranks higher.
        return _sign(left.level - right.level)

    return compare


def rank_entries(
    entries: Sequence[RankingEntry],
    rule: WinnerRule,
    head_to_head: HeadToHead | None = None,
) -> list[RankedEntry]:
    """Sort entries and assign dense positions; every entry at position 1 is a winner.

    Entries the comparator cannot separate share a position and are listed
    by entity id. Playoff-finals games are decided elsewhere and yield no
    ranking.
    """
    if rule == WinnerRule.PLAYOFF_FINALS or not entries:
        return []

    compare = build_comparator(rule, head_to_head)
    ordered = sorted(sorted(entries, key=lambda entry: entry.entity_id), key=cmp_to_key(compare))

    ranked: list[RankedEntry] = []
    position = 0
    previous: RankingEntry | None = None
    for entry in ordered:
        if previous is None or compare(previous, entry) != 0:
            position += 1
        ranked.append(RankedEntry(entry=entry, position=position, is_winner=position == 1))
        previous = entry
    return ranked


def rank_player_scores(
    scores: Sequence[PlayerGameScore],
    rule: WinnerRule,
    head_to_head: HeadToHead | None = None,
) -> list[RankedEntry]:
    return rank_entries([entry_from_score(score) for score in scores], rule, head_to_head)


__all__ = [
    "RULE_FIELDS",
    "RankedEntry",
    "RankingEntry",
    "build_comparator",
    "entry_from_score",
    "rank_entries",
    "rank_player_scores",
]
