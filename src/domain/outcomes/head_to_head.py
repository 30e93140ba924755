"""Direct-match records between pairs of players or teams."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from domain.outcomes.common import GameRecord, MatchSide, pair_key
from domain.outcomes.match_winner import side_totals


@dataclass(frozen=True)
class HeadToHead:
    """Symmetric lookup keyed by unordered pair; values are the pair winner or None."""

    winners: Mapping[tuple[int, int], int | None] = field(default_factory=dict)

    def winner(self, entity_a: int, entity_b: int) -> int | None:
        return self.winners.get(pair_key(entity_a, entity_b))

    def compare(self, entity_a: int, entity_b: int) -> int:
        """Negative when ``entity_a`` beat ``entity_b``, positive when it lost, else 0."""
        winner = self.winner(entity_a, entity_b)
        if winner is None:
            return 0
        return -1 if winner == entity_a else 1


def build_head_to_head(
    game: GameRecord,
    side_entities: Callable[[MatchSide], Iterable[int]],
) -> HeadToHead:
    """Total sets won (BY_SETS) or points (BY_SCORES) per pair across their direct matches."""
    totals: dict[tuple[int, int], list[int]] = {}

    for round_record in game.ordered_rounds():
        for match in round_record.matches:
            if not match.is_played or match.team_a is None or match.team_b is None:
                continue
            team_a_total, team_b_total = side_totals(match, game.match_winner_rule)
            for entity_a in side_entities(match.team_a):
                for entity_b in side_entities(match.team_b):
                    if entity_a == entity_b:
                        continue
                    key = pair_key(entity_a, entity_b)
                    pair_totals = totals.setdefault(key, [0, 0])
                    if key[0] == entity_a:
                        pair_totals[0] += team_a_total
                        pair_totals[1] += team_b_total
                    else:
                        pair_totals[0] += team_b_total
                        pair_totals[1] += team_a_total

    winners: dict[tuple[int, int], int | None] = {}
    for key, (low_total, high_total) in totals.items():
        if low_total > high_total:
            winners[key] = key[0]
        elif high_total > low_total:
            winners[key] = key[1]
        else:
            winners[key] = None
    return HeadToHead(winners=winners)


def build_player_head_to_head(game: GameRecord) -> HeadToHead:
    return build_head_to_head(game, lambda side: side.player_ids)


def build_team_head_to_head(game: GameRecord, team_members: Mapping[int, frozenset[int]]) -> HeadToHead:
    """Head-to-head between configured teams; a side counts for a team only if all its players belong to it."""

    def side_teams(side: MatchSide) -> list[int]:
        players = set(side.player_ids)
        if not players:
            return []
        return [team_id for team_id, members in team_members.items() if players <= members]

    return build_head_to_head(game, side_teams)


__all__ = [
    "HeadToHead",
    "build_head_to_head",
    "build_player_head_to_head",
    "build_team_head_to_head",
]
