"""Immutable records the outcome engine computes on.

Rows loaded from the store are converted into these records once, at the
repository boundary, so the calculators never see ORM objects.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime

from domain.outcomes.protocol import (
    EntityType,
    Gender,
    GenderTeams,
    MatchWinnerRule,
    ParticipantRole,
    ResultsStatus,
    WinnerRule,
)


@dataclass(frozen=True)
class SetScore:
    """One set of a match, scores given as (team A, team B)."""

    set_number: int
    team_a_score: int
    team_b_score: int
    is_tie_break: bool = False

    @property
    def is_played(self) -> bool:
        return self.team_a_score > 0 or self.team_b_score > 0

    def flipped(self) -> SetScore:
        """Return the same set seen from team B's side."""
        return replace(self, team_a_score=self.team_b_score, team_b_score=self.team_a_score)


@dataclass(frozen=True)
class MatchSide:
    team_id: int
    team_number: int
    player_ids: tuple[int, ...]


@dataclass(frozen=True)
class MatchRecord:
    """One match inside a round; sides are None when the stored match is malformed."""

    match_id: int
    match_number: int
    team_a: MatchSide | None
    team_b: MatchSide | None
    sets: tuple[SetScore, ...] = ()
    winner_id: int | None = None

    @property
    def played_sets(self) -> tuple[SetScore, ...]:
        return tuple(score for score in self.sets if score.is_played)

    @property
    def is_played(self) -> bool:
        return bool(self.played_sets)

    def player_ids(self) -> tuple[int, ...]:
        ids: list[int] = []
        for side in (self.team_a, self.team_b):
            if side is not None:
                ids.extend(side.player_ids)
        return tuple(ids)


@dataclass(frozen=True)
class RoundRecord:
    round_id: int
    round_number: int
    matches: tuple[MatchRecord, ...] = ()


@dataclass(frozen=True)
class PlayerSnapshot:
    """Rating state of one player at the start of a game."""

    user_id: int
    level: float
    reliability: float
    games_played: int = 0
    gender: Gender | None = None


@dataclass(frozen=True)
class ParticipantRecord:
    user_id: int
    role: ParticipantRole
    is_playing: bool
    parent_role: ParticipantRole | None = None


@dataclass(frozen=True)
class FixedTeamRecord:
    team_id: int
    team_number: int
    player_ids: tuple[int, ...]


@dataclass(frozen=True)
class GameRecord:
    """A game with its full round/match/set graph and the players involved."""

    game_id: int
    entity_type: EntityType
    start_time: datetime
    winner_rule: WinnerRule
    match_winner_rule: MatchWinnerRule
    points_per_win: int = 0
    points_per_tie: int = 0
    points_per_loose: int = 0
    has_fixed_teams: bool = False
    gender_teams: GenderTeams = GenderTeams.ANY
    affects_rating: bool = True
    balls_in_games: bool = False
    results_status: ResultsStatus = ResultsStatus.NONE
    parent_id: int | None = None
    rounds: tuple[RoundRecord, ...] = ()
    participants: tuple[ParticipantRecord, ...] = ()
    fixed_teams: tuple[FixedTeamRecord, ...] = ()
    players: Mapping[int, PlayerSnapshot] = field(default_factory=dict)

    def ordered_rounds(self) -> tuple[RoundRecord, ...]:
        """Rounds ascending by number, matches ascending inside each round."""
        return tuple(
            replace(
                round_record,
                matches=tuple(sorted(round_record.matches, key=lambda m: (m.match_number, m.match_id))),
            )
            for round_record in sorted(self.rounds, key=lambda r: (r.round_number, r.round_id))
        )

    def playing_participants(self) -> tuple[ParticipantRecord, ...]:
        return tuple(participant for participant in self.participants if participant.is_playing)

    def participant(self, user_id: int) -> ParticipantRecord | None:
        for participant in self.participants:
            if participant.user_id == user_id:
                return participant
        return None

    def with_starting_levels(self, overrides: Mapping[int, tuple[float, float]]) -> GameRecord:
        """Replace (level, reliability) of players that already have a stored outcome."""
        if not overrides:
            return self
        players = dict(self.players)
        for user_id, (level, reliability) in overrides.items():
            snapshot = players.get(user_id)
            if snapshot is None:
                continue
            players[user_id] = replace(snapshot, level=level, reliability=reliability)
        return replace(self, players=players)

    def with_match_winners(self, winners: Mapping[int, int | None]) -> GameRecord:
        """Return a copy whose matches carry the given winner team ids."""
        rounds = tuple(
            replace(
                round_record,
                matches=tuple(
                    replace(match, winner_id=winners.get(match.match_id, match.winner_id))
                    for match in round_record.matches
                ),
            )
            for round_record in self.rounds
        )
        return replace(self, rounds=rounds)


def pair_key(entity_a: int, entity_b: int) -> tuple[int, int]:
    """Order-independent key for a pair of players or teams."""
    return (entity_a, entity_b) if entity_a <= entity_b else (entity_b, entity_a)


__all__ = [
    "FixedTeamRecord",
    "GameRecord",
    "MatchRecord",
    "MatchSide",
    "ParticipantRecord",
    "PlayerSnapshot",
    "RoundRecord",
    "SetScore",
    "pair_key",
]
