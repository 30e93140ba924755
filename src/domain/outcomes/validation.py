"""Checks a game must pass before its outcomes are calculated."""

from __future__ import annotations

from domain.outcomes.common import GameRecord, MatchRecord
from domain.outcomes.errors import InvalidConfigurationError, InvalidStateError
from domain.outcomes.protocol import GenderTeams

MIN_PLAYING_PARTICIPANTS = 2
MIN_MIXED_PAIRS_PARTICIPANTS = 4


def validate_playing_participants(game: GameRecord) -> None:
    playing = len(game.playing_participants())
    if playing < MIN_PLAYING_PARTICIPANTS:
        raise InvalidStateError(
            f"game_id={game.game_id} has {playing} playing participants",
            "At least two playing participants are required to calculate results",
        )


def validate_fixed_teams(game: GameRecord) -> None:
    if not game.has_fixed_teams or not game.fixed_teams:
        return
    sizes = {len(team.player_ids) for team in game.fixed_teams}
    if len(sizes) > 1:
        raise InvalidConfigurationError(
            f"game_id={game.game_id} fixed teams have different sizes: {sorted(sizes)}",
            "All fixed teams must have the same number of players",
        )


def validate_mixed_pairs(game: GameRecord) -> None:
    if game.gender_teams != GenderTeams.MIX_PAIRS:
        return
    playing = len(game.playing_participants())
    if playing < MIN_MIXED_PAIRS_PARTICIPANTS or playing % 2 != 0:
        raise InvalidConfigurationError(
            f"game_id={game.game_id} mixed pairs needs an even number >= 4 of players, got {playing}",
            "Mixed pairs games need an even number of at least four players",
        )


def validate_tie_break_sets(match: MatchRecord) -> None:
    """A tie-break set may only be the last set of a match."""
    ordered = sorted(match.sets, key=lambda score: score.set_number)
    for index, score in enumerate(ordered):
        if score.is_tie_break and index != len(ordered) - 1:
            raise InvalidConfigurationError(
                f"match_id={match.match_id} has tie-break set {score.set_number} before the last set",
                "A tie-break can only be played as the last set",
            )


def validate_game_for_outcomes(game: GameRecord) -> None:
    validate_playing_participants(game)
    validate_fixed_teams(game)
    validate_mixed_pairs(game)
    for round_record in game.rounds:
        for match in round_record.matches:
            validate_tie_break_sets(match)


__all__ = [
    "MIN_MIXED_PAIRS_PARTICIPANTS",
    "MIN_PLAYING_PARTICIPANTS",
    "validate_fixed_teams",
    "validate_game_for_outcomes",
    "validate_mixed_pairs",
    "validate_playing_participants",
    "validate_tie_break_sets",
]
