"""Shared enums for the game outcome engine."""

from __future__ import annotations

from enum import Enum


class WinnerRule(str, Enum):
    """How the overall winner of a game is decided."""

    BY_MATCHES_WON = "BY_MATCHES_WON"
    BY_POINTS = "BY_POINTS"
    BY_SCORES_DELTA = "BY_SCORES_DELTA"
    PLAYOFF_FINALS = "PLAYOFF_FINALS"


class MatchWinnerRule(str, Enum):
    """How the winner of a single match is derived from its sets."""

    BY_SETS = "BY_SETS"
    BY_SCORES = "BY_SCORES"


class MatchResult(str, Enum):
    """Result of one match from one side's perspective."""

    WIN = "WIN"
    TIE = "TIE"
    LOSS = "LOSS"


class ResultsStatus(str, Enum):
    NONE = "NONE"
    IN_PROGRESS = "IN_PROGRESS"
    FINAL = "FINAL"


class EntityType(str, Enum):
    """Category of a game-like event."""

    GAME = "GAME"
    TOURNAMENT = "TOURNAMENT"
    LEAGUE = "LEAGUE"
    LEAGUE_SEASON = "LEAGUE_SEASON"
    BAR = "BAR"
    TRAINING = "TRAINING"


class GenderTeams(str, Enum):
    ANY = "ANY"
    MEN = "MEN"
    WOMEN = "WOMEN"
    MIX_PAIRS = "MIX_PAIRS"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    PREFER_NOT_TO_SAY = "PREFER_NOT_TO_SAY"


class ParticipantRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    PARTICIPANT = "PARTICIPANT"


class SocialRole(str, Enum):
    """Closed set of roles that select a social-level multiplier, highest priority first."""

    OWNER = "OWNER"
    PARENT_OWNER = "PARENT_OWNER"
    ADMIN = "ADMIN"
    PARENT_ADMIN = "PARENT_ADMIN"
    PARTICIPANT = "PARTICIPANT"


class LevelChangeEventType(str, Enum):
    """Why a player's level or social level changed."""

    GAME = "GAME"
    SOCIAL_PARTICIPANT = "SOCIAL_PARTICIPANT"
    SOCIAL_BAR = "SOCIAL_BAR"


# Entity types that stamp a finished date the first time their results become FINAL.
RESULTS_BASED_ENTITY_TYPES = frozenset(
    {EntityType.GAME, EntityType.TOURNAMENT, EntityType.LEAGUE}
)

# Entity types ignored when counting co-played games; they have their own boosting path.
SOCIAL_EXCLUDED_ENTITY_TYPES = frozenset({EntityType.BAR, EntityType.LEAGUE_SEASON})

SOCIAL_EVENT_TYPES = (LevelChangeEventType.SOCIAL_PARTICIPANT, LevelChangeEventType.SOCIAL_BAR)


__all__ = [
    "EntityType",
    "Gender",
    "GenderTeams",
    "LevelChangeEventType",
    "MatchResult",
    "MatchWinnerRule",
    "ParticipantRole",
    "RESULTS_BASED_ENTITY_TYPES",
    "ResultsStatus",
    "SOCIAL_EVENT_TYPES",
    "SOCIAL_EXCLUDED_ENTITY_TYPES",
    "SocialRole",
    "WinnerRule",
]
