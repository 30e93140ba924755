"""ORM models."""

from models.base import Base
from models.game import FixedTeam, FixedTeamPlayer, Game, GameParticipant
from models.level_change_event import LevelChangeEvent
from models.outcome import GameOutcome, RoundOutcome
from models.results import Match, MatchSet, MatchTeam, MatchTeamPlayer, Round
from models.user import User

__all__ = [
    "Base",
    "FixedTeam",
    "FixedTeamPlayer",
    "Game",
    "GameOutcome",
    "GameParticipant",
    "LevelChangeEvent",
    "Match",
    "MatchSet",
    "MatchTeam",
    "MatchTeamPlayer",
    "Round",
    "RoundOutcome",
    "User",
]
