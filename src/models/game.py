"""games, game_participants and fixed-team table models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from domain.outcomes.protocol import (
    EntityType,
    GenderTeams,
    MatchWinnerRule,
    ParticipantRole,
    ResultsStatus,
    WinnerRule,
)
from models.base import Base
from models.mixins import TimestampMixin, enum_type


class Game(TimestampMixin, Base):
    """A competitive event and its results configuration."""

    __tablename__ = "games"
    __table_args__ = (
        Index("idx_games_parent", "parent_id"),
        Index("idx_games_status_start", "results_status", "start_time"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    parent_id: Mapped[int | None] = mapped_column(ForeignKey("games.id"), nullable=True)
    entity_type: Mapped[EntityType] = mapped_column(
        enum_type(EntityType, "game_entity_type"),
        nullable=False,
        default=EntityType.GAME,
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    winner_rule: Mapped[WinnerRule] = mapped_column(
        enum_type(WinnerRule, "game_winner_rule"),
        nullable=False,
        default=WinnerRule.BY_MATCHES_WON,
    )
    match_winner_rule: Mapped[MatchWinnerRule] = mapped_column(
        enum_type(MatchWinnerRule, "game_match_winner_rule"),
        nullable=False,
        default=MatchWinnerRule.BY_SCORES,
    )
    points_per_win: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points_per_tie: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points_per_loose: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    has_fixed_teams: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gender_teams: Mapped[GenderTeams] = mapped_column(
        enum_type(GenderTeams, "game_gender_teams"),
        nullable=False,
        default=GenderTeams.ANY,
    )
    affects_rating: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    balls_in_games: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    results_status: Mapped[ResultsStatus] = mapped_column(
        enum_type(ResultsStatus, "game_results_status"),
        nullable=False,
        default=ResultsStatus.NONE,
    )
    results_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    finished_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    fixed_number_of_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_total_points_per_set: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_points_per_team: Mapped[int | None] = mapped_column(Integer, nullable=True)


class GameParticipant(Base):
    __tablename__ = "game_participants"
    __table_args__ = (
        UniqueConstraint("game_id", "user_id", name="uq_game_participants_game_user"),
        Index("idx_game_participants_user", "user_id", "is_playing"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    role: Mapped[ParticipantRole] = mapped_column(
        enum_type(ParticipantRole, "participant_role"),
        nullable=False,
        default=ParticipantRole.PARTICIPANT,
    )
    is_playing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class FixedTeam(Base):
    """A team configured before the game starts."""

    __tablename__ = "game_teams"
    __table_args__ = (UniqueConstraint("game_id", "team_number", name="uq_game_teams_game_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    team_number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)


class FixedTeamPlayer(Base):
    __tablename__ = "game_team_players"
    __table_args__ = (UniqueConstraint("game_team_id", "user_id", name="uq_game_team_players_team_user"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_team_id: Mapped[int] = mapped_column(ForeignKey("game_teams.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
