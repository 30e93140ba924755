"""rounds, matches, match teams and set score table models."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Round(Base):
    __tablename__ = "rounds"
    __table_args__ = (Index("idx_rounds_game_number", "game_id", "round_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)


class Match(Base):
    """One match of a round; winner_id points at a match_teams row, null for a tie."""

    __tablename__ = "matches"
    __table_args__ = (Index("idx_matches_round_number", "round_id", "match_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False)
    match_number: Mapped[int] = mapped_column(Integer, nullable=False)
    # No FK: match_teams already references matches.
    winner_id: Mapped[int | None] = mapped_column(Integer, nullable=True)


class MatchTeam(Base):
    __tablename__ = "match_teams"
    __table_args__ = (UniqueConstraint("match_id", "team_number", name="uq_match_teams_match_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    team_number: Mapped[int] = mapped_column(Integer, nullable=False)


class MatchTeamPlayer(Base):
    __tablename__ = "match_team_players"
    __table_args__ = (UniqueConstraint("match_team_id", "user_id", name="uq_match_team_players_team_user"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_team_id: Mapped[int] = mapped_column(ForeignKey("match_teams.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)


class MatchSet(Base):
    __tablename__ = "match_sets"
    __table_args__ = (UniqueConstraint("match_id", "set_number", name="uq_match_sets_match_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    set_number: Mapped[int] = mapped_column(Integer, nullable=False)
    team_a_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    team_b_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_tie_break: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
