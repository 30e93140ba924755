"""game_outcomes and round_outcomes table models."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, Float, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.mixins import CreatedAtMixin, JSONType


class GameOutcome(CreatedAtMixin, Base):
    """Finalized per-player result of a game, including the deltas undo reverts."""

    __tablename__ = "game_outcomes"
    __table_args__ = (
        UniqueConstraint("game_id", "user_id", name="uq_game_outcomes_game_user"),
        Index("idx_game_outcomes_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    level_before: Mapped[float] = mapped_column(Float, nullable=False)
    level_after: Mapped[float] = mapped_column(Float, nullable=False)
    level_change: Mapped[float] = mapped_column(Float, nullable=False)
    reliability_before: Mapped[float] = mapped_column(Float, nullable=False)
    reliability_after: Mapped[float] = mapped_column(Float, nullable=False)
    reliability_change: Mapped[float] = mapped_column(Float, nullable=False)
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ties: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scores_made: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scores_lost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class RoundOutcome(CreatedAtMixin, Base):
    __tablename__ = "round_outcomes"
    __table_args__ = (UniqueConstraint("round_id", "user_id", name="uq_round_outcomes_round_user"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    level_change: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    stats_json: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
