"""level_change_events table model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Float, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from domain.outcomes.protocol import LevelChangeEventType
from models.base import Base
from models.mixins import CreatedAtMixin, JSONType, enum_type


class LevelChangeEvent(CreatedAtMixin, Base):
    """Append-only ledger of level and social-level changes."""

    __tablename__ = "level_change_events"
    __table_args__ = (
        Index("idx_level_change_events_game_type", "game_id", "event_type"),
        Index("idx_level_change_events_user", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    game_id: Mapped[int | None] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), nullable=True)
    event_type: Mapped[LevelChangeEventType] = mapped_column(
        enum_type(LevelChangeEventType, "level_change_event_type"),
        nullable=False,
    )
    level_before: Mapped[float] = mapped_column(Float, nullable=False)
    level_after: Mapped[float] = mapped_column(Float, nullable=False)
    details_json: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
