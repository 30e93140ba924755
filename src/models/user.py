"""users table model."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from domain.outcomes.protocol import Gender
from models.base import Base
from models.mixins import TimestampMixin, enum_type


class User(TimestampMixin, Base):
    """A player with cumulative rating state; written only by the outcome service."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("level >= 1.0 AND level <= 7.0", name="ck_users_level"),
        CheckConstraint("reliability >= 0.0 AND reliability <= 100.0", name="ck_users_reliability"),
        CheckConstraint("social_level >= 0.0", name="ck_users_social_level"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    gender: Mapped[Gender | None] = mapped_column(enum_type(Gender, "user_gender"), nullable=True)
    level: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    reliability: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    social_level: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    games_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    games_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
