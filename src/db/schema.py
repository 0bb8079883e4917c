"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    """
    One row per game.

    NOTE: the position is not stored. `move_history` (SAN) is replayed from the starting position to rebuild it.
    """

    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    tags: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)
    move_history: Mapped[list[str]] = mapped_column(JSON, default=list)
    current_player: Mapped[str]
    state: Mapped[str]
    draw_offered_by: Mapped[Optional[str]]
    resigned_by: Mapped[Optional[str]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
