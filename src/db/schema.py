"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    starting_fen: Mapped[str]
    current_fen: Mapped[str]
    moves: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    has_moved: Mapped[dict[str, dict[str, bool]]] = mapped_column(JSON)
    captured_pieces: Mapped[dict[str, list[str]]] = mapped_column(JSON)
    score: Mapped[dict[str, int]] = mapped_column(JSON)
    status: Mapped[str]
    game_mode: Mapped[str]
    hints_remaining: Mapped[int]
    clock: Mapped[dict[str, int]] = mapped_column(JSON, default=dict)
    winner: Mapped[Optional[str]]
    pending_promotion: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
