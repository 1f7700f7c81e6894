"""
SQLAlchemy ORM models.

Tables:
- players: one row per registered player (first + last name is unique)
- games: one row per game, owned by a player
- attempts: one row per guess (history), owned by a game

Secrets and guesses are stored as 4-char strings so leading zeros survive ("0123").
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    String, Integer, DateTime, Boolean, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db import Base


def utcnow() -> datetime:
    # naive UTC; SQLite drops tzinfo anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Player(Base):
    __tablename__ = "players"
    __table_args__ = (UniqueConstraint("first_name", "last_name", name="uq_player_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    registered_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    games: Mapped[list["Game"]] = relationship(
        back_populates="player",
        cascade="all, delete-orphan",
        order_by="Game.id",
    )


class Game(Base):
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id", ondelete="CASCADE"), index=True)
    player: Mapped[Player] = relationship(back_populates="games")

    secret: Mapped[str] = mapped_column(String(4), nullable=False)
    is_finished: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    attempts: Mapped[list["Attempt"]] = relationship(
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="Attempt.id",
    )


class Attempt(Base):
    __tablename__ = "attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    game_id: Mapped[int] = mapped_column(Integer, ForeignKey("games.id", ondelete="CASCADE"), index=True)
    game: Mapped[Game] = relationship(back_populates="attempts")

    attempted_number: Mapped[str] = mapped_column(String(4), nullable=False)

    # Evaluator output
    exact_matches: Mapped[int] = mapped_column(Integer, nullable=False)
    partial_matches: Mapped[int] = mapped_column(Integer, nullable=False)
    message: Mapped[str] = mapped_column(String(255), nullable=False)

    attempted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
