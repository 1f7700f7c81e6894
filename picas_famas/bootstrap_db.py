"""
Dev convenience: create tables if they don't exist.
Call this at startup in local/dev only
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .db import engine, Base
from .models import Attempt, Game, Player


def create_all():
    Base.metadata.create_all(bind=engine)


def database_summary(db: Session) -> dict:
    """Row counts per table, logged at startup."""
    return {
        "players": db.scalar(select(func.count()).select_from(Player)) or 0,
        "games": db.scalar(select(func.count()).select_from(Game)) or 0,
        "attempts": db.scalar(select(func.count()).select_from(Attempt)) or 0,
    }
