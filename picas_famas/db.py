"""
Single place to:
- Create a SQLAlchemy Engine from config.DATABASE_URL
- Create a Session factory (SessionLocal) for per-request DB sessions
- Provide get_db() dependency for FastAPI routes
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from . import config

# SQLite connections are per-thread by default; FastAPI runs sync routes in a threadpool.
connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

# pool_pre_ping=True = auto-detect dead connections (helps with long-lived processes).
engine = create_engine(
    config.DATABASE_URL,
    pool_pre_ping=True,
    echo=config.SQL_ECHO,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


class Base(DeclarativeBase):
    pass


# Opens a session, yields it to the route, and closes it even if the route raises.
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
