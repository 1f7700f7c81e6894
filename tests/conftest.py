"""
- Spins up temp test DB
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Provide a client fixture (TestClient(app)) that already has the DB override applied.
- Secrets come from a seeded random.Random so games are predictable.
"""
import os
import random
import pytest
from typing import Generator

# Set before the app is imported: config is read once at import time
os.environ["APP_ENV"] = "test"
os.environ["STORE_BACKEND"] = "db"
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from picas_famas.db import Base, get_db
from picas_famas.main import app, get_rng
from picas_famas.secret import generate_secret
from picas_famas import models  # noqa: F401  (registers tables on Base.metadata)

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
TEST_SEED = 1234

@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()

@pytest.fixture(autouse=True)
def _clean_db(engine):
    """
    The stores commit inside requests, so data would leak between tests.
    Delete rows (children first) before each test.
    """
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM attempts"))
        conn.execute(text("DELETE FROM games"))
        conn.execute(text("DELETE FROM players"))
    yield

@pytest.fixture
def secret() -> str:
    """The secret every game gets while get_rng is overridden."""
    return generate_secret(random.Random(TEST_SEED))

@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session and a seeded secret source for every request."""
    def _get_db_for_tests():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_for_tests
    app.dependency_overrides[get_rng] = lambda: random.Random(TEST_SEED)
    yield
    app.dependency_overrides.clear()

@pytest.fixture
def client():
    return TestClient(app)
