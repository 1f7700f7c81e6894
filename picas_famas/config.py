"""
Environment-driven settings, read once at import.

A local .env is loaded first (dev convenience); in prod the platform injects env vars.
"""

import os

from dotenv import load_dotenv

from .types import StoreBackend

load_dotenv()


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


APP_ENV: str = os.getenv("APP_ENV", "local")

# SQLite file by default so the service runs with zero setup; point this at MySQL in prod.
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./picas_famas.db")

SQL_ECHO: bool = _as_bool(os.getenv("SQL_ECHO", "false"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

STORE_BACKEND: StoreBackend = "memory" if os.getenv("STORE_BACKEND", "db").lower() == "memory" else "db"
