"""Settings, database sessions, credential helpers and logging setup."""

from app.core.config import Settings, get_settings
from app.core.database import SessionLocal, get_db

__all__ = ["Settings", "SessionLocal", "get_db", "get_settings"]
