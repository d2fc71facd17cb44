"""Session-log storage (SQLite via SQLAlchemy)."""

from .db import configure_engine, get_session, init_db, reset_engine
from .models import SessionRecord

__all__ = ["configure_engine", "get_session", "init_db", "reset_engine", "SessionRecord"]
