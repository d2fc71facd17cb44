"""SQLite session-log storage.

The engine is created on first use from :func:`engine_url`.  Tests call
:func:`configure_engine` with an in-memory URL and :func:`reset_engine`
afterwards so nothing leaks between them.
"""

import logging
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base

logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "FocusDesk"
DB_PATH = APP_SUPPORT_DIR / "focusdesk.db"

_url: str | None = None
_engine = None
_SessionFactory = None


def engine_url() -> str:
    """The URL in use: the configured one, else the on-disk log."""
    return _url or f"sqlite:///{DB_PATH}"


def _make_engine(url: str):
    if url == f"sqlite:///{DB_PATH}":
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args={"check_same_thread": False})


def _get_engine():
    global _engine
    if _engine is None:
        _engine = _make_engine(engine_url())
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


def configure_engine(url: str) -> None:
    """Point the session log at *url*, dropping any open engine."""
    global _url
    reset_engine()
    _url = url


def reset_engine() -> None:
    """Dispose the current engine; the next call reconnects lazily."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


def init_db() -> None:
    """Create the ``sessions`` table if it does not exist yet."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    logger.debug("Session log ready at %s", engine.url)


@contextmanager
def get_session():
    """Yield an ORM session; commit on success, roll back and re-raise on error."""
    session: OrmSession = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
