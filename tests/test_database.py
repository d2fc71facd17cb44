"""Tests for session-log storage setup."""

from datetime import datetime

import pytest

from focusdesk.database import db
from focusdesk.database.db import (
    configure_engine, engine_url, get_session, init_db, reset_engine,
)
from focusdesk.database.models import SessionRecord



class TestEngineConfig:

    def test_configured_url_is_used(self):
        assert engine_url() == "sqlite:///:memory:"

    def test_default_url_points_at_app_support(self, monkeypatch):
        monkeypatch.setattr(db, "_url", None)
        assert engine_url() == f"sqlite:///{db.DB_PATH}"

    def test_reset_gives_fresh_memory_db(self):
        with get_session() as s:
            s.add(SessionRecord(session_uid="u1", mode="work",
                                duration_seconds=1500, completed_at=datetime.now()))
        reset_engine()
        init_db()
        with get_session() as s:
            assert s.query(SessionRecord).count() == 0

    def test_file_database(self, tmp_path):
        configure_engine(f"sqlite:///{tmp_path / 'log.db'}")
        init_db()
        with get_session() as s:
            s.add(SessionRecord(session_uid="u1", mode="work",
                                duration_seconds=1500, completed_at=datetime.now()))
        reset_engine()
        with get_session() as s:
            assert s.query(SessionRecord).count() == 1


class TestGetSession:

    def test_rolls_back_and_reraises(self):
        with pytest.raises(RuntimeError):
            with get_session() as s:
                s.add(SessionRecord(session_uid="u1", mode="work",
                                    duration_seconds=1500, completed_at=datetime.now()))
                s.flush()
                raise RuntimeError("boom")
        with get_session() as s:
            assert s.query(SessionRecord).count() == 0

    def test_uid_is_unique(self):
        from sqlalchemy.exc import IntegrityError

        with get_session() as s:
            s.add(SessionRecord(session_uid="dup", mode="work",
                                duration_seconds=1500, completed_at=datetime.now()))
        with pytest.raises(IntegrityError):
            with get_session() as s:
                s.add(SessionRecord(session_uid="dup", mode="work",
                                    duration_seconds=1500, completed_at=datetime.now()))
