"""Shared pytest fixtures for FocusDesk tests."""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from focusdesk.database.db import configure_engine, init_db, reset_engine
from focusdesk.timer.engine import TimerEngine


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield
    reset_engine()


@pytest.fixture(autouse=True)
def app_dir(tmp_path, monkeypatch):
    """Keep settings.json and user.json out of the real home directory."""
    monkeypatch.setattr("focusdesk.settings.APP_SUPPORT_DIR", tmp_path)
    monkeypatch.setattr("focusdesk.settings.SETTINGS_PATH", tmp_path / "settings.json")
    yield tmp_path


@pytest.fixture
def engine(qapp):
    """Fresh TimerEngine with DB logging enabled."""
    return TimerEngine(parent=None, db_enabled=True)


@pytest.fixture
def engine_no_db(qapp):
    """Fresh TimerEngine with DB disabled (pure state-machine tests)."""
    return TimerEngine(parent=None, db_enabled=False)
