"""SQLAlchemy ORM models for FocusDesk."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class SessionRecord(Base):
    """One completed Pomodoro countdown (work or break)."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_uid = Column(String(32), nullable=False, unique=True)
    mode = Column(String(20), nullable=False, default="work")  # work | short_break | long_break
    duration_seconds = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    def __repr__(self) -> str:
        return (
            f"<SessionRecord id={self.id} uid={self.session_uid} mode={self.mode} "
            f"completed_at={self.completed_at}>"
        )
