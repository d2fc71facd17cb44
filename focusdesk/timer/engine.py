"""Pomodoro timer state machine for FocusDesk.

States
------
Idle      ``is_running`` is False — waiting for the user.
Running   ``is_running`` is True — the clock driver calls ``tick()``.

Both are crossed with the active mode (WORK / SHORT_BREAK / LONG_BREAK).
There is no terminal state; the machine cycles indefinitely.

Transitions
-----------
Idle → Running                 (start)
Running → Idle                 (pause — remaining time is kept)
Any → Idle, full duration      (reset / switch_mode)
Running → Idle, next mode      (tick that exhausts the countdown)

Cycle
-----
WORK → SHORT_BREAK → WORK → SHORT_BREAK → WORK → SHORT_BREAK → WORK →
LONG_BREAK → WORK → ...  Every 4th completed work session earns the
long break.

The engine does not own a timer.  ``ClockDriver`` (see ``clock.py``)
calls ``tick()`` once per second while the engine reports it is running.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, date
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerMode(Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_DURATIONS: dict[TimerMode, int] = {
    TimerMode.WORK: 25 * 60,
    TimerMode.SHORT_BREAK: 5 * 60,
    TimerMode.LONG_BREAK: 15 * 60,
}

MODE_LABELS: dict[TimerMode, str] = {
    TimerMode.WORK: "Focus Time",
    TimerMode.SHORT_BREAK: "Short Break",
    TimerMode.LONG_BREAK: "Long Break",
}

LONG_BREAK_EVERY = 4
RECENT_SESSIONS_LIMIT = 5


# ── value types ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CompletedSession:
    """One finished countdown.  Append-only; never edited."""

    id: str
    mode: TimerMode
    duration_seconds: int
    completed_at: datetime


@dataclass(frozen=True)
class CompletionEvent:
    completed_mode: TimerMode
    next_mode: TimerMode
    session: CompletedSession


@dataclass(frozen=True)
class TimerSnapshot:
    """Everything the UI needs to render the timer."""

    mode: TimerMode
    remaining_seconds: int
    remaining_formatted: str
    progress_percent: float
    is_running: bool
    completed_work_sessions_today: int
    recent_sessions: tuple[CompletedSession, ...]


def format_remaining(seconds: int) -> str:
    """``1500`` → ``"25:00"``."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


def next_mode_after(completed: TimerMode, work_sessions_done: int) -> TimerMode:
    """Pick the mode that follows *completed*.

    *work_sessions_done* is the count **after** the just-finished session
    was added to it.
    """
    if completed != TimerMode.WORK:
        return TimerMode.WORK
    if work_sessions_done > 0 and work_sessions_done % LONG_BREAK_EVERY == 0:
        return TimerMode.LONG_BREAK
    return TimerMode.SHORT_BREAK


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Qt-based Pomodoro timer engine with session logging.

    Signals
    -------
    remaining_changed(remaining_seconds: int)
        Emitted after every countdown change (decrement, reset, switch).
    running_changed(is_running: bool)
        Emitted whenever the running flag flips.
    mode_changed(mode: TimerMode)
        Emitted whenever the active mode is set.
    session_completed(session: CompletedSession)
        Emitted once per finished countdown.
    completion(event: CompletionEvent)
        Emitted with the finished and the next mode.
    sessions_imported(count: int)
        Emitted after ``import_sessions`` added entries to the log.
    """

    remaining_changed = pyqtSignal(int)
    running_changed = pyqtSignal(bool)
    mode_changed = pyqtSignal(object)
    session_completed = pyqtSignal(object)
    completion = pyqtSignal(object)
    sessions_imported = pyqtSignal(int)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        db_enabled: bool = True,
        notifier=None,
        durations: dict[TimerMode, int] | None = None,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        self._durations: dict[TimerMode, int] = dict(DEFAULT_DURATIONS)
        if durations:
            self._durations.update(durations)
        self._db_enabled: bool = db_enabled
        self._notifier = notifier

        # ── live state ────────────────────────────────────────────────
        self._mode: TimerMode = TimerMode.WORK
        self._remaining: int = self._durations[TimerMode.WORK]
        self._is_running: bool = False
        self._work_sessions_today: int = 0
        self._counted_day: date = date.today()

        # ── session log (oldest first) ────────────────────────────────
        self._sessions: list[CompletedSession] = []

        if self._db_enabled:
            self._load_from_db()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def mode(self) -> TimerMode:
        return self._mode

    @property
    def remaining(self) -> int:
        """Seconds left on the clock."""
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def completed_work_sessions_today(self) -> int:
        """Work sessions finished since local midnight."""
        self._roll_day(date.today())
        return self._work_sessions_today

    @property
    def total_duration(self) -> int:
        """Full length of the current mode in seconds."""
        return self._durations[self._mode]

    @property
    def progress(self) -> float:
        """0.0 → 1.0 progress through the current session."""
        total = self.total_duration
        if total <= 0:
            return 0.0
        elapsed = total - self._remaining
        return max(0.0, min(1.0, elapsed / total))

    @property
    def focus_minutes_today(self) -> int:
        work_minutes = self._durations[TimerMode.WORK] // 60
        return self.completed_work_sessions_today * work_minutes

    @property
    def sessions(self) -> tuple[CompletedSession, ...]:
        """Completed sessions, most recent first."""
        return tuple(reversed(self._sessions))

    def duration_for(self, mode: TimerMode) -> int:
        return self._durations[mode]

    def recent_sessions(
        self, limit: int = RECENT_SESSIONS_LIMIT,
    ) -> tuple[CompletedSession, ...]:
        return self.sessions[:limit]

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            mode=self._mode,
            remaining_seconds=self._remaining,
            remaining_formatted=format_remaining(self._remaining),
            progress_percent=self.progress * 100,
            is_running=self._is_running,
            completed_work_sessions_today=self.completed_work_sessions_today,
            recent_sessions=self.recent_sessions(),
        )

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Run (or resume) the countdown.  Idempotent."""
        self._request_notification_permission()
        if self._is_running:
            return
        self._set_running(True)

    def pause(self) -> None:
        """Freeze the countdown at its current value."""
        self._set_running(False)

    def reset(self) -> None:
        """Stop and refill the current mode.  Mode and counters are kept."""
        self._set_running(False)
        self._remaining = self._durations[self._mode]
        self.remaining_changed.emit(self._remaining)

    def switch_mode(self, mode: TimerMode) -> None:
        """Stop and load *mode* at full duration.

        Switching to the active mode still refills the clock.
        """
        self._set_running(False)
        self._mode = mode
        self._remaining = self._durations[mode]
        self.mode_changed.emit(mode)
        self.remaining_changed.emit(self._remaining)

    def tick(self) -> None:
        """Advance the countdown by one second.

        Called by the clock driver.  A tick while paused is ignored.
        """
        if not self._is_running:
            logger.debug("Ignoring tick while paused")
            return

        if self._remaining > 1:
            self._remaining -= 1
            self.remaining_changed.emit(self._remaining)
            return

        # This tick exhausts the countdown (or it was already empty).
        self._complete()

    def import_sessions(self, sessions) -> int:
        """Merge sessions from a backup into the log.

        Entries whose ``id`` is already known are skipped.  Timer state
        (mode, remaining, running) is untouched; today's work count is
        recomputed from the merged log.  Returns the number added.
        """
        known = {s.id for s in self._sessions}
        added: list[CompletedSession] = []
        for session in sessions:
            if session.id in known:
                continue
            known.add(session.id)
            added.append(session)
        if not added:
            return 0

        self._sessions.extend(added)
        self._sessions.sort(key=lambda s: s.completed_at)
        if self._db_enabled:
            for session in added:
                self._persist_completed(session)

        self._counted_day = date.today()
        self._work_sessions_today = self._count_work_on(self._counted_day)
        logger.info("Imported %d sessions", len(added))
        self.sessions_imported.emit(len(added))
        return len(added)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — completion protocol
    # ══════════════════════════════════════════════════════════════════

    def _complete(self) -> None:
        # State is fully updated before any signal is emitted.
        completed_mode = self._mode
        now = datetime.now()
        session = CompletedSession(
            id=uuid.uuid4().hex,
            mode=completed_mode,
            duration_seconds=self._durations[completed_mode],
            completed_at=now,
        )
        self._sessions.append(session)
        self._is_running = False

        if completed_mode == TimerMode.WORK:
            self._roll_day(now.date())
            self._work_sessions_today += 1

        next_mode = next_mode_after(completed_mode, self._work_sessions_today)
        self._mode = next_mode
        self._remaining = self._durations[next_mode]

        logger.info(
            "%s completed (%d today), next: %s",
            MODE_LABELS[completed_mode],
            self._work_sessions_today,
            MODE_LABELS[next_mode],
        )

        if self._db_enabled:
            self._persist_completed(session)

        event = CompletionEvent(
            completed_mode=completed_mode,
            next_mode=next_mode,
            session=session,
        )
        self.running_changed.emit(False)
        self.mode_changed.emit(next_mode)
        self.remaining_changed.emit(self._remaining)
        self.session_completed.emit(session)
        self.completion.emit(event)
        self._notify(event)

    def _roll_day(self, today: date) -> None:
        """Restart the daily work count when the calendar day changes."""
        if today != self._counted_day:
            self._counted_day = today
            self._work_sessions_today = 0

    def _set_running(self, running: bool) -> None:
        if running == self._is_running:
            return
        self._is_running = running
        self.running_changed.emit(running)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — notifications (best effort)
    # ══════════════════════════════════════════════════════════════════

    def _request_notification_permission(self) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.request_permission()
        except Exception:
            logger.debug("Notification permission request failed", exc_info=True)

    def _notify(self, event: CompletionEvent) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(event)
        except Exception:
            logger.debug("Completion notification failed", exc_info=True)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — database persistence
    # ══════════════════════════════════════════════════════════════════

    def _persist_completed(self, session: CompletedSession) -> None:
        from ..database.db import get_session
        from ..database.models import SessionRecord

        try:
            with get_session() as db:
                db.add(SessionRecord(
                    session_uid=session.id,
                    mode=session.mode.value,
                    duration_seconds=session.duration_seconds,
                    completed_at=session.completed_at,
                ))
        except Exception:
            logger.exception("Could not store completed session %s", session.id)

    def _load_from_db(self) -> None:
        from sqlalchemy.exc import SQLAlchemyError

        from ..database.db import get_session
        from ..database.models import SessionRecord

        try:
            with get_session() as db:
                records = (
                    db.query(SessionRecord)
                    .order_by(SessionRecord.completed_at.asc(), SessionRecord.id.asc())
                    .all()
                )
                restored = [
                    CompletedSession(
                        id=r.session_uid,
                        mode=TimerMode(r.mode),
                        duration_seconds=r.duration_seconds,
                        completed_at=r.completed_at,
                    )
                    for r in records
                ]
        except (SQLAlchemyError, ValueError):
            logger.exception("Could not read the session log; starting empty")
            return

        self._sessions = restored
        self._work_sessions_today = self._count_work_on(self._counted_day)
        if restored:
            logger.debug(
                "Restored %d sessions (%d work today)",
                len(restored), self._work_sessions_today,
            )

    def _count_work_on(self, day: date) -> int:
        return sum(
            1 for s in self._sessions
            if s.mode == TimerMode.WORK and s.completed_at.date() == day
        )
