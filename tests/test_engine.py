"""Tests for the FocusDesk timer engine.

Covers: commands (start/pause/reset/switch_mode), countdown ticks, the
completion protocol, the 4-session long-break cadence, progress, the
read model, notification side effects, and session log persistence.
"""

import dataclasses
import pytest
from datetime import date, datetime, timedelta

from sqlalchemy.exc import OperationalError

from focusdesk.database.db import get_session
from focusdesk.database.models import SessionRecord
from focusdesk.timer.engine import (
    TimerEngine, TimerMode, CompletionEvent, CompletedSession,
    DEFAULT_DURATIONS, LONG_BREAK_EVERY, format_remaining, next_mode_after,
)

from helpers import (
    SignalCollector, FakeNotifier, BrokenNotifier, complete_session,
)

WORK = DEFAULT_DURATIONS[TimerMode.WORK]
SHORT = DEFAULT_DURATIONS[TimerMode.SHORT_BREAK]
LONG = DEFAULT_DURATIONS[TimerMode.LONG_BREAK]


def _assert_invariant(engine: TimerEngine) -> None:
    assert 0 <= engine.remaining <= engine.duration_for(engine.mode)


# ═══════════════════════════════════════════════════════════════════════════
#  INITIAL STATE / CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════


class TestInitialState:

    def test_defaults(self, engine_no_db):
        assert engine_no_db.mode == TimerMode.WORK
        assert engine_no_db.remaining == 1500
        assert engine_no_db.is_running is False
        assert engine_no_db.completed_work_sessions_today == 0
        assert engine_no_db.sessions == ()

    def test_durations(self):
        assert WORK == 1500
        assert SHORT == 300
        assert LONG == 900
        assert LONG_BREAK_EVERY == 4

    def test_mode_values(self):
        assert TimerMode.WORK.value == "work"
        assert TimerMode.SHORT_BREAK.value == "short_break"
        assert TimerMode.LONG_BREAK.value == "long_break"


# ═══════════════════════════════════════════════════════════════════════════
#  COMMANDS
# ═══════════════════════════════════════════════════════════════════════════


class TestStartPause:

    def test_start_sets_running(self, engine_no_db):
        engine_no_db.start()
        assert engine_no_db.is_running is True
        assert engine_no_db.remaining == WORK

    def test_start_is_idempotent(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.running_changed.connect(c)
        engine_no_db.start()
        engine_no_db.tick()
        engine_no_db.start()
        assert engine_no_db.is_running is True
        assert engine_no_db.remaining == WORK - 1
        assert c.items == [True]

    def test_pause_freezes_remaining(self, engine_no_db):
        engine_no_db.start()
        for _ in range(10):
            engine_no_db.tick()
        engine_no_db.pause()
        assert engine_no_db.is_running is False
        assert engine_no_db.remaining == WORK - 10

    def test_ticks_while_paused_are_ignored(self, engine_no_db):
        engine_no_db.start()
        engine_no_db.tick()
        engine_no_db.pause()
        for _ in range(50):
            engine_no_db.tick()
        assert engine_no_db.remaining == WORK - 1
        assert engine_no_db.sessions == ()

    def test_tick_before_start_is_ignored(self, engine_no_db):
        engine_no_db.tick()
        assert engine_no_db.remaining == WORK

    def test_resume_continues_from_frozen_value(self, engine_no_db):
        engine_no_db.start()
        for _ in range(5):
            engine_no_db.tick()
        engine_no_db.pause()
        engine_no_db.start()
        engine_no_db.tick()
        assert engine_no_db.remaining == WORK - 6

    def test_pause_when_idle_is_harmless(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.running_changed.connect(c)
        engine_no_db.pause()
        assert engine_no_db.is_running is False
        assert len(c) == 0

    def test_running_changed_signal(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.running_changed.connect(c)
        engine_no_db.start()
        engine_no_db.pause()
        assert c.items == [True, False]


class TestReset:

    def test_reset_restores_full_duration(self, engine_no_db):
        engine_no_db.start()
        for _ in range(30):
            engine_no_db.tick()
        engine_no_db.reset()
        assert engine_no_db.remaining == WORK
        assert engine_no_db.is_running is False

    def test_reset_while_paused(self, engine_no_db):
        engine_no_db.start()
        engine_no_db.tick()
        engine_no_db.pause()
        engine_no_db.reset()
        assert engine_no_db.remaining == WORK
        assert engine_no_db.is_running is False

    def test_reset_keeps_mode_and_counters(self, engine_no_db):
        complete_session(engine_no_db)
        assert engine_no_db.mode == TimerMode.SHORT_BREAK
        engine_no_db.start()
        engine_no_db.tick()
        engine_no_db.reset()
        assert engine_no_db.mode == TimerMode.SHORT_BREAK
        assert engine_no_db.remaining == SHORT
        assert engine_no_db.completed_work_sessions_today == 1
        assert len(engine_no_db.sessions) == 1

    def test_reset_emits_remaining(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.remaining_changed.connect(c)
        engine_no_db.reset()
        assert c.last == WORK


class TestSwitchMode:

    @pytest.mark.parametrize("mode", list(TimerMode))
    def test_switch_loads_full_duration(self, engine_no_db, mode):
        engine_no_db.switch_mode(mode)
        assert engine_no_db.mode == mode
        assert engine_no_db.remaining == DEFAULT_DURATIONS[mode]
        assert engine_no_db.is_running is False

    def test_switch_to_same_mode_refills(self, engine_no_db):
        engine_no_db.start()
        for _ in range(100):
            engine_no_db.tick()
        engine_no_db.pause()
        engine_no_db.switch_mode(TimerMode.WORK)
        assert engine_no_db.mode == TimerMode.WORK
        assert engine_no_db.remaining == WORK

    def test_switch_while_running_stops(self, engine_no_db):
        engine_no_db.start()
        engine_no_db.switch_mode(TimerMode.LONG_BREAK)
        assert engine_no_db.is_running is False
        assert engine_no_db.remaining == LONG

    def test_switch_does_not_log_or_count(self, engine_no_db):
        engine_no_db.start()
        engine_no_db.switch_mode(TimerMode.SHORT_BREAK)
        assert engine_no_db.sessions == ()
        assert engine_no_db.completed_work_sessions_today == 0

    def test_switch_emits_mode_changed(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.mode_changed.connect(c)
        engine_no_db.switch_mode(TimerMode.SHORT_BREAK)
        assert c.last == TimerMode.SHORT_BREAK


# ═══════════════════════════════════════════════════════════════════════════
#  COUNTDOWN / COMPLETION PROTOCOL
# ═══════════════════════════════════════════════════════════════════════════


class TestCompletion:

    def test_tick_decrements(self, engine_no_db):
        engine_no_db.start()
        engine_no_db.tick()
        assert engine_no_db.remaining == WORK - 1

    def test_tick_emits_remaining(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.remaining_changed.connect(c)
        engine_no_db.start()
        engine_no_db.tick()
        assert c.items == [WORK - 1]

    def test_last_tick_completes_work(self, engine_no_db):
        engine_no_db.start()
        engine_no_db._remaining = 1
        engine_no_db.tick()

        assert len(engine_no_db.sessions) == 1
        session = engine_no_db.sessions[0]
        assert session.mode == TimerMode.WORK
        assert session.duration_seconds == 1500
        assert engine_no_db.completed_work_sessions_today == 1
        assert engine_no_db.is_running is False
        assert engine_no_db.mode == TimerMode.SHORT_BREAK
        assert engine_no_db.remaining == SHORT

    def test_empty_countdown_also_completes(self, engine_no_db):
        engine_no_db.start()
        engine_no_db._remaining = 0
        engine_no_db.tick()
        assert len(engine_no_db.sessions) == 1
        assert engine_no_db.mode == TimerMode.SHORT_BREAK
        assert engine_no_db.remaining == SHORT

    def test_break_completion_goes_to_work(self, engine_no_db):
        complete_session(engine_no_db)
        complete_session(engine_no_db)
        assert engine_no_db.mode == TimerMode.WORK
        assert engine_no_db.remaining == WORK
        assert engine_no_db.completed_work_sessions_today == 1
        assert engine_no_db.sessions[0].mode == TimerMode.SHORT_BREAK
        assert engine_no_db.sessions[0].duration_seconds == SHORT

    def test_long_break_completion_goes_to_work(self, engine_no_db):
        engine_no_db.switch_mode(TimerMode.LONG_BREAK)
        complete_session(engine_no_db)
        assert engine_no_db.mode == TimerMode.WORK
        assert engine_no_db.completed_work_sessions_today == 0

    def test_completion_does_not_auto_start(self, engine_no_db):
        complete_session(engine_no_db)
        engine_no_db.tick()
        assert engine_no_db.remaining == SHORT

    def test_session_completed_signal(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.session_completed.connect(c)
        complete_session(engine_no_db)
        assert isinstance(c.last, CompletedSession)
        assert c.last.mode == TimerMode.WORK
        assert isinstance(c.last.completed_at, datetime)

    def test_completion_event(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.completion.connect(c)
        complete_session(engine_no_db)
        event = c.last
        assert isinstance(event, CompletionEvent)
        assert event.completed_mode == TimerMode.WORK
        assert event.next_mode == TimerMode.SHORT_BREAK
        assert event.session is engine_no_db.sessions[0]

    def test_running_flag_cleared_on_completion(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.running_changed.connect(c)
        complete_session(engine_no_db)
        assert c.items == [True, False]

    def test_listeners_see_settled_state(self, engine_no_db):
        e = engine_no_db
        seen = []

        def record(*_args):
            seen.append((e.is_running, e.mode, e.remaining,
                         e.completed_work_sessions_today, len(e.sessions)))

        e.running_changed.connect(record)
        e.mode_changed.connect(record)
        e.remaining_changed.connect(record)
        e.start()
        seen.clear()
        e._remaining = 1
        e.tick()

        assert seen
        assert set(seen) == {(False, TimerMode.SHORT_BREAK, SHORT, 1, 1)}

    def test_session_ids_unique(self, engine_no_db):
        for _ in range(6):
            complete_session(engine_no_db)
        ids = {s.id for s in engine_no_db.sessions}
        assert len(ids) == 6

    def test_end_to_end_work_session(self, engine_no_db):
        e = engine_no_db
        assert (e.mode, e.remaining, e.is_running,
                e.completed_work_sessions_today) == (TimerMode.WORK, 1500, False, 0)

        e.start()
        for _ in range(1499):
            e.tick()
        assert e.remaining == 1
        assert e.is_running is True
        assert e.sessions == ()

        e.tick()
        assert len(e.sessions) == 1
        assert e.sessions[0].mode == TimerMode.WORK
        assert e.sessions[0].duration_seconds == 1500
        assert e.completed_work_sessions_today == 1
        assert e.mode == TimerMode.SHORT_BREAK
        assert e.remaining == 300
        assert e.is_running is False

    def test_invariant_holds_through_full_cycle(self, engine_no_db):
        e = engine_no_db
        e.start()
        for _ in range(WORK + SHORT + 10):
            if not e.is_running:
                e.start()
            e.tick()
            _assert_invariant(e)


# ═══════════════════════════════════════════════════════════════════════════
#  LONG-BREAK CADENCE
# ═══════════════════════════════════════════════════════════════════════════


class TestCadence:

    def test_eight_work_sessions(self, engine_no_db):
        breaks = []
        for _ in range(8):
            assert engine_no_db.mode == TimerMode.WORK
            complete_session(engine_no_db)
            breaks.append(engine_no_db.mode)
            complete_session(engine_no_db)

        S, L = TimerMode.SHORT_BREAK, TimerMode.LONG_BREAK
        assert breaks == [S, S, S, L, S, S, S, L]
        assert engine_no_db.completed_work_sessions_today == 8

    def test_fourth_session_from_last_tick(self, engine_no_db):
        engine_no_db._work_sessions_today = 3
        engine_no_db.start()
        engine_no_db._remaining = 1
        engine_no_db.tick()
        assert engine_no_db.completed_work_sessions_today == 4
        assert engine_no_db.mode == TimerMode.LONG_BREAK
        assert engine_no_db.remaining == LONG

    def test_manual_work_selection_still_counts(self, engine_no_db):
        """Skipping a break by switching modes does not disturb the count."""
        for _ in range(3):
            complete_session(engine_no_db)
            engine_no_db.switch_mode(TimerMode.WORK)
        complete_session(engine_no_db)
        assert engine_no_db.mode == TimerMode.LONG_BREAK

    @pytest.mark.parametrize("count, expected", [
        (1, TimerMode.SHORT_BREAK),
        (2, TimerMode.SHORT_BREAK),
        (3, TimerMode.SHORT_BREAK),
        (4, TimerMode.LONG_BREAK),
        (5, TimerMode.SHORT_BREAK),
        (8, TimerMode.LONG_BREAK),
        (12, TimerMode.LONG_BREAK),
    ])
    def test_next_mode_after_work(self, count, expected):
        assert next_mode_after(TimerMode.WORK, count) == expected

    def test_zero_count_is_not_long(self):
        assert next_mode_after(TimerMode.WORK, 0) == TimerMode.SHORT_BREAK

    @pytest.mark.parametrize("brk", [TimerMode.SHORT_BREAK, TimerMode.LONG_BREAK])
    def test_next_mode_after_break(self, brk):
        assert next_mode_after(brk, 4) == TimerMode.WORK

    def test_day_rollover_restarts_count(self, engine_no_db):
        engine_no_db._counted_day = date.today() - timedelta(days=1)
        engine_no_db._work_sessions_today = 3
        complete_session(engine_no_db)
        assert engine_no_db.completed_work_sessions_today == 1
        assert engine_no_db.mode == TimerMode.SHORT_BREAK

    def test_count_rolls_over_without_a_completion(self, engine_no_db):
        complete_session(engine_no_db)
        assert engine_no_db.completed_work_sessions_today == 1

        engine_no_db._counted_day = date.today() - timedelta(days=1)
        assert engine_no_db.completed_work_sessions_today == 0
        assert engine_no_db.focus_minutes_today == 0

        engine_no_db._counted_day = date.today() - timedelta(days=1)
        engine_no_db._work_sessions_today = 2
        assert engine_no_db.snapshot().completed_work_sessions_today == 0


# ═══════════════════════════════════════════════════════════════════════════
#  PROGRESS / READ MODEL
# ═══════════════════════════════════════════════════════════════════════════


class TestProgress:

    def test_zero_at_full_duration(self, engine_no_db):
        assert engine_no_db.progress == 0.0

    def test_halfway(self, engine_no_db):
        engine_no_db.switch_mode(TimerMode.SHORT_BREAK)
        engine_no_db.start()
        for _ in range(150):
            engine_no_db.tick()
        assert engine_no_db.progress == pytest.approx(0.5)

    def test_monotonic_while_running(self, engine_no_db):
        engine_no_db.start()
        last = engine_no_db.progress
        for _ in range(200):
            engine_no_db.tick()
            assert engine_no_db.progress >= last
            last = engine_no_db.progress

    def test_resets_after_completion(self, engine_no_db):
        engine_no_db.start()
        for _ in range(WORK - 1):
            engine_no_db.tick()
        assert engine_no_db.progress > 0.99
        engine_no_db.tick()
        assert engine_no_db.progress == 0.0

    def test_reset_and_switch_zero_progress(self, engine_no_db):
        engine_no_db.start()
        engine_no_db.tick()
        engine_no_db.reset()
        assert engine_no_db.progress == 0.0
        engine_no_db.start()
        engine_no_db.tick()
        engine_no_db.switch_mode(TimerMode.LONG_BREAK)
        assert engine_no_db.progress == 0.0


class TestSnapshot:

    @pytest.mark.parametrize("seconds, text", [
        (1500, "25:00"),
        (300, "05:00"),
        (61, "01:01"),
        (9, "00:09"),
        (0, "00:00"),
    ])
    def test_format_remaining(self, seconds, text):
        assert format_remaining(seconds) == text

    def test_snapshot_fields(self, engine_no_db):
        engine_no_db.start()
        for _ in range(75):
            engine_no_db.tick()
        snap = engine_no_db.snapshot()
        assert snap.mode == TimerMode.WORK
        assert snap.remaining_seconds == 1425
        assert snap.remaining_formatted == "23:45"
        assert snap.progress_percent == pytest.approx(5.0)
        assert snap.is_running is True
        assert snap.completed_work_sessions_today == 0
        assert snap.recent_sessions == ()

    def test_recent_sessions_newest_first_capped(self, engine_no_db):
        for _ in range(7):
            complete_session(engine_no_db)
        snap = engine_no_db.snapshot()
        assert len(snap.recent_sessions) == 5
        assert len(engine_no_db.sessions) == 7
        assert snap.recent_sessions[0] is engine_no_db.sessions[0]
        times = [s.completed_at for s in snap.recent_sessions]
        assert times == sorted(times, reverse=True)
        # 7 completions starting from work: W S W S W S W; newest is work
        assert snap.recent_sessions[0].mode == TimerMode.WORK

    def test_sessions_view_is_read_only(self, engine_no_db):
        complete_session(engine_no_db)
        view = engine_no_db.sessions
        assert isinstance(view, tuple)
        with pytest.raises(dataclasses.FrozenInstanceError):
            view[0].duration_seconds = 1

    def test_focus_minutes_today(self, engine_no_db):
        complete_session(engine_no_db)
        complete_session(engine_no_db)
        complete_session(engine_no_db)
        assert engine_no_db.focus_minutes_today == 50


# ═══════════════════════════════════════════════════════════════════════════
#  NOTIFICATIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestNotifierHooks:

    def test_start_requests_permission(self, qapp):
        n = FakeNotifier()
        e = TimerEngine(db_enabled=False, notifier=n)
        e.start()
        assert n.permission_requests == 1

    def test_completion_notifies(self, qapp):
        n = FakeNotifier()
        e = TimerEngine(db_enabled=False, notifier=n)
        complete_session(e)
        assert len(n.events) == 1
        assert n.events[0].completed_mode == TimerMode.WORK
        assert n.events[0].next_mode == TimerMode.SHORT_BREAK

    def test_broken_notifier_does_not_block(self, qapp):
        e = TimerEngine(db_enabled=False, notifier=BrokenNotifier())
        e.start()
        assert e.is_running is True
        e._remaining = 1
        e.tick()
        assert e.mode == TimerMode.SHORT_BREAK
        assert e.completed_work_sessions_today == 1
        assert len(e.sessions) == 1

    def test_no_notifier_is_fine(self, engine_no_db):
        complete_session(engine_no_db)
        assert engine_no_db.mode == TimerMode.SHORT_BREAK


# ═══════════════════════════════════════════════════════════════════════════
#  DATABASE SESSION LOGGING
# ═══════════════════════════════════════════════════════════════════════════


class TestDBLogging:

    def test_completed_session_is_stored(self, engine):
        complete_session(engine)
        with get_session() as db:
            records = db.query(SessionRecord).all()
            assert len(records) == 1
            assert records[0].mode == "work"
            assert records[0].duration_seconds == WORK
            assert records[0].session_uid == engine.sessions[0].id

    def test_nothing_stored_before_completion(self, engine):
        engine.start()
        engine.tick()
        engine.reset()
        with get_session() as db:
            assert db.query(SessionRecord).count() == 0

    def test_no_db_writes_when_disabled(self, engine_no_db):
        complete_session(engine_no_db)
        with get_session() as db:
            assert db.query(SessionRecord).count() == 0

    def test_new_engine_restores_log_and_count(self, engine, qapp):
        for _ in range(3):
            complete_session(engine)  # W, S, W

        restored = TimerEngine(db_enabled=True)
        assert len(restored.sessions) == 3
        assert restored.completed_work_sessions_today == 2
        assert [s.id for s in restored.sessions] == [s.id for s in engine.sessions]
        # Running state is never restored
        assert restored.mode == TimerMode.WORK
        assert restored.remaining == WORK
        assert restored.is_running is False

    def test_old_sessions_not_counted_today(self, qapp):
        yesterday = datetime.now() - timedelta(days=1)
        with get_session() as db:
            db.add(SessionRecord(
                session_uid="old", mode="work", duration_seconds=WORK,
                completed_at=yesterday,
            ))
        e = TimerEngine(db_enabled=True)
        assert e.completed_work_sessions_today == 0
        assert len(e.sessions) == 1

    def test_failed_write_keeps_completion(self, engine, monkeypatch):
        def _boom():
            raise RuntimeError("disk full")

        monkeypatch.setattr(
            "focusdesk.database.db._get_session_factory", lambda: _boom,
        )
        complete_session(engine)
        assert engine.completed_work_sessions_today == 1
        assert engine.mode == TimerMode.SHORT_BREAK

    def test_unreadable_log_starts_empty(self, qapp, monkeypatch):
        def _locked():
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(
            "focusdesk.database.db._get_session_factory", lambda: _locked,
        )
        e = TimerEngine(db_enabled=True)
        assert e.sessions == ()
        assert e.completed_work_sessions_today == 0
        assert e.mode == TimerMode.WORK

    def test_unknown_mode_row_starts_empty(self, qapp):
        with get_session() as db:
            db.add(SessionRecord(
                session_uid="bad", mode="nap", duration_seconds=60,
                completed_at=datetime.now(),
            ))
        e = TimerEngine(db_enabled=True)
        assert e.sessions == ()


# ═══════════════════════════════════════════════════════════════════════════
#  IMPORTED SESSIONS
# ═══════════════════════════════════════════════════════════════════════════


def _session(uid, mode=TimerMode.WORK, when=None):
    return CompletedSession(
        id=uid, mode=mode, duration_seconds=DEFAULT_DURATIONS[mode],
        completed_at=when or datetime.now(),
    )


class TestImportSessions:

    def test_adds_unknown_sessions(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.sessions_imported.connect(c)
        added = engine_no_db.import_sessions([_session("a"), _session("b")])
        assert added == 2
        assert c.items == [2]
        assert {s.id for s in engine_no_db.sessions} == {"a", "b"}
        assert engine_no_db.completed_work_sessions_today == 2

    def test_skips_known_ids(self, engine_no_db):
        complete_session(engine_no_db)
        known = engine_no_db.sessions[0]
        c = SignalCollector()
        engine_no_db.sessions_imported.connect(c)
        assert engine_no_db.import_sessions([known, _session("x"), _session("x")]) == 1
        assert len(engine_no_db.sessions) == 2

    def test_nothing_new_emits_nothing(self, engine_no_db):
        c = SignalCollector()
        engine_no_db.sessions_imported.connect(c)
        assert engine_no_db.import_sessions([]) == 0
        assert len(c) == 0

    def test_older_sessions_sort_behind(self, engine_no_db):
        complete_session(engine_no_db)
        old = _session("old", when=datetime.now() - timedelta(days=2))
        engine_no_db.import_sessions([old])
        assert engine_no_db.sessions[-1].id == "old"
        assert engine_no_db.completed_work_sessions_today == 1

    def test_timer_state_untouched(self, engine_no_db):
        engine_no_db.switch_mode(TimerMode.LONG_BREAK)
        engine_no_db.start()
        engine_no_db.tick()
        engine_no_db.import_sessions([_session("a")])
        assert engine_no_db.mode == TimerMode.LONG_BREAK
        assert engine_no_db.remaining == LONG - 1
        assert engine_no_db.is_running is True

    def test_imported_sessions_are_stored(self, engine, qapp):
        engine.import_sessions([_session("a"), _session("b", TimerMode.SHORT_BREAK)])
        restored = TimerEngine(db_enabled=True)
        assert {s.id for s in restored.sessions} == {"a", "b"}
        assert restored.completed_work_sessions_today == 1
