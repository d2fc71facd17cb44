"""One-second clock that drives a ``TimerEngine``.

The driver listens to ``running_changed``: it starts its ``QTimer`` when
the engine starts and stops it the moment the engine stops (pause,
reset, mode switch or completion).  Each timeout delivers exactly one
``tick()``, so a full session receives ``duration(mode)`` ticks.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, Qt, QTimer

from .engine import TimerEngine

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


class ClockDriver(QObject):
    """Calls ``engine.tick()`` once per second while the engine runs."""

    def __init__(
        self,
        engine: TimerEngine,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._attached = False

        self._qt_timer = QTimer(self)
        self._qt_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._on_timeout)

        self.attach()

    @property
    def is_active(self) -> bool:
        return self._qt_timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._qt_timer.interval()

    def attach(self) -> None:
        """Follow the engine's running flag."""
        if self._attached:
            return
        self._engine.running_changed.connect(self._on_running_changed)
        self._attached = True
        self._on_running_changed(self._engine.is_running)

    def detach(self) -> None:
        """Stop ticking and ignore the engine from now on."""
        if not self._attached:
            return
        self._engine.running_changed.disconnect(self._on_running_changed)
        self._attached = False
        self._qt_timer.stop()

    def _on_running_changed(self, running: bool) -> None:
        if running:
            if not self._qt_timer.isActive():
                self._qt_timer.start()
        else:
            self._qt_timer.stop()

    def _on_timeout(self) -> None:
        # A stale timeout can still be queued after stop(); never drive
        # a paused engine.
        if not self._engine.is_running:
            self._qt_timer.stop()
            return
        self._engine.tick()
