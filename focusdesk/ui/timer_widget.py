"""Main timer card — the Timer tab.

Layout (top → bottom):
    - Mode selector row (Focus Time / Short Break / Long Break)
    - Countdown label (mm:ss) and progress bar
    - Mode caption ("Focus Time • 25 minutes")
    - Start/Pause + Reset buttons
    - Today's progress card
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QLabel, QPushButton, QFrame, QProgressBar,
)

from ..timer.engine import TimerEngine, TimerMode, MODE_LABELS, format_remaining


class TimerWidget(QWidget):
    """Control surface for a ``TimerEngine``.

    Mode buttons are disabled while the timer runs; the engine itself
    accepts ``switch_mode`` at any time.
    """

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._compact: bool = False
        self._build_ui()
        self._connect_signals()
        self._refresh()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(12)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(28, 20, 28, 24)
        layout.setSpacing(14)

        title = QLabel("Pomodoro Timer", card)
        title.setStyleSheet("font-size: 17px; font-weight: 700;")
        layout.addWidget(title)

        # ── mode selector ────────────────────────────────────────────
        mode_row = QHBoxLayout()
        mode_row.setSpacing(8)
        mode_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._mode_buttons: dict[TimerMode, QPushButton] = {}
        for mode in TimerMode:
            btn = QPushButton(MODE_LABELS[mode], card)
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked, m=mode: self._engine.switch_mode(m))
            self._mode_buttons[mode] = btn
            mode_row.addWidget(btn)
        layout.addLayout(mode_row)

        # ── countdown ────────────────────────────────────────────────
        self._time_label = QLabel("25:00", card)
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_label.setStyleSheet(
            "font-size: 64px; font-weight: 700; font-family: monospace;"
        )
        layout.addWidget(self._time_label)

        self._progress_bar = QProgressBar(card)
        self._progress_bar.setRange(0, 1000)
        self._progress_bar.setTextVisible(False)
        layout.addWidget(self._progress_bar)

        self._caption = QLabel("", card)
        self._caption.setObjectName("mutedLabel")
        self._caption.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._caption)

        # ── controls ─────────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._start_pause_btn = QPushButton("Start", card)
        self._start_pause_btn.setObjectName("primaryButton")
        self._start_pause_btn.setMinimumWidth(140)

        self._reset_btn = QPushButton("Reset", card)

        btn_row.addWidget(self._start_pause_btn)
        btn_row.addWidget(self._reset_btn)
        layout.addLayout(btn_row)

        # ── today's progress ─────────────────────────────────────────
        self._progress_card = QFrame(self)
        self._progress_card.setObjectName("card")
        grid = QGridLayout(self._progress_card)
        grid.setContentsMargins(20, 14, 20, 14)

        heading = QLabel("Today's Progress")
        heading.setStyleSheet("font-size: 15px; font-weight: 700;")
        grid.addWidget(heading, 0, 0, 1, 2)

        sessions_lbl = QLabel("Completed Sessions")
        sessions_lbl.setObjectName("mutedLabel")
        self._sessions_value = QLabel("0")
        self._sessions_value.setAlignment(Qt.AlignmentFlag.AlignRight)
        grid.addWidget(sessions_lbl, 1, 0)
        grid.addWidget(self._sessions_value, 1, 1)

        focus_lbl = QLabel("Focus Time")
        focus_lbl.setObjectName("mutedLabel")
        self._focus_value = QLabel("0 minutes")
        self._focus_value.setAlignment(Qt.AlignmentFlag.AlignRight)
        grid.addWidget(focus_lbl, 2, 0)
        grid.addWidget(self._focus_value, 2, 1)

        root.addWidget(self._progress_card)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_pause_btn.clicked.connect(self.toggle_running)
        self._reset_btn.clicked.connect(self._engine.reset)

        self._engine.remaining_changed.connect(lambda _r: self._refresh())
        self._engine.running_changed.connect(lambda _r: self._refresh())
        self._engine.mode_changed.connect(lambda _m: self._refresh())
        self._engine.sessions_imported.connect(lambda _n: self._refresh())

    # ── slots ─────────────────────────────────────────────────────────────

    def toggle_running(self) -> None:
        if self._engine.is_running:
            self._engine.pause()
        else:
            self._engine.start()

    def _refresh(self) -> None:
        snap = self._engine.snapshot()

        self._time_label.setText(snap.remaining_formatted)
        self._progress_bar.setValue(round(snap.progress_percent * 10))

        minutes = self._engine.duration_for(snap.mode) // 60
        self._caption.setText(f"{MODE_LABELS[snap.mode]} • {minutes} minutes")

        self._start_pause_btn.setText("Pause" if snap.is_running else "Start")

        for mode, btn in self._mode_buttons.items():
            btn.setChecked(mode == snap.mode)
            btn.setEnabled(not snap.is_running)

        self._sessions_value.setText(str(snap.completed_work_sessions_today))
        self._focus_value.setText(f"{self._engine.focus_minutes_today} minutes")

    # ── compact mode ─────────────────────────────────────────────────────

    def set_compact(self, compact: bool) -> None:
        """Hide the progress card and shrink the countdown."""
        self._compact = compact
        self._progress_card.setVisible(not compact)
        size = 44 if compact else 64
        self._time_label.setStyleSheet(
            f"font-size: {size}px; font-weight: 700; font-family: monospace;"
        )
