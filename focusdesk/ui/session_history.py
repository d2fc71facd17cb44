"""Recent sessions list — the last five completed countdowns.

Sits below the timer in the Timer tab and reads straight from the
engine's session log (most recent first).
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame, QSizePolicy,
)

from ..timer.engine import (
    TimerEngine, CompletedSession, MODE_LABELS, RECENT_SESSIONS_LIMIT,
)
from .styles import MODE_COLORS


class SessionHistoryWidget(QWidget):
    """Displays the engine's most recent completed sessions."""

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._row_widgets: list[QWidget] = []
        self._build_ui()
        self._engine.session_completed.connect(lambda _s: self.refresh())
        self._engine.sessions_imported.connect(lambda _n: self.refresh())
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 0)
        layout.setSpacing(6)

        header = QLabel("Recent Sessions")
        header.setStyleSheet("font-size: 15px; font-weight: 700;")
        layout.addWidget(header)

        self._rows_container = QVBoxLayout()
        self._rows_container.setSpacing(4)
        layout.addLayout(self._rows_container)

        self._empty_label = QLabel("No sessions yet — start a focus timer!")
        self._empty_label.setObjectName("mutedLabel")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._empty_label)

    # ── refresh ───────────────────────────────────────────────────────

    def refresh(self) -> None:
        """Rebuild rows from the engine's session log."""
        for w in self._row_widgets:
            w.setParent(None)
            w.deleteLater()
        self._row_widgets.clear()

        sessions = self._engine.recent_sessions(RECENT_SESSIONS_LIMIT)
        self._empty_label.setVisible(not sessions)

        for sess in sessions:
            row = self._make_row(sess)
            self._rows_container.addWidget(row)
            self._row_widgets.append(row)

    # ── row builder ───────────────────────────────────────────────────

    def _make_row(self, sess: CompletedSession) -> QWidget:
        frame = QFrame(self)
        frame.setObjectName("card")
        row = QHBoxLayout(frame)
        row.setContentsMargins(10, 6, 10, 6)
        row.setSpacing(8)

        dot = QLabel("●")
        dot.setStyleSheet(f"color: {MODE_COLORS[sess.mode]}; font-size: 12px;")

        mode_lbl = QLabel(MODE_LABELS[sess.mode])
        mode_lbl.setSizePolicy(
            QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred,
        )

        time_lbl = QLabel(sess.completed_at.strftime("%H:%M"))
        time_lbl.setObjectName("mutedLabel")
        time_lbl.setAlignment(
            Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter
        )

        row.addWidget(dot)
        row.addWidget(mode_lbl)
        row.addWidget(time_lbl)
        return frame
