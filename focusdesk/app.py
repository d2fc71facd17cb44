"""Main application window for FocusDesk."""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QIcon, QImage, QPainter, QColor, QPixmap, QPen
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QTabWidget, QStatusBar, QPushButton, QStackedWidget, QSystemTrayIcon,
)

from .auth import User, load_user, save_user, clear_user
from .notifications import TrayNotifier
from .settings import Settings, load_settings, save_settings
from .timer.clock import ClockDriver
from .timer.engine import (
    TimerEngine, TimerMode, CompletionEvent, MODE_LABELS, format_remaining,
)
from .ui.auth_widget import AuthWidget
from .ui.session_history import SessionHistoryWidget
from .ui.settings_widget import SettingsWidget
from .ui.styles import build_stylesheet, get_palette
from .ui.timer_widget import TimerWidget

logger = logging.getLogger(__name__)


# ── tray‑icon image generation ────────────────────────────────────────────


def _make_tray_icon(running: bool) -> QIcon:
    """Filled circle while running, outline when idle."""
    size = 64
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(0, 0, 0, 220)
    r = size // 2 - 4
    if running:
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
    p.drawEllipse(4, 4, r * 2, r * 2)
    p.end()
    return QIcon(QPixmap.fromImage(img))


class FocusDeskApp(QMainWindow):
    """Main application window: sign-in gate, then tabs."""

    def __init__(self, *, db_enabled: bool = True) -> None:
        super().__init__()
        self.setWindowTitle("FocusDesk")
        self.setMinimumSize(480, 640)

        # ── settings ──────────────────────────────────────────────────
        self._settings: Settings = load_settings()
        self.resize(self._settings.window_width, self._settings.window_height)

        # ── tray + notifications ──────────────────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.setIcon(_make_tray_icon(False))
        self._tray_icon.setToolTip("FocusDesk — Ready")
        self._notifier = TrayNotifier(self._tray_icon, self._settings)

        # ── engine + clock ────────────────────────────────────────────
        self._timer_engine = TimerEngine(
            self, db_enabled=db_enabled, notifier=self._notifier,
        )
        self._clock = ClockDriver(self._timer_engine, self)

        # ── pages ─────────────────────────────────────────────────────
        self._stack = QStackedWidget(self)
        self.setCentralWidget(self._stack)

        self._auth_widget = AuthWidget(self._stack)
        self._auth_widget.logged_in.connect(self._on_logged_in)
        self._stack.addWidget(self._auth_widget)

        self._main_page = self._build_main_page()
        self._stack.addWidget(self._main_page)

        self._status_bar = QStatusBar(self)
        self.setStatusBar(self._status_bar)

        # ── wire signals ──────────────────────────────────────────────
        self._timer_engine.running_changed.connect(self._on_running_changed)
        self._timer_engine.remaining_changed.connect(self._on_remaining_changed)
        self._timer_engine.completion.connect(self._on_completion)
        self._settings_widget.settings_changed.connect(self._apply_settings)

        self._apply_settings()

        # ── restore signed-in user ────────────────────────────────────
        self._user: User | None = None
        user = load_user()
        if user is not None:
            self._enter_app(user)
        else:
            self._stack.setCurrentWidget(self._auth_widget)

        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray_icon.show()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD
    # ══════════════════════════════════════════════════════════════════

    def _build_main_page(self) -> QWidget:
        page = QWidget(self._stack)
        layout = QVBoxLayout(page)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(8)

        # ── top bar: greeting + sign out ──────────────────────────────
        bar = QHBoxLayout()
        self._greeting = QLabel("", page)
        self._greeting.setObjectName("mutedLabel")
        self._sign_out_btn = QPushButton("Sign Out", page)
        self._sign_out_btn.clicked.connect(self.sign_out)
        bar.addWidget(self._greeting)
        bar.addStretch()
        bar.addWidget(self._sign_out_btn)
        layout.addLayout(bar)

        # ── tabs ──────────────────────────────────────────────────────
        self._tabs = QTabWidget(page)
        layout.addWidget(self._tabs)

        timer_page = QWidget(self._tabs)
        timer_layout = QVBoxLayout(timer_page)
        timer_layout.setContentsMargins(0, 8, 0, 0)
        self._timer_widget = TimerWidget(self._timer_engine, timer_page)
        self._session_history = SessionHistoryWidget(self._timer_engine, timer_page)
        timer_layout.addWidget(self._timer_widget)
        timer_layout.addWidget(self._session_history)
        timer_layout.addStretch()
        self._tabs.addTab(timer_page, "Timer")

        self._settings_widget = SettingsWidget(
            self._settings, self._timer_engine, self._tabs,
        )
        self._tabs.addTab(self._settings_widget, "Settings")

        self._views: dict[str, QWidget] = {
            "timer": timer_page,
            "settings": self._settings_widget,
        }
        return page

    # ══════════════════════════════════════════════════════════════════
    #  AUTH
    # ══════════════════════════════════════════════════════════════════

    def _on_logged_in(self, user: User, remember: bool) -> None:
        if remember:
            save_user(user)
        else:
            clear_user()
        self._enter_app(user)

    def _enter_app(self, user: User) -> None:
        self._user = user
        self._greeting.setText(f"Welcome back, {user.first_name}!")
        self._stack.setCurrentWidget(self._main_page)
        self.show_view(self._settings.default_view)
        logger.info("Signed in as %s", user.email)

    def sign_out(self) -> None:
        self._timer_engine.pause()
        clear_user()
        self._user = None
        self._stack.setCurrentWidget(self._auth_widget)

    @property
    def user(self) -> User | None:
        return self._user

    def show_view(self, view: str) -> None:
        widget = self._views.get(view, self._views["timer"])
        self._tabs.setCurrentWidget(widget)

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _apply_settings(self, *_args) -> None:
        s = self._settings
        self.setStyleSheet(build_stylesheet(get_palette(s.theme)))
        self._timer_widget.set_compact(s.compact_mode)
        self._session_history.setVisible(not s.compact_mode)

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_running_changed(self, running: bool) -> None:
        self._tray_icon.setIcon(_make_tray_icon(running))
        label = MODE_LABELS[self._timer_engine.mode]
        if running:
            self._status_bar.showMessage(f"{label} running")
        elif self._timer_engine.progress > 0:
            self._status_bar.showMessage(f"{label} paused")
        else:
            self._status_bar.showMessage("Ready when you are")

    def _on_remaining_changed(self, remaining: int) -> None:
        label = MODE_LABELS[self._timer_engine.mode]
        self._tray_icon.setToolTip(f"FocusDesk — {label} {format_remaining(remaining)}")

    def _on_completion(self, event: CompletionEvent) -> None:
        done = MODE_LABELS[event.completed_mode]
        if event.completed_mode == TimerMode.WORK:
            self._status_bar.showMessage(f"{done} completed! Time for a break.")
        else:
            self._status_bar.showMessage(f"{done} completed! Ready to focus again?")

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def _save_geometry(self) -> None:
        size = self.size()
        self._settings.window_width = size.width()
        self._settings.window_height = size.height()
        save_settings(self._settings)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._save_geometry()
        self._clock.detach()
        self._tray_icon.hide()
        event.accept()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Space toggles start/pause, Escape resets (signed in only)."""
        if self._stack.currentWidget() is self._main_page:
            key = event.key()
            if key == Qt.Key.Key_Space and not event.modifiers():
                self._timer_widget.toggle_running()
                event.accept()
                return
            if key == Qt.Key.Key_Escape:
                self._timer_engine.reset()
                event.accept()
                return
        super().keyPressEvent(event)
