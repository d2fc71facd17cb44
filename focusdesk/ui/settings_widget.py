"""Settings page for FocusDesk.

Lets users pick the theme, timer alerts, sound, default view and
compact mode.  Changes are saved to disk immediately and announced via
``settings_changed`` so the main window can apply them.  The Data
section exports and imports a backup of the settings and session log.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QCheckBox, QComboBox, QPushButton, QFrame, QFileDialog,
)

from ..backup import (
    BackupError, EXPORT_FORMATS, default_filename, export_data, import_data,
)
from ..settings import Settings, THEMES, VIEWS, save_settings, reset_settings
from ..timer.engine import TimerEngine

logger = logging.getLogger(__name__)


class SettingsWidget(QWidget):
    """Settings tab; edits a shared ``Settings`` instance in place."""

    settings_changed = pyqtSignal(object)

    def __init__(
        self,
        settings: Settings,
        engine: TimerEngine,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings
        self._engine = engine
        self._populating = False
        self._build_ui()
        self._populate()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Appearance ───────────────────────────────────────────────
        root.addWidget(self._section_label("Appearance"))
        look_form = QFormLayout()

        self._theme_combo = QComboBox()
        for theme in THEMES:
            self._theme_combo.addItem(theme.capitalize(), theme)
        self._theme_combo.currentIndexChanged.connect(self._on_changed)
        look_form.addRow("Theme:", self._theme_combo)

        self._compact_cb = QCheckBox("Compact mode")
        self._compact_cb.toggled.connect(self._on_changed)
        look_form.addRow("", self._compact_cb)
        root.addLayout(look_form)

        root.addWidget(self._separator())

        # ── Notifications ────────────────────────────────────────────
        root.addWidget(self._section_label("Notifications"))
        notif_form = QFormLayout()

        self._alerts_cb = QCheckBox("Timer alerts")
        self._alerts_cb.toggled.connect(self._on_changed)
        notif_form.addRow("", self._alerts_cb)

        self._sound_cb = QCheckBox("Sound")
        self._sound_cb.toggled.connect(self._on_changed)
        notif_form.addRow("", self._sound_cb)
        root.addLayout(notif_form)

        root.addWidget(self._separator())

        # ── Preferences ──────────────────────────────────────────────
        root.addWidget(self._section_label("Preferences"))
        pref_form = QFormLayout()

        self._view_combo = QComboBox()
        for view in VIEWS:
            self._view_combo.addItem(view.capitalize(), view)
        self._view_combo.currentIndexChanged.connect(self._on_changed)
        pref_form.addRow("Default view:", self._view_combo)
        root.addLayout(pref_form)

        root.addWidget(self._separator())

        # ── Data ─────────────────────────────────────────────────────
        root.addWidget(self._section_label("Data"))
        data_row = QHBoxLayout()
        self._format_combo = QComboBox()
        for fmt in EXPORT_FORMATS:
            self._format_combo.addItem(fmt.upper(), fmt)
        self._export_btn = QPushButton("Export…")
        self._export_btn.clicked.connect(self._on_export_clicked)
        self._import_btn = QPushButton("Import…")
        self._import_btn.clicked.connect(self._on_import_clicked)
        data_row.addWidget(self._format_combo)
        data_row.addWidget(self._export_btn)
        data_row.addWidget(self._import_btn)
        data_row.addStretch()
        root.addLayout(data_row)

        self._data_status = QLabel("")
        self._data_status.setObjectName("mutedLabel")
        self._data_status.setWordWrap(True)
        root.addWidget(self._data_status)

        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        self._reset_btn = QPushButton("Reset to defaults")
        self._reset_btn.setObjectName("dangerButton")
        self._reset_btn.clicked.connect(self._on_reset)
        btn_row.addWidget(self._reset_btn)
        root.addLayout(btn_row)

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        return line

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE FROM SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        s = self._settings
        self._populating = True
        try:
            self._theme_combo.setCurrentIndex(self._theme_combo.findData(s.theme))
            self._compact_cb.setChecked(s.compact_mode)
            self._alerts_cb.setChecked(s.timer_alerts)
            self._sound_cb.setChecked(s.sound_enabled)
            self._view_combo.setCurrentIndex(self._view_combo.findData(s.default_view))
        finally:
            self._populating = False

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLERS — save immediately
    # ══════════════════════════════════════════════════════════════════

    def _on_changed(self) -> None:
        if self._populating:
            return
        s = self._settings
        s.theme = self._theme_combo.currentData()
        s.compact_mode = self._compact_cb.isChecked()
        s.timer_alerts = self._alerts_cb.isChecked()
        s.sound_enabled = self._sound_cb.isChecked()
        s.default_view = self._view_combo.currentData()
        self._save()

    def _on_reset(self) -> None:
        self._adopt(reset_settings())

    def _adopt(self, source: Settings) -> None:
        # Keep the shared instance so other holders see the change.
        for name, value in vars(source).items():
            setattr(self._settings, name, value)
        self._populate()
        self.settings_changed.emit(self._settings)

    def _save(self) -> None:
        save_settings(self._settings)
        self.settings_changed.emit(self._settings)

    # ══════════════════════════════════════════════════════════════════
    #  EXPORT / IMPORT
    # ══════════════════════════════════════════════════════════════════

    def _on_export_clicked(self) -> None:
        fmt = self._format_combo.currentData()
        path, _ = QFileDialog.getSaveFileName(
            self, "Export data", default_filename(fmt),
            f"{fmt.upper()} files (*.{fmt})",
        )
        if path:
            self.export_to(path, fmt)

    def _on_import_clicked(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Import data", "", "JSON backups (*.json)",
        )
        if path:
            self.import_from(path)

    def export_to(self, path: str, fmt: str = "json") -> bool:
        """Write a backup to *path*; report the outcome in the Data section."""
        try:
            export_data(path, self._settings, reversed(self._engine.sessions), fmt)
        except BackupError as exc:
            self._data_status.setText(f"Export failed: {exc}")
            return False
        self._data_status.setText(f"Exported {len(self._engine.sessions)} sessions.")
        return True

    def import_from(self, path: str) -> bool:
        """Apply a JSON backup: settings replace the current ones, sessions merge."""
        try:
            settings, sessions = import_data(path)
        except BackupError as exc:
            logger.warning("Import of %s failed: %s", path, exc)
            self._data_status.setText(f"Import failed: {exc}")
            return False

        if settings is not None:
            save_settings(settings)
            self._adopt(settings)
        added = self._engine.import_sessions(sessions)
        suffix = " and your settings" if settings is not None else ""
        self._data_status.setText(f"Imported {added} new sessions{suffix}.")
        return True

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def settings(self) -> Settings:
        return self._settings
