"""QSS stylesheets and palettes for FocusDesk."""

from __future__ import annotations

from ..timer.engine import TimerMode

# ── mode accent colours (progress bar chunk, history dots) ──────────────

MODE_COLORS: dict[TimerMode, str] = {
    TimerMode.WORK:        "#3B82F6",   # blue
    TimerMode.SHORT_BREAK: "#22C55E",   # green
    TimerMode.LONG_BREAK:  "#22C55E",
}

# ── palettes ─────────────────────────────────────────────────────────────

DARK_PALETTE: dict[str, str] = {
    "bg":           "#0F172A",
    "bg_secondary": "#1E293B",
    "surface":      "#273449",
    "accent":       "#60A5FA",
    "text":         "#E2E8F0",
    "text_muted":   "#94A3B8",
    "danger":       "#F87171",
    "border":       "#334155",
}

LIGHT_PALETTE: dict[str, str] = {
    "bg":           "#F8FAFC",
    "bg_secondary": "#FFFFFF",
    "surface":      "#F1F5F9",
    "accent":       "#2563EB",
    "text":         "#0F172A",
    "text_muted":   "#64748B",
    "danger":       "#DC2626",
    "border":       "#E2E8F0",
}


def _system_prefers_dark() -> bool:
    """True when the desktop reports a dark colour scheme."""
    from PyQt6.QtCore import Qt
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        return False
    hints = app.styleHints()
    if hints is None:
        return False
    return hints.colorScheme() == Qt.ColorScheme.Dark


def get_palette(theme: str) -> dict[str, str]:
    """Return the palette for ``"light"``, ``"dark"`` or ``"system"``."""
    if theme == "dark":
        return dict(DARK_PALETTE)
    if theme == "light":
        return dict(LIGHT_PALETTE)
    return dict(DARK_PALETTE if _system_prefers_dark() else LIGHT_PALETTE)


# ── QSS builder ───────────────────────────────────────────────────────


def build_stylesheet(palette: dict[str, str]) -> str:
    p = palette
    return f"""
    QWidget {{
        background-color: {p['bg']};
        color: {p['text']};
        font-size: 14px;
    }}

    QPushButton {{
        background-color: {p['bg_secondary']};
        color: {p['text']};
        border: 1px solid {p['border']};
        border-radius: 8px;
        padding: 8px 18px;
        font-weight: 600;
    }}

    QPushButton:hover {{
        background-color: {p['surface']};
        border-color: {p['accent']};
    }}

    QPushButton:disabled {{
        color: {p['text_muted']};
    }}

    QPushButton#primaryButton, QPushButton:checked {{
        background-color: {p['accent']};
        color: {p['bg']};
        border: none;
    }}

    QPushButton#dangerButton {{
        background-color: transparent;
        color: {p['danger']};
    }}

    QLineEdit, QComboBox {{
        background-color: {p['bg_secondary']};
        border: 1px solid {p['border']};
        border-radius: 8px;
        padding: 6px 12px;
    }}

    QLineEdit:focus {{
        border-color: {p['accent']};
    }}

    QTabBar::tab {{
        background-color: transparent;
        color: {p['text_muted']};
        padding: 10px 20px;
        border-bottom: 2px solid transparent;
        font-weight: 600;
    }}

    QTabBar::tab:selected {{
        color: {p['accent']};
        border-bottom: 2px solid {p['accent']};
    }}

    QFrame#card {{
        background-color: {p['bg_secondary']};
        border: 1px solid {p['border']};
        border-radius: 12px;
    }}

    QProgressBar {{
        background-color: {p['surface']};
        border: none;
        border-radius: 6px;
        max-height: 12px;
    }}

    QProgressBar::chunk {{
        background-color: {p['accent']};
        border-radius: 6px;
    }}

    QLabel#mutedLabel {{
        color: {p['text_muted']};
        font-size: 13px;
    }}

    QLabel#errorLabel {{
        color: {p['danger']};
        font-size: 13px;
    }}
    """
