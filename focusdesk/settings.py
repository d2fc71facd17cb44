"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/FocusDesk/settings.json

Usage::

    settings = load_settings()
    settings.timer_alerts = False
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

# Same app-support directory as db.py
APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "FocusDesk"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

THEMES = ("light", "dark", "system")
VIEWS = ("timer", "settings")


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── appearance ────────────────────────────────────────────────────
    theme: str = "system"                  # light | dark | system
    compact_mode: bool = False

    # ── notifications ─────────────────────────────────────────────────
    timer_alerts: bool = True
    sound_enabled: bool = True

    # ── navigation ────────────────────────────────────────────────────
    default_view: str = "timer"

    # ── window ────────────────────────────────────────────────────────
    window_width: int = 560
    window_height: int = 760

    def __post_init__(self) -> None:
        if self.theme not in THEMES:
            self.theme = "system"
        if self.default_view not in VIEWS:
            self.default_view = "timer"


def settings_from_dict(data: dict) -> Settings:
    """Build ``Settings`` from a decoded JSON object, ignoring unknown keys."""
    valid_keys = {f.name for f in fields(Settings)}
    return Settings(**{k: v for k, v in data.items() if k in valid_keys})


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            return settings_from_dict(data)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )


def reset_settings() -> Settings:
    """Restore and persist the defaults."""
    settings = Settings()
    save_settings(settings)
    return settings
