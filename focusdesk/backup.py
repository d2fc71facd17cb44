"""Export and import of user data.

A backup holds the settings and the completed-session log.  JSON
backups round-trip; CSV is an export-only listing of the sessions for
spreadsheets.

JSON layout::

    {
      "version": "1.0.0",
      "exportDate": "2026-01-31T09:15:00",
      "settings": {...},
      "sessions": [
        {"id": "...", "mode": "work", "duration_seconds": 1500,
         "completed_at": "2026-01-31T09:00:00"},
        ...
      ]
    }
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from .settings import Settings, settings_from_dict
from .timer.engine import CompletedSession, TimerMode

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0.0"
EXPORT_FORMATS = ("json", "csv")
CSV_HEADER = ("id", "mode", "duration_seconds", "completed_at")


class BackupError(ValueError):
    """Raised when a backup file cannot be written or understood."""


def default_filename(fmt: str, today: datetime | None = None) -> str:
    """``focusdesk-backup-2026-01-31.json``"""
    day = (today or datetime.now()).date().isoformat()
    return f"focusdesk-backup-{day}.{fmt}"


def _session_to_dict(session: CompletedSession) -> dict:
    return {
        "id": session.id,
        "mode": session.mode.value,
        "duration_seconds": session.duration_seconds,
        "completed_at": session.completed_at.isoformat(),
    }


def _session_from_dict(data: dict) -> CompletedSession:
    return CompletedSession(
        id=str(data["id"]),
        mode=TimerMode(data["mode"]),
        duration_seconds=int(data["duration_seconds"]),
        completed_at=datetime.fromisoformat(data["completed_at"]),
    )


def export_data(path, settings: Settings, sessions, fmt: str = "json") -> Path:
    """Write *settings* and *sessions* to *path* in *fmt*.

    Sessions are written in the order given; pass them oldest first.
    """
    if fmt not in EXPORT_FORMATS:
        raise BackupError(f"Unknown export format: {fmt!r}")
    path = Path(path)
    ordered = list(sessions)

    try:
        if fmt == "json":
            payload = {
                "version": BACKUP_VERSION,
                "exportDate": datetime.now().isoformat(timespec="seconds"),
                "settings": asdict(settings),
                "sessions": [_session_to_dict(s) for s in ordered],
            }
            path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        else:
            with path.open("w", newline="", encoding="utf-8") as fh:
                writer = csv.writer(fh)
                writer.writerow(CSV_HEADER)
                for s in ordered:
                    row = _session_to_dict(s)
                    writer.writerow([row[col] for col in CSV_HEADER])
    except OSError as exc:
        raise BackupError(f"Could not write {path.name}: {exc.strerror}") from exc

    logger.info("Exported %d sessions to %s", len(ordered), path)
    return path


def import_data(path) -> tuple[Settings | None, list[CompletedSession]]:
    """Read a JSON backup.

    Returns the stored settings (``None`` when the backup has none) and
    its sessions.  Anything unreadable raises ``BackupError``; nothing is
    applied here.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise BackupError(f"Could not read {path.name}: {exc.strerror}") from exc
    except ValueError as exc:
        raise BackupError(f"{path.name} is not a FocusDesk JSON backup.") from exc

    if not isinstance(data, dict):
        raise BackupError(f"{path.name} is not a FocusDesk JSON backup.")

    settings = None
    raw_settings = data.get("settings")
    if raw_settings is not None:
        if not isinstance(raw_settings, dict):
            raise BackupError("The backup's settings are malformed.")
        try:
            settings = settings_from_dict(raw_settings)
        except TypeError as exc:
            raise BackupError("The backup's settings are malformed.") from exc

    raw_sessions = data.get("sessions", [])
    if not isinstance(raw_sessions, list):
        raise BackupError("The backup's session log is malformed.")
    try:
        sessions = [_session_from_dict(item) for item in raw_sessions]
    except (KeyError, TypeError, ValueError) as exc:
        raise BackupError("The backup's session log is malformed.") from exc

    logger.info("Read backup %s (%d sessions)", path, len(sessions))
    return settings, sessions
