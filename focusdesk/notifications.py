"""Completion notifications.

The engine only knows the small ``Notifier`` interface.  ``TrayNotifier``
shows a message through the system tray icon; when the tray is missing
or alerts are turned off, permission is simply denied and nothing is
shown.
"""

from __future__ import annotations

import logging
from enum import Enum

from PyQt6.QtWidgets import QSystemTrayIcon

from .settings import Settings
from .timer.engine import CompletionEvent, TimerMode, MODE_LABELS

logger = logging.getLogger(__name__)


def tray_supports_messages() -> bool:
    """True when the desktop has a tray that can show balloon messages."""
    return (
        QSystemTrayIcon.isSystemTrayAvailable()
        and QSystemTrayIcon.supportsMessages()
    )


class NotificationPermission(Enum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


def notification_text(event: CompletionEvent) -> tuple[str, str]:
    """Title and body for a finished session."""
    title = f"{MODE_LABELS[event.completed_mode]} completed!"
    if event.completed_mode == TimerMode.WORK:
        body = "Time for a break!"
    else:
        body = "Ready to focus again?"
    return title, body


class Notifier:
    """Interface the timer engine talks to."""

    permission: NotificationPermission = NotificationPermission.DEFAULT

    def request_permission(self) -> NotificationPermission:
        return self.permission

    def notify(self, event: CompletionEvent) -> None:
        pass


class TrayNotifier(Notifier):
    """Show completion messages as system tray balloons."""

    def __init__(
        self,
        tray_icon: QSystemTrayIcon | None,
        settings: Settings,
    ) -> None:
        self._tray = tray_icon
        self._settings = settings
        self.permission = NotificationPermission.DEFAULT

    def _tray_usable(self) -> bool:
        return self._tray is not None and tray_supports_messages()

    def request_permission(self) -> NotificationPermission:
        if self._settings.timer_alerts and self._tray_usable():
            self.permission = NotificationPermission.GRANTED
        else:
            self.permission = NotificationPermission.DENIED
        logger.debug("Notification permission: %s", self.permission.value)
        return self.permission

    def notify(self, event: CompletionEvent) -> None:
        # Settings can change between start() and completion.
        if not self._settings.timer_alerts:
            return
        if self.permission != NotificationPermission.GRANTED:
            return
        title, body = notification_text(event)
        self._tray.showMessage(title, body)
