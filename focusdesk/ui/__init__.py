"""UI package."""

from .timer_widget import TimerWidget
from .session_history import SessionHistoryWidget
from .settings_widget import SettingsWidget
from .auth_widget import AuthWidget

__all__ = [
    "TimerWidget",
    "SessionHistoryWidget",
    "SettingsWidget",
    "AuthWidget",
]
