"""FocusDesk — a personal productivity desktop app built around a Pomodoro timer."""

__version__ = "0.1.0"
