"""Shared test helpers for FocusDesk."""

from focusdesk.timer.engine import CompletionEvent, TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeNotifier:
    """Records what the engine asks of its notifier."""

    def __init__(self):
        self.permission_requests = 0
        self.events: list[CompletionEvent] = []

    def request_permission(self):
        self.permission_requests += 1

    def notify(self, event):
        self.events.append(event)


class BrokenNotifier:
    """A notifier whose platform API is missing."""

    def request_permission(self):
        raise RuntimeError("notifications unavailable")

    def notify(self, event):
        raise RuntimeError("notifications unavailable")


def complete_session(engine: TimerEngine) -> None:
    """Fast-complete the current session by jumping to the last tick."""
    if not engine.is_running:
        engine.start()
    engine._remaining = 1
    engine.tick()
