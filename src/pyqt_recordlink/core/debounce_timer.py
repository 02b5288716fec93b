"""Single-slot trailing debounce timer."""

from typing import Callable, Optional
from PyQt6.QtCore import QTimer


class DebounceTimer:
    """
    Single-slot trailing debounce timer.

    Arming the timer cancels whatever was previously armed. The handler fires
    only after delay_ms of inactivity.

    Usage:
        self._debounce = DebounceTimer(delay_ms=1000, handler=self._issue_pending)

        def on_text_changed(self, text):
            self._pending_text = text
            self._debounce.trigger()  # Restarts timer
    """

    def __init__(self, delay_ms: int, handler: Callable[[], None]):
        self._delay_ms = delay_ms
        self._handler = handler
        self._timer: Optional[QTimer] = None

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def is_pending(self) -> bool:
        """True while an armed timer has not fired yet."""
        return self._timer is not None and self._timer.isActive()

    def trigger(self):
        """Trigger debounce, restarting the timer."""
        self.cancel()

        self._timer = QTimer()
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._fire)
        self._timer.start(self._delay_ms)

    def cancel(self):
        """Cancel pending trigger."""
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def force(self):
        """Cancel timer and fire handler immediately."""
        self.cancel()
        self._handler()

    def _fire(self):
        self._timer = None
        self._handler()
