"""
Transient toast: one message at a time, auto-dismissed.
"""

import logging
from typing import Any, Callable, List, Optional

from .scheduling import Scheduler

logger = logging.getLogger("bartstart.notification")

DEFAULT_DISMISS_MS = 4000


class Notification:
    """Single-slot toast state.

    A new message replaces the current one and restarts the dismiss timer.
    """

    def __init__(self, scheduler: Scheduler, dismiss_ms: int = DEFAULT_DISMISS_MS):
        self.scheduler = scheduler
        self.dismiss_ms = dismiss_ms

        self.message: Optional[str] = None
        self.visible = False
        self._timer_id: Any = None
        self._observers: List[Callable[["Notification"], None]] = []

    def add_observer(self, callback: Callable[["Notification"], None]):
        self._observers.append(callback)

    def _notify(self):
        for callback in list(self._observers):
            callback(self)

    def _cancel_timer(self):
        if self._timer_id is not None:
            try:
                self.scheduler.after_cancel(self._timer_id)
            except Exception as e:
                logger.debug("after_cancel failed: %s", e)
            self._timer_id = None

    def show(self, message: str):
        self._cancel_timer()
        self.message = message
        self.visible = True
        logger.info("Toast: %s", message)
        self._timer_id = self.scheduler.after(self.dismiss_ms, self._on_timeout)
        self._notify()

    def _on_timeout(self):
        self._timer_id = None
        self.dismiss()

    def dismiss(self):
        self._cancel_timer()
        if not self.visible:
            return
        self.visible = False
        self._notify()

    def cancel(self):
        """Teardown: drop the pending timer without notifying anyone."""
        self._cancel_timer()
        self.visible = False
