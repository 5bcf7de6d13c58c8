"""
Graceful Shutdown Manager
=========================

Tears the start page down in one pass:

    CRITICAL  presenter.stop()     clock loop, stats timer, toast timer
    HIGH      view.close()         settings window, root window
    LOW       container.cleanup()  log file

Tasks run on the calling thread. Tk objects may only be touched from the
main thread, so nothing here is handed to a worker. A failing task is
logged and the remaining ones still run.
"""

import signal
import sys
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List

from .error_handling import ErrorHandler


class ShutdownPriority(Enum):
    """Higher values run first"""
    CRITICAL = 100
    HIGH = 75
    NORMAL = 50
    LOW = 25


@dataclass
class ShutdownTask:
    name: str
    callback: Callable[[], None]
    priority: ShutdownPriority


class ShutdownManager:
    """Runs registered teardown tasks exactly once"""

    def __init__(self, error_handler: ErrorHandler, exit_on_complete: bool = True):
        """
        Args:
            error_handler: Source of the file logger
            exit_on_complete: Call sys.exit() once every task has run. The Tk
                app turns this off and lets mainloop return instead.
        """
        self.logger = error_handler.logger
        self.exit_on_complete = exit_on_complete

        self._tasks: List[ShutdownTask] = []
        self._lock = threading.Lock()
        self._initiated = False
        self._complete = False
        self._previous_handlers = {}

    def register_task(
        self,
        name: str,
        callback: Callable[[], None],
        priority: ShutdownPriority = ShutdownPriority.NORMAL,
    ):
        self._tasks.append(ShutdownTask(name, callback, priority))
        self.logger.info(f"Registered shutdown task: {name} ({priority.name})")

    def register_component(self, component_name: str, component):
        """Register ``stop()`` as CRITICAL and ``cleanup()`` as LOW, where present"""
        for method, priority in (("stop", ShutdownPriority.CRITICAL), ("cleanup", ShutdownPriority.LOW)):
            callback = getattr(component, method, None)
            if callable(callback):
                self.register_task(f"{component_name}.{method}()", callback, priority)

    # ========================================================================
    # SIGNALS
    # ========================================================================

    def setup_signal_handlers(self):
        """Route SIGINT/SIGTERM into initiate_shutdown"""
        def on_signal(signum, frame):
            self.logger.info(f"Received {signal.Signals(signum).name}")
            self.initiate_shutdown()

        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, on_signal)

    def restore_signal_handlers(self):
        for signum, handler in self._previous_handlers.items():
            if handler is not None:
                signal.signal(signum, handler)
        self._previous_handlers.clear()

    # ========================================================================
    # SHUTDOWN
    # ========================================================================

    def initiate_shutdown(self, exit_code: int = 0):
        """Run every task once, highest priority first. Later calls are ignored."""
        with self._lock:
            if self._initiated:
                return
            self._initiated = True

        self.logger.info("Shutdown initiated")
        # sorted() is stable: equal priorities keep registration order
        for task in sorted(self._tasks, key=lambda t: t.priority.value, reverse=True):
            self._run(task)

        self._complete = True
        self.logger.info("Shutdown complete")

        if self.exit_on_complete:
            sys.exit(exit_code)

    def _run(self, task: ShutdownTask):
        started = time.monotonic()
        try:
            task.callback()
        except Exception as e:
            self.logger.error(f"Shutdown task '{task.name}' failed: {e}")
            return
        self.logger.info(f"{task.name} done ({time.monotonic() - started:.2f}s)")

    @property
    def shutdown_complete(self) -> bool:
        return self._complete
