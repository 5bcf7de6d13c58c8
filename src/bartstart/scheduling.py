"""
Timer capability shared by the feeds, the toast and the presenter.

Tk's ``after`` / ``after_cancel`` already satisfy it; tests pass a fake
that records callbacks and fires them by hand.
"""

from typing import Any, Callable, Protocol


class Scheduler(Protocol):
    def after(self, ms: int, func: Callable[[], Any]) -> Any:
        """Run *func* once after *ms* milliseconds on the UI thread; return a timer id."""
        ...

    def after_cancel(self, timer_id: Any) -> None:
        ...
