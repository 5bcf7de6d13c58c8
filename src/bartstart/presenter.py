"""
Presenter Layer - Coordinates Session and View
==============================================

Wires view callbacks to session entry points and drives the clock loop.
Tkinter is not thread-safe, so every timer here runs through the
scheduler (``root.after``) on the Tk main thread.
"""

# ============================================================================
# IMPORTS
# ============================================================================

import logging
from datetime import datetime
from typing import Any, Optional

from .dependency_injection import AppConfig
from .models import CustomTheme, SearchEngine, StatsSample, WeatherState
from .notification import Notification
from .scheduling import Scheduler
from .session import StartPageSession
from .theme_resolver import Theme

__all__ = ["Scheduler", "StartPagePresenter"]

logger = logging.getLogger("bartstart.presenter")


# ============================================================================
# CLASSES
# ============================================================================

class StartPagePresenter:
    """Presenter layer - coordinates between StartPageSession and the view"""

    def __init__(
        self,
        session: StartPageSession,
        view,
        config: Optional[AppConfig] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize the presenter

        Args:
            session: StartPageSession holding all state
            view: StartPageView (or anything with the same update_* methods)
            config: Application configuration
            scheduler: Timer source; defaults to the view's Tk root
        """
        self.session = session
        self.view = view
        self.config = config or session.config
        self.scheduler = scheduler or view.root

        # Connect view callbacks to presenter methods
        self.view.on_search = self.handle_search
        self.view.on_select_theme = self.handle_select_theme
        self.view.on_save_custom_theme = self.handle_save_custom_theme
        self.view.on_delete_custom_theme = self.handle_delete_custom_theme
        self.view.on_toggle_stats = self.handle_toggle_stats
        self.view.on_select_engine = self.handle_select_engine
        self.view.on_add_shortcut = self.handle_add_shortcut
        self.view.on_delete_shortcut = self.handle_delete_shortcut
        self.view.on_open_shortcut = self.handle_open_shortcut
        self.view.on_dismiss_toast = self.session.notification.dismiss

        self.session.stats_feed.add_listener(self._on_stats)
        self.session.weather_feed.add_listener(self._on_weather)
        self.session.notification.add_observer(self._on_notification)

        self._clock_after_id: Any = None
        self._running = False
        self._last_theme: Optional[Theme] = None

    def start(self):
        """Render once, then start the clock loop and both feeds"""
        self._running = True
        self._refresh_theme()
        self._refresh_preferences()
        self.view.update_stats(self.session.stats, self.session.show_stats)
        self.view.update_weather(self.session.weather)
        self.view.update_toast(None, False)

        self._schedule_clock()
        self.session.start_feeds()
        logger.info("Presenter started")

    def stop(self):
        """Cancel every timer. Safe to call more than once."""
        self._running = False
        try:
            if self._clock_after_id is not None:
                self.scheduler.after_cancel(self._clock_after_id)
        except Exception as e:
            logger.debug("after_cancel failed: %s", e)
        finally:
            self._clock_after_id = None
        self.session.stop_feeds()

    # ========================================================================
    # CLOCK LOOP
    # ========================================================================

    def _schedule_clock(self):
        if not self._running:
            return
        try:
            self._clock_after_id = self.scheduler.after(self.config.feeds.clock_tick_ms, self._on_clock)
        except Exception as e:
            # Window already destroyed
            logger.debug("after() failed: %s", e)
            self._clock_after_id = None

    def _on_clock(self):
        self._clock_after_id = None
        if not self._running:
            return
        try:
            self.tick(datetime.now())
        except Exception as e:
            logger.error("Clock refresh failed: %s", e)
        self._schedule_clock()

    def tick(self, now: datetime):
        """One clock turn: advance time, repaint the theme if it changed."""
        theme = self.session.tick(now)
        if theme != self._last_theme:
            self._last_theme = theme
            self.view.apply_theme(theme)
        self.view.update_clock(now)

    def _refresh_theme(self):
        theme = self.session.resolved_theme()
        self._last_theme = theme
        self.view.apply_theme(theme)
        self.view.update_clock(self.session.now)

    def _refresh_preferences(self):
        session = self.session
        self.view.update_shortcuts(session.shortcuts)
        self.view.update_search(session.search_engine, session.search_placeholder())
        self.view.update_settings(
            override=session.theme_override,
            custom_themes=session.custom_themes,
            show_stats=session.show_stats,
            engine=session.search_engine,
            shortcuts=session.shortcuts,
        )

    # ========================================================================
    # FEED LISTENERS
    # ========================================================================

    def _on_stats(self, sample: StatsSample):
        self.view.update_stats(sample, self.session.show_stats)

    def _on_weather(self, state: WeatherState):
        self.view.update_weather(state)

    def _on_notification(self, notification: Notification):
        self.view.update_toast(notification.message, notification.visible)

    # ========================================================================
    # EVENT HANDLERS
    # ========================================================================

    def handle_search(self, query: str):
        if self.session.submit_search(query):
            self.view.clear_search()

    def handle_select_theme(self, key: Optional[str]):
        if self.session.set_theme_override(key):
            self._refresh_theme()
            self._refresh_preferences()

    def handle_save_custom_theme(self, theme: CustomTheme) -> bool:
        saved = self.session.save_custom_theme(theme)
        if saved:
            self._refresh_theme()
            self._refresh_preferences()
        return bool(saved)

    def handle_delete_custom_theme(self, name: str):
        if self.session.delete_custom_theme(name):
            self._refresh_theme()
            self._refresh_preferences()

    def handle_toggle_stats(self):
        if self.session.toggle_stats() is not None:
            self.view.update_stats(self.session.stats, self.session.show_stats)
            self._refresh_preferences()

    def handle_select_engine(self, engine: SearchEngine):
        if self.session.set_search_engine(engine):
            self._refresh_preferences()

    def handle_add_shortcut(self, name: str, url: str) -> bool:
        added = self.session.add_shortcut(name, url)
        if added:
            self._refresh_preferences()
        return bool(added)

    def handle_delete_shortcut(self, index: int):
        self.session.delete_shortcut(index)
        self._refresh_preferences()

    def handle_open_shortcut(self, index: int):
        self.session.open_shortcut(index)
