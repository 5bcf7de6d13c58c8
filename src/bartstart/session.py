"""
Start Page Session
==================

The single owner of mutable start page state.

Everything the view shows is read from here, and every user action goes
through one of the explicit mutation entry points below. Each entry point
persists the slot it touches in full before changing in-memory state, so
what is on screen always matches what is on disk.

Storage failures are routed through the ErrorHandler, whose ``on_error``
callback feeds the toast.
"""

# ============================================================================
# IMPORTS
# ============================================================================

import logging
import random
import webbrowser
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from .dependency_injection import AppConfig
from .error_handling import ErrorHandler, StartPageError, with_error_handling
from .models import CustomTheme, SearchEngine, Shortcut, StatsSample, WeatherState
from .notification import Notification
from .preferences import PreferenceStore
from .scheduling import Scheduler
from .search import SearchDispatcher
from .shortcuts import ShortcutManager
from .system_stats import StatsFeed, process_memory_percent
from .theme_resolver import Theme, resolve
from .weather import Geolocator, WeatherFeed

logger = logging.getLogger("bartstart.session")


class StartPageSession:
    """State and mutation entry points for one start page run"""

    def __init__(
        self,
        store: PreferenceStore,
        scheduler: Scheduler,
        error_handler: ErrorHandler,
        config: Optional[AppConfig] = None,
        geolocator: Optional[Geolocator] = None,
        opener: Callable[[str], object] = webbrowser.open,
        rng: Optional[random.Random] = None,
        ram_probe: Callable[[], Optional[float]] = process_memory_percent,
        weather_in_background: bool = True,
    ):
        self.config = config or AppConfig.create_default()
        self.store = store
        self.error_handler = error_handler

        self.notification = Notification(scheduler, self.config.notification.dismiss_ms)
        self.error_handler.on_error = self._on_error

        self.shortcut_manager = ShortcutManager(store)
        self.search = SearchDispatcher(store, opener)
        self.weather_feed = WeatherFeed(
            scheduler,
            self.config.feeds,
            geolocator,
            error_handler=error_handler,
            background=weather_in_background,
        )
        self.stats_feed = StatsFeed(
            scheduler,
            interval_ms=self.config.feeds.stats_interval_ms,
            rng=rng,
            ram_probe=ram_probe,
        )

        self.theme_override: Optional[str] = None
        self._custom_themes: List[CustomTheme] = []
        self.show_stats = True
        self.now = datetime.now()

    # ========================================================================
    # STARTUP
    # ========================================================================

    def load(self):
        """Hydrate every slot from storage. Never raises on bad data."""
        prefs = self.store.load_all()
        self.theme_override = prefs.theme_override
        self._custom_themes = list(prefs.custom_themes)
        self.shortcut_manager.load(prefs.shortcuts)
        self.search.load(prefs.search_engine)
        self.show_stats = prefs.show_stats

    def _on_error(self, error: StartPageError):
        self.notification.show(error.user_message)

    # ========================================================================
    # READ-ONLY VIEWS
    # ========================================================================

    @property
    def custom_themes(self) -> Tuple[CustomTheme, ...]:
        return tuple(self._custom_themes)

    @property
    def shortcuts(self) -> Tuple[Shortcut, ...]:
        return self.shortcut_manager.shortcuts

    @property
    def search_engine(self) -> SearchEngine:
        return self.search.engine

    @property
    def weather(self) -> WeatherState:
        return self.weather_feed.state

    @property
    def stats(self) -> StatsSample:
        return self.stats_feed.sample

    def resolved_theme(self) -> Theme:
        return resolve(self.now, self.theme_override, self._custom_themes)

    def search_placeholder(self) -> str:
        return self.search.placeholder()

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def tick(self, now: Optional[datetime] = None) -> Theme:
        """Advance the clock and re-resolve the palette."""
        self.now = now or datetime.now()
        return self.resolved_theme()

    @with_error_handling("Session", "set_theme_override", default_return=False)
    def set_theme_override(self, key: Optional[str]) -> bool:
        """Pin a prebuilt key or custom name; None returns to automatic."""
        self.store.save_theme_override(key)
        self.theme_override = key
        logger.info("Theme override: %s", key or "automatic")
        return True

    @with_error_handling("Session", "save_custom_theme", default_return=False)
    def save_custom_theme(self, theme: CustomTheme) -> bool:
        """Add or replace a custom theme by name, then make it active."""
        theme = CustomTheme(name=theme.name.strip(), colors=theme.colors)
        is_valid, errors = theme.validate()
        if not is_valid:
            logger.debug("Custom theme rejected: %s", "; ".join(errors))
            return False

        updated = [t for t in self._custom_themes if t.name != theme.name] + [theme]
        self.store.save_custom_themes(updated)
        self._custom_themes = updated
        logger.info("Saved custom theme %r", theme.name)

        return self.set_theme_override(theme.name)

    @with_error_handling("Session", "delete_custom_theme", default_return=False)
    def delete_custom_theme(self, name: str) -> bool:
        updated = [t for t in self._custom_themes if t.name != name]
        if len(updated) == len(self._custom_themes):
            return False
        self.store.save_custom_themes(updated)
        self._custom_themes = updated
        logger.info("Deleted custom theme %r", name)

        if self.theme_override == name:
            return self.set_theme_override(None)
        return True

    @with_error_handling("Session", "toggle_stats", default_return=None)
    def toggle_stats(self) -> bool:
        visible = not self.show_stats
        self.store.save_show_stats(visible)
        self.show_stats = visible
        return visible

    @with_error_handling("Session", "set_search_engine", default_return=False)
    def set_search_engine(self, engine: SearchEngine) -> bool:
        self.search.set_engine(engine)
        return True

    @with_error_handling("Session", "add_shortcut", default_return=False)
    def add_shortcut(self, name: str, url: str) -> bool:
        return self.shortcut_manager.add(name, url)

    @with_error_handling("Session", "delete_shortcut", default_return=False)
    def delete_shortcut(self, index: int) -> bool:
        return self.shortcut_manager.delete(index)

    def open_shortcut(self, index: int) -> Optional[str]:
        if not 0 <= index < len(self.shortcuts):
            return None
        url = self.shortcuts[index].url
        self.search.opener(url)
        return url

    @with_error_handling("Session", "submit_search", default_return=None)
    def submit_search(self, query: str) -> Optional[str]:
        return self.search.submit(query)

    # ========================================================================
    # FEEDS
    # ========================================================================

    def start_feeds(self):
        self.stats_feed.start()
        self.weather_feed.start()

    def stop_feeds(self):
        self.stats_feed.stop()
        self.notification.cancel()
