"""
Dependency Injection System
============================

Configuration objects and the dependency container for the start page.

Benefits:
- Clear dependencies for each component
- Easy to mock for testing
- Configuration as objects (not dicts)
- Centralized dependency management
"""

# ============================================================================
# IMPORTS
# ============================================================================

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Optional, TYPE_CHECKING
import os
import logging

from .error_handling import ErrorHandler

if TYPE_CHECKING:
    from .preferences import KeyValueStorage


# ============================================================================
# CONFIGURATION CLASSES
# ============================================================================

DEFAULT_WEATHER_ENDPOINT = "https://api.open-meteo.com/v1/forecast"
DEFAULT_GEOLOCATION_ENDPOINT = "https://ipapi.co/json/"

GEOLOCATION_MODES = ("ip", "static", "none")


def default_data_dir() -> Path:
    """Per-profile data directory (``BARTSTART_HOME`` overrides it)."""
    override = os.environ.get("BARTSTART_HOME")
    if override:
        return Path(os.path.expandvars(override)).expanduser()
    return Path.home() / ".bartstart"


@dataclass
class PathConfig:
    """File paths configuration"""
    data_dir: Path
    preferences_path: Path
    log_path: Path

    @classmethod
    def from_environment(cls) -> 'PathConfig':
        """Create path configuration from environment"""
        data_dir = default_data_dir()
        return cls(
            data_dir=data_dir,
            preferences_path=data_dir / "preferences.json",
            log_path=data_dir / "bartstart.log",
        )


@dataclass
class FeedConfig:
    """Clock, stats and weather feed configuration"""
    clock_tick_ms: int = 1000
    stats_interval_ms: int = 2000

    weather_endpoint: str = DEFAULT_WEATHER_ENDPOINT
    weather_timeout_s: float = 10.0

    # Used whenever location lookup is denied, fails or is unavailable
    fallback_latitude: float = 21.1463
    fallback_longitude: float = 79.0849

    geolocation: str = "ip"
    geolocation_endpoint: str = DEFAULT_GEOLOCATION_ENDPOINT
    static_latitude: Optional[float] = None
    static_longitude: Optional[float] = None


@dataclass
class NotificationConfig:
    """Toast configuration"""
    dismiss_ms: int = 4000


@dataclass
class UIConfig:
    """UI configuration"""
    window_width: int = 1280
    window_height: int = 800
    fullscreen: bool = True

    clock_font: str = "Oswald"
    accent_font: str = "Dancing Script"
    body_font: str = "Lato"


@dataclass
class AppConfig:
    """Complete application configuration"""
    app_name: str
    version: str
    paths: PathConfig
    feeds: FeedConfig
    notification: NotificationConfig
    ui: UIConfig

    @classmethod
    def create_default(cls) -> 'AppConfig':
        """Create default application configuration"""
        return cls(
            app_name="BartStart",
            version="1.0.0",
            paths=PathConfig.from_environment(),
            feeds=FeedConfig(),
            notification=NotificationConfig(),
            ui=UIConfig()
        )

    def to_dict(self) -> dict:
        """Flat key view, logged at startup"""
        return {
            # Application info
            "APP_NAME": self.app_name,
            "VERSION": self.version,

            # Paths
            "DATA_DIR": self.paths.data_dir,
            "PREFERENCES_PATH": self.paths.preferences_path,
            "LOGFILE": self.paths.log_path,

            # Feeds
            "CLOCK_TICK_MS": self.feeds.clock_tick_ms,
            "STATS_INTERVAL_MS": self.feeds.stats_interval_ms,
            "WEATHER_ENDPOINT": self.feeds.weather_endpoint,
            "WEATHER_TIMEOUT_S": self.feeds.weather_timeout_s,
            "FALLBACK_LATITUDE": self.feeds.fallback_latitude,
            "FALLBACK_LONGITUDE": self.feeds.fallback_longitude,
            "GEOLOCATION": self.feeds.geolocation,

            # Notification
            "TOAST_DISMISS_MS": self.notification.dismiss_ms,

            # UI
            "WINDOW_WIDTH": self.ui.window_width,
            "WINDOW_HEIGHT": self.ui.window_height,
            "FULLSCREEN": self.ui.fullscreen,
            "CLOCK_FONT": self.ui.clock_font,
            "ACCENT_FONT": self.ui.accent_font,
            "BODY_FONT": self.ui.body_font,
        }


# ============================================================================
# INTERFACE PROTOCOLS (Dependency Inversion)
# ============================================================================

class ILogger(Protocol):
    """Logger interface"""

    def error(self, message: str) -> None:
        """Log an error"""
        ...

    def info(self, message: str) -> None:
        """Log info"""
        ...


# ============================================================================
# SIMPLE FILE LOGGER IMPLEMENTATION
# ============================================================================

class FileLogger:
    """Rotating file-based logger.

    Keeps the small info/error interface the ErrorHandler expects, backed
    by Python's logging subsystem with a RotatingFileHandler so the log does
    not grow forever.
    """

    def __init__(
        self,
        log_path: Path,
        *,
        max_bytes: int = 5 * 1024 * 1024,   # 5 MB per file
        backup_count: int = 5,              # keep last 5 files
    ):
        self.log_path = log_path
        self._ensure_directory()

        # One logger per path to avoid duplicate handlers
        logger_name = f"bartstart.filelogger:{str(self.log_path)}"
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False

        if not self._logger.handlers:
            from logging.handlers import RotatingFileHandler

            handler = RotatingFileHandler(
                filename=str(self.log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            formatter = logging.Formatter(
                fmt="[%(asctime)s] [%(levelname)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def _ensure_directory(self):
        """Ensure log directory exists"""
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logging.getLogger("bartstart.di").warning("Cannot create log directory: %s", e)

    def info(self, message: str):
        """Log info"""
        self._logger.info(message)

    def error(self, message: str):
        """Log an error"""
        self._logger.error(message)

    def close(self):
        """Release the file handle"""
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)


# ============================================================================
# DEPENDENCY CONTAINER
# ============================================================================

@dataclass
class DependencyContainer:
    """
    Container for all application dependencies

    This is the central registry for dependency injection.
    All components receive their dependencies from this container.
    """
    config: AppConfig
    storage: 'KeyValueStorage'
    logger: ILogger
    error_handler: ErrorHandler

    @classmethod
    def create(cls, config: Optional[AppConfig] = None, *, ephemeral: bool = False) -> 'DependencyContainer':
        """
        Create dependency container with all dependencies

        Args:
            config: Application configuration (uses default if None)
            ephemeral: Keep preferences in memory only

        Returns:
            Configured dependency container
        """
        # Import here to avoid circular dependencies
        from .preferences import JsonFileStorage, MemoryStorage

        if config is None:
            config = AppConfig.create_default()

        config.paths.data_dir.mkdir(parents=True, exist_ok=True)

        logger = FileLogger(config.paths.log_path)
        logger.info(f"Application starting: {config.app_name} v{config.version}")

        if ephemeral:
            storage = MemoryStorage()
            logger.info("Preferences: in-memory (ephemeral session)")
        else:
            storage = JsonFileStorage(config.paths.preferences_path)
            logger.info(f"Preferences: {config.paths.preferences_path}")

        return cls(
            config=config,
            storage=storage,
            logger=logger,
            error_handler=ErrorHandler(logger),
        )

    def cleanup(self):
        """Cleanup resources"""
        self.logger.info("Application shutdown complete")
        close = getattr(self.logger, "close", None)
        if callable(close):
            close()
