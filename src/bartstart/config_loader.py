"""
Configuration File Loader
==========================

Load configuration from external YAML or JSON files.

A config file is optional. Every key falls back to the AppConfig defaults,
so a file only needs the values it changes, e.g.::

    feeds:
      geolocation: static
      static_latitude: 52.37
      static_longitude: 4.89
    notification:
      dismiss_ms: 6000
"""

import yaml
import json
from pathlib import Path
from typing import Optional, Dict, Any

from .dependency_injection import (
    AppConfig,
    PathConfig,
    FeedConfig,
    NotificationConfig,
    UIConfig,
    GEOLOCATION_MODES,
)
from .error_handling import ConfigurationError


# ============================================================================
# CLASSES
# ============================================================================

class ConfigLoader:
    """Load and validate configuration from files"""

    SUPPORTED_FORMATS = ('.yaml', '.yml', '.json')

    @classmethod
    def load_from_file(cls, filepath: Path) -> AppConfig:
        """
        Load configuration from file

        Args:
            filepath: Path to config file (.yaml, .yml, or .json)

        Returns:
            AppConfig instance

        Raises:
            ConfigurationError: If file not found or invalid
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise ConfigurationError(
                f"Configuration file not found: {filepath}",
                context={"filepath": str(filepath)}
            )

        if filepath.suffix not in cls.SUPPORTED_FORMATS:
            raise ConfigurationError(
                f"Unsupported config format: {filepath.suffix}. "
                f"Supported: {', '.join(cls.SUPPORTED_FORMATS)}",
                context={"filepath": str(filepath), "suffix": filepath.suffix}
            )

        try:
            with filepath.open('r', encoding='utf-8') as f:
                if filepath.suffix == '.json':
                    data = json.load(f)
                else:  # YAML
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to parse config file: {e}",
                context={"filepath": str(filepath), "error": str(e)}
            )

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a mapping at the top level",
                context={"filepath": str(filepath)}
            )

        return cls._dict_to_config(data)

    @classmethod
    def _dict_to_config(cls, data: Dict[str, Any]) -> AppConfig:
        """Convert dictionary to AppConfig"""
        try:
            defaults = AppConfig.create_default()

            app_section = data.get('application') or {}
            paths_section = data.get('paths') or {}
            feeds_section = data.get('feeds') or {}
            notification_section = data.get('notification') or {}
            ui_section = data.get('ui') or {}

            data_dir = Path(paths_section.get('data_dir', defaults.paths.data_dir)).expanduser()
            paths = PathConfig(
                data_dir=data_dir,
                preferences_path=Path(
                    paths_section.get('preferences_path', data_dir / "preferences.json")
                ).expanduser(),
                log_path=Path(paths_section.get('log_path', data_dir / "bartstart.log")).expanduser(),
            )

            fd = FeedConfig()
            feeds = FeedConfig(
                clock_tick_ms=int(feeds_section.get('clock_tick_ms', fd.clock_tick_ms)),
                stats_interval_ms=int(feeds_section.get('stats_interval_ms', fd.stats_interval_ms)),
                weather_endpoint=str(feeds_section.get('weather_endpoint', fd.weather_endpoint)),
                weather_timeout_s=float(feeds_section.get('weather_timeout_s', fd.weather_timeout_s)),
                fallback_latitude=float(feeds_section.get('fallback_latitude', fd.fallback_latitude)),
                fallback_longitude=float(feeds_section.get('fallback_longitude', fd.fallback_longitude)),
                geolocation=str(feeds_section.get('geolocation', fd.geolocation)).lower(),
                geolocation_endpoint=str(feeds_section.get('geolocation_endpoint', fd.geolocation_endpoint)),
                static_latitude=_optional_float(feeds_section.get('static_latitude')),
                static_longitude=_optional_float(feeds_section.get('static_longitude')),
            )

            notification = NotificationConfig(
                dismiss_ms=int(notification_section.get('dismiss_ms', NotificationConfig().dismiss_ms)),
            )

            ud = UIConfig()
            ui = UIConfig(
                window_width=int(ui_section.get('window_width', ud.window_width)),
                window_height=int(ui_section.get('window_height', ud.window_height)),
                fullscreen=bool(ui_section.get('fullscreen', ud.fullscreen)),
                clock_font=str(ui_section.get('clock_font', ud.clock_font)),
                accent_font=str(ui_section.get('accent_font', ud.accent_font)),
                body_font=str(ui_section.get('body_font', ud.body_font)),
            )

            return AppConfig(
                app_name=app_section.get('name', defaults.app_name),
                version=app_section.get('version', defaults.version),
                paths=paths,
                feeds=feeds,
                notification=notification,
                ui=ui
            )

        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(
                f"Failed to convert config data: {e}",
                context={"error": str(e)}
            )

    @classmethod
    def save_to_file(cls, config: AppConfig, filepath: Path):
        """
        Save configuration to file

        Args:
            config: AppConfig to save
            filepath: Path to save to (.yaml or .json)
        """
        filepath = Path(filepath)
        data = cls._config_to_dict(config)

        filepath.parent.mkdir(parents=True, exist_ok=True)

        try:
            with filepath.open('w', encoding='utf-8') as f:
                if filepath.suffix == '.json':
                    json.dump(data, f, indent=2)
                else:  # YAML
                    yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigurationError(
                f"Failed to save config file: {e}",
                context={"filepath": str(filepath), "error": str(e)}
            )

    @classmethod
    def _config_to_dict(cls, config: AppConfig) -> Dict[str, Any]:
        """Convert AppConfig to dictionary"""
        return {
            'application': {
                'name': config.app_name,
                'version': config.version
            },
            'paths': {
                'data_dir': str(config.paths.data_dir),
                'preferences_path': str(config.paths.preferences_path),
                'log_path': str(config.paths.log_path),
            },
            'feeds': {
                'clock_tick_ms': config.feeds.clock_tick_ms,
                'stats_interval_ms': config.feeds.stats_interval_ms,
                'weather_endpoint': config.feeds.weather_endpoint,
                'weather_timeout_s': config.feeds.weather_timeout_s,
                'fallback_latitude': config.feeds.fallback_latitude,
                'fallback_longitude': config.feeds.fallback_longitude,
                'geolocation': config.feeds.geolocation,
                'geolocation_endpoint': config.feeds.geolocation_endpoint,
                'static_latitude': config.feeds.static_latitude,
                'static_longitude': config.feeds.static_longitude,
            },
            'notification': {
                'dismiss_ms': config.notification.dismiss_ms,
            },
            'ui': {
                'window_width': config.ui.window_width,
                'window_height': config.ui.window_height,
                'fullscreen': config.ui.fullscreen,
                'clock_font': config.ui.clock_font,
                'accent_font': config.ui.accent_font,
                'body_font': config.ui.body_font,
            }
        }

    @classmethod
    def find_config_file(cls, search_paths: list[Path]) -> Optional[Path]:
        """
        Search for config file in multiple locations

        Args:
            search_paths: List of paths to search

        Returns:
            Path to first config file found, or None
        """
        for search_path in search_paths:
            for ext in cls.SUPPORTED_FORMATS:
                config_file = Path(search_path) / f"config{ext}"
                if config_file.exists():
                    return config_file

        return None

    @classmethod
    def create_default_config_file(cls, filepath: Path):
        """
        Create a default configuration file

        Args:
            filepath: Where to create the file
        """
        cls.save_to_file(AppConfig.create_default(), filepath)


class ConfigValidator:
    """Validate configuration values"""

    @staticmethod
    def validate(config: AppConfig) -> list[str]:
        """
        Validate configuration

        Args:
            config: Configuration to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        feeds = config.feeds

        if feeds.clock_tick_ms <= 0:
            errors.append("clock_tick_ms must be positive")

        if feeds.stats_interval_ms <= 0:
            errors.append("stats_interval_ms must be positive")

        if feeds.weather_timeout_s <= 0:
            errors.append("weather_timeout_s must be positive")

        if not -90.0 <= feeds.fallback_latitude <= 90.0:
            errors.append("fallback_latitude must be within [-90, 90]")

        if not -180.0 <= feeds.fallback_longitude <= 180.0:
            errors.append("fallback_longitude must be within [-180, 180]")

        if feeds.geolocation not in GEOLOCATION_MODES:
            errors.append(f"geolocation must be one of {', '.join(GEOLOCATION_MODES)}")

        if feeds.geolocation == "static" and (feeds.static_latitude is None or feeds.static_longitude is None):
            errors.append("static geolocation needs static_latitude and static_longitude")

        if config.notification.dismiss_ms <= 0:
            errors.append("dismiss_ms must be positive")

        if config.ui.window_width <= 0 or config.ui.window_height <= 0:
            errors.append("window size must be positive")

        return errors


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)
