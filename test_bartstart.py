"""
Unit Tests - BartStart Core
===========================

Tests cover:
- Color classification and blending
- Theme catalog and time-of-day slots
- Theme resolution (prebuilt, custom, dangling override)
- Preference persistence and corruption recovery
- Shortcut and search handling
- Configuration loading and validation
- Error handling
"""

import json
import os
import tempfile
import unittest
from dataclasses import fields
from datetime import datetime
from pathlib import Path
from unittest.mock import Mock, patch

# Import components to test
import sys
sys.path.insert(0, str(Path(__file__).parent / "src"))

from bartstart.color import blend, is_dark, midpoint, normalize_hex, relative_luminance
from bartstart.config_loader import ConfigLoader, ConfigValidator
from bartstart.dependency_injection import (
    AppConfig,
    FeedConfig,
    NotificationConfig,
    PathConfig,
    UIConfig,
    default_data_dir,
)
from bartstart.error_handling import (
    ConfigurationError,
    ErrorHandler,
    ErrorSeverity,
    GeolocationError,
    NetworkError,
    StartPageError,
    StorageError,
    with_error_handling,
)
from bartstart.models import CustomTheme, SearchEngine, Shortcut, ThemeColors
from bartstart.preferences import (
    JsonFileStorage,
    MemoryStorage,
    PreferenceStore,
)
from bartstart.search import SearchDispatcher, build_search_url
from bartstart.shortcuts import ShortcutManager, normalize_url
from bartstart.theme_catalog import (
    DARK_PREBUILT,
    PREBUILT_GRADIENTS,
    PREBUILT_LABELS,
    PrebuiltThemeKey,
    parse_prebuilt_key,
    time_of_day,
)
from bartstart.theme_resolver import (
    CustomSource,
    FallbackSource,
    PrebuiltSource,
    resolve,
    select_source,
)


def at(hour, minute=0):
    return datetime(2024, 5, 17, hour, minute)


def custom(name, bg_start="#ffffff", bg_end="#f0f0f0", **colors):
    return CustomTheme(name=name, colors=ThemeColors(bg_start=bg_start, bg_end=bg_end, **colors))


# ============================================================================
# TEST COLOR CLASSIFIER
# ============================================================================

class TestColorClassifier(unittest.TestCase):
    """Test light/dark classification"""

    def test_black_and_white(self):
        self.assertTrue(is_dark("#000000"))
        self.assertFalse(is_dark("#ffffff"))

    def test_hash_is_optional(self):
        self.assertTrue(is_dark("1a2a6c"))
        self.assertEqual(normalize_hex("1A2A6C"), "#1a2a6c")

    def test_luminance_threshold(self):
        """Mid grey sits just above the 0.5 threshold"""
        self.assertAlmostEqual(relative_luminance("#808080"), 128 / 255)
        self.assertFalse(is_dark("#808080"))
        self.assertTrue(is_dark("#7f7f7f"))

    def test_green_weighs_more_than_blue(self):
        self.assertFalse(is_dark("#00ff00"))
        self.assertTrue(is_dark("#0000ff"))

    def test_malformed_input_is_dark(self):
        for value in ("", "#fff", "#12345", "#gggggg", "not a color", None, 123):
            self.assertTrue(is_dark(value), value)

    def test_blend_extremes(self):
        self.assertEqual(blend("#ffffff", "#000000", 1.0), "#ffffff")
        self.assertEqual(blend("#ffffff", "#000000", 0.0), "#000000")
        self.assertEqual(midpoint("#000000", "#fefefe"), "#7f7f7f")


# ============================================================================
# TEST THEME CATALOG
# ============================================================================

class TestThemeCatalog(unittest.TestCase):
    """Test prebuilt themes and time-of-day slots"""

    def test_eleven_prebuilt_themes(self):
        self.assertEqual(len(PrebuiltThemeKey), 11)
        self.assertEqual(set(PREBUILT_GRADIENTS), set(PrebuiltThemeKey))
        self.assertEqual([key for key, _ in PREBUILT_LABELS], list(PrebuiltThemeKey))

    def test_dark_subset(self):
        self.assertEqual(
            {key.value for key in DARK_PREBUILT},
            {"night", "stormy", "midnight", "koinobori", "sumie"},
        )

    def test_time_of_day_boundaries(self):
        self.assertEqual(time_of_day(at(4, 59)), PrebuiltThemeKey.NIGHT)
        self.assertEqual(time_of_day(at(5, 0)), PrebuiltThemeKey.MORNING)
        self.assertEqual(time_of_day(at(11, 59)), PrebuiltThemeKey.MORNING)
        self.assertEqual(time_of_day(at(12, 0)), PrebuiltThemeKey.DAY)
        self.assertEqual(time_of_day(at(16, 59)), PrebuiltThemeKey.DAY)
        self.assertEqual(time_of_day(at(17, 0)), PrebuiltThemeKey.NIGHT)
        self.assertEqual(time_of_day(at(0, 0)), PrebuiltThemeKey.NIGHT)

    def test_parse_prebuilt_key(self):
        self.assertEqual(parse_prebuilt_key("sakura"), PrebuiltThemeKey.SAKURA)
        self.assertIsNone(parse_prebuilt_key("Sakura"))
        self.assertIsNone(parse_prebuilt_key(None))


# ============================================================================
# TEST THEME RESOLVER
# ============================================================================

class TestThemeResolver(unittest.TestCase):
    """Test theme resolution"""

    def test_first_run_afternoon_is_day(self):
        theme = resolve(at(14), None, [])

        self.assertEqual(theme.name, "day")
        self.assertEqual(theme.source, "prebuilt")
        self.assertFalse(theme.is_dark)
        self.assertEqual((theme.bg_start, theme.bg_end), PREBUILT_GRADIENTS[PrebuiltThemeKey.DAY])

    def test_override_beats_clock(self):
        theme = resolve(at(14), "night", [])

        self.assertEqual(theme.name, "night")
        self.assertTrue(theme.is_dark)

    def test_custom_theme_by_name(self):
        mine = custom("Mine", clock_accent="#123456")
        source = select_source(at(9), "Mine", [mine])
        theme = resolve(at(9), "Mine", [mine])

        self.assertIsInstance(source, CustomSource)
        self.assertEqual(theme.source, "custom")
        self.assertFalse(theme.is_dark)
        self.assertEqual(theme.bg_start, "#ffffff")
        self.assertEqual(theme.clock_accent, "#123456")

    def test_custom_darkness_is_or_of_both_stops(self):
        theme = resolve(at(9), "Half", [custom("Half", bg_start="#ffffff", bg_end="#000000")])
        self.assertTrue(theme.is_dark)

    def test_custom_name_shadows_prebuilt_key(self):
        source = select_source(at(9), "night", [custom("night")])
        self.assertIsInstance(source, CustomSource)

    def test_prebuilt_source(self):
        self.assertEqual(select_source(at(9), None, []), PrebuiltSource(PrebuiltThemeKey.MORNING))

    def test_dangling_override_falls_back_to_time_of_day(self):
        source = select_source(at(8), "Deleted Theme", [])
        theme = resolve(at(8), "Deleted Theme", [])

        self.assertIsInstance(source, FallbackSource)
        self.assertEqual(source.key, PrebuiltThemeKey.MORNING)
        self.assertEqual(theme.name, "Deleted Theme")
        self.assertEqual(theme.source, "fallback")
        self.assertEqual((theme.bg_start, theme.bg_end), PREBUILT_GRADIENTS[PrebuiltThemeKey.MORNING])

    def test_malformed_custom_colors_still_resolve(self):
        broken = custom("Broken", bg_start="nope", bg_end="???", clock_accent="bad")
        theme = resolve(at(9), "Broken", [broken])

        self.assertTrue(theme.is_dark)
        self.assertEqual(theme.bg_start, PREBUILT_GRADIENTS[PrebuiltThemeKey.NIGHT][0])
        self.assertEqual(normalize_hex(theme.clock_accent), theme.clock_accent)

    def test_every_role_is_a_concrete_color(self):
        for override in [None, "night", "sakura", "Mine", "missing"]:
            theme = resolve(at(20), override, [custom("Mine")])
            for f in fields(theme):
                value = getattr(theme, f.name)
                if f.name in ("name", "source", "is_dark"):
                    continue
                self.assertEqual(normalize_hex(value), value, f"{override}: {f.name}")

    def test_contrast_direction(self):
        dark = resolve(at(9), "midnight", [])
        light = resolve(at(9), "sakura", [])

        self.assertGreater(relative_luminance(dark.modal_text), relative_luminance(dark.modal_bg))
        self.assertLess(relative_luminance(light.modal_text), relative_luminance(light.modal_bg))
        self.assertGreater(relative_luminance(dark.input_text), relative_luminance(dark.input_bg))

    def test_resolution_is_deterministic(self):
        themes = [custom("Mine")]
        self.assertEqual(resolve(at(10), "Mine", themes), resolve(at(10), "Mine", themes))


# ============================================================================
# TEST PREFERENCE STORE
# ============================================================================

class TestPreferenceStore(unittest.TestCase):
    """Test preference slots over in-memory storage"""

    def setUp(self):
        self.storage = MemoryStorage()
        self.store = PreferenceStore(self.storage)

    def test_first_run_defaults(self):
        prefs = self.store.load_all()

        self.assertIsNone(prefs.theme_override)
        self.assertEqual(prefs.custom_themes, [])
        self.assertEqual(prefs.shortcuts, [])
        self.assertEqual(prefs.search_engine, SearchEngine.GOOGLE)
        self.assertTrue(prefs.show_stats)

    def test_corrupt_lists_fall_back_to_empty(self):
        self.storage.set("customThemes", "{not json")
        self.storage.set("shortcuts", json.dumps({"name": "x"}))

        self.assertEqual(self.store.load_custom_themes(), [])
        self.assertEqual(self.store.load_shortcuts(), [])

    def test_malformed_entries_are_skipped(self):
        self.storage.set("shortcuts", json.dumps([
            {"name": "Mail", "url": "https://mail.example.com"},
            {"name": 3},
            "junk",
        ]))

        self.assertEqual(self.store.load_shortcuts(), [Shortcut("Mail", "https://mail.example.com")])

    def test_stats_flag_only_false_hides(self):
        for raw, expected in [("false", False), ("true", True), ("no", True), (None, True)]:
            if raw is None:
                self.storage.remove("showStats")
            else:
                self.storage.set("showStats", raw)
            self.assertEqual(self.store.load_show_stats(), expected, raw)

    def test_unknown_search_engine_defaults_to_google(self):
        self.storage.set("defaultSearchEngine", "altavista")
        self.assertEqual(self.store.load_search_engine(), SearchEngine.GOOGLE)

    def test_clearing_override_removes_key(self):
        self.store.save_theme_override("sakura")
        self.assertEqual(self.storage.get("themeOverride"), "sakura")

        self.store.save_theme_override(None)
        self.assertNotIn("themeOverride", self.storage.snapshot())

    def test_custom_themes_use_stored_key_names(self):
        self.store.save_custom_themes([CustomTheme("Koi", ThemeColors())])
        stored = json.loads(self.storage.get("customThemes"))

        self.assertEqual(stored[0]["name"], "Koi")
        self.assertEqual(stored[0]["colors"]["bgStart"], "#1a2a6c")
        self.assertEqual(self.store.load_custom_themes(), [CustomTheme("Koi", ThemeColors())])

    def test_storage_failure_raises_storage_error(self):
        storage = Mock()
        storage.set.side_effect = OSError("disk full")
        store = PreferenceStore(storage)

        with self.assertRaises(StorageError):
            store.save_show_stats(False)


class TestJsonFileStorage(unittest.TestCase):
    """Test the on-disk profile file"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "profile" / "preferences.json"

    def tearDown(self):
        self.tmp.cleanup()

    def test_values_survive_reopen(self):
        JsonFileStorage(self.path).set("defaultSearchEngine", "bing")

        self.assertEqual(JsonFileStorage(self.path).get("defaultSearchEngine"), "bing")
        self.assertEqual(list(self.path.parent.glob("*.tmp")), [])

    def test_corrupt_file_reads_as_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{{{", encoding="utf-8")

        storage = JsonFileStorage(self.path)
        self.assertIsNone(storage.get("shortcuts"))

    def test_non_object_file_reads_as_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[1, 2]", encoding="utf-8")

        self.assertIsNone(JsonFileStorage(self.path).get("0"))

    def test_unwritable_location_raises_storage_error(self):
        blocker = Path(self.tmp.name) / "blocker"
        blocker.write_text("", encoding="utf-8")
        storage = JsonFileStorage(blocker / "preferences.json")

        with self.assertRaises(StorageError):
            storage.set("showStats", "false")

    def test_failed_write_is_not_saved_later(self):
        storage = JsonFileStorage(self.path)
        storage.set("defaultSearchEngine", "bing")

        with patch("bartstart.preferences.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(StorageError):
                storage.set("shortcuts", '[{"name": "Ghost", "url": "https://ghost.example"}]')
            with self.assertRaises(StorageError):
                storage.remove("defaultSearchEngine")

        self.assertIsNone(storage.get("shortcuts"))
        self.assertEqual(storage.get("defaultSearchEngine"), "bing")

        storage.set("showStats", "false")
        on_disk = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(on_disk, {"defaultSearchEngine": "bing", "showStats": "false"})
        self.assertEqual(list(self.path.parent.glob(".prefs-*")), [])


# ============================================================================
# TEST SHORTCUTS
# ============================================================================

class TestShortcutManager(unittest.TestCase):
    """Test shortcut CRUD"""

    def setUp(self):
        self.storage = MemoryStorage()
        self.manager = ShortcutManager(PreferenceStore(self.storage))
        self.manager.load()

    def stored(self):
        return json.loads(self.storage.get("shortcuts"))

    def test_normalize_url(self):
        self.assertEqual(normalize_url("example.com"), "https://example.com")
        self.assertEqual(normalize_url("  http://example.com "), "http://example.com")
        self.assertEqual(normalize_url("HTTPS://Example.com"), "HTTPS://Example.com")
        self.assertEqual(normalize_url("ftp://files.example.com"), "https://ftp://files.example.com")

    def test_add_trims_and_persists(self):
        self.assertTrue(self.manager.add("  Mail ", " mail.example.com "))

        self.assertEqual(self.manager.shortcuts, (Shortcut("Mail", "https://mail.example.com"),))
        self.assertEqual(self.stored(), [{"name": "Mail", "url": "https://mail.example.com"}])

    def test_blank_fields_are_rejected(self):
        self.assertFalse(self.manager.add("   ", "example.com"))
        self.assertFalse(self.manager.add("Example", "  "))

        self.assertEqual(self.manager.shortcuts, ())
        self.assertIsNone(self.storage.get("shortcuts"))

    def test_delete_by_position_with_duplicates(self):
        self.manager.add("Docs", "docs.example.com")
        self.manager.add("Docs", "docs.example.org")

        self.assertTrue(self.manager.delete(0))
        self.assertEqual(self.stored(), [{"name": "Docs", "url": "https://docs.example.org"}])

    def test_out_of_range_delete_still_persists(self):
        self.manager.add("A", "a.example.com")
        self.storage.remove("shortcuts")

        self.assertFalse(self.manager.delete(5))
        self.assertFalse(self.manager.delete(-1))
        self.assertEqual(self.stored(), [{"name": "A", "url": "https://a.example.com"}])


# ============================================================================
# TEST SEARCH
# ============================================================================

class TestSearch(unittest.TestCase):
    """Test search URL building and dispatch"""

    def test_blank_query_is_ignored(self):
        self.assertIsNone(build_search_url("", SearchEngine.GOOGLE))
        self.assertIsNone(build_search_url("   ", SearchEngine.BING))

    def test_engine_templates(self):
        self.assertEqual(build_search_url("a b", SearchEngine.GOOGLE), "https://www.google.com/search?q=a%20b")
        self.assertEqual(build_search_url("c++&d", SearchEngine.DUCKDUCKGO), "https://duckduckgo.com/?q=c%2B%2B%26d")
        self.assertEqual(build_search_url("x/y", SearchEngine.STARTPAGE), "https://www.startpage.com/do/search?query=x%2Fy")

    def test_raw_query_is_encoded(self):
        self.assertEqual(build_search_url(" cats ", SearchEngine.BING), "https://www.bing.com/search?q=%20cats%20")

    def test_unreserved_punctuation_is_kept(self):
        self.assertEqual(
            build_search_url("what's (this)? *wow*! ~x", SearchEngine.GOOGLE),
            "https://www.google.com/search?q=what's%20(this)%3F%20*wow*!%20~x",
        )

    def test_dispatcher_opens_url(self):
        storage = MemoryStorage()
        opener = Mock()
        dispatcher = SearchDispatcher(PreferenceStore(storage), opener=opener)
        dispatcher.load()

        self.assertEqual(dispatcher.placeholder(), "Search Google...")
        self.assertIsNone(dispatcher.submit("  "))
        opener.assert_not_called()

        dispatcher.set_engine(SearchEngine.BING)
        url = dispatcher.submit("weather")

        opener.assert_called_once_with("https://www.bing.com/search?q=weather")
        self.assertEqual(url, "https://www.bing.com/search?q=weather")
        self.assertEqual(storage.get("defaultSearchEngine"), "bing")
        self.assertEqual(dispatcher.placeholder(), "Search Bing...")


# ============================================================================
# TEST CONFIGURATION
# ============================================================================

class TestConfiguration(unittest.TestCase):
    """Test configuration classes and loader"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults(self):
        config = AppConfig.create_default()

        self.assertEqual(config.app_name, "BartStart")
        self.assertIsInstance(config.paths, PathConfig)
        self.assertIsInstance(config.feeds, FeedConfig)
        self.assertIsInstance(config.notification, NotificationConfig)
        self.assertIsInstance(config.ui, UIConfig)
        self.assertEqual(config.feeds.clock_tick_ms, 1000)
        self.assertEqual(config.feeds.stats_interval_ms, 2000)
        self.assertEqual(config.notification.dismiss_ms, 4000)
        self.assertEqual((config.feeds.fallback_latitude, config.feeds.fallback_longitude), (21.1463, 79.0849))

    def test_config_to_dict(self):
        config_dict = AppConfig.create_default().to_dict()

        self.assertEqual(config_dict["APP_NAME"], "BartStart")
        self.assertEqual(config_dict["TOAST_DISMISS_MS"], 4000)

    def test_home_override(self):
        with patch.dict(os.environ, {"BARTSTART_HOME": str(self.dir)}):
            self.assertEqual(default_data_dir(), self.dir)
            self.assertEqual(PathConfig.from_environment().preferences_path, self.dir / "preferences.json")

    def test_partial_yaml_keeps_defaults(self):
        path = self.dir / "config.yaml"
        path.write_text(
            "feeds:\n"
            "  geolocation: static\n"
            "  static_latitude: 52.37\n"
            "  static_longitude: 4.89\n"
            "notification:\n"
            "  dismiss_ms: 6000\n",
            encoding="utf-8",
        )

        config = ConfigLoader.load_from_file(path)

        self.assertEqual(config.feeds.geolocation, "static")
        self.assertEqual(config.feeds.static_latitude, 52.37)
        self.assertEqual(config.notification.dismiss_ms, 6000)
        self.assertEqual(config.feeds.clock_tick_ms, 1000)
        self.assertEqual(ConfigValidator.validate(config), [])

    def test_json_save_and_load(self):
        path = self.dir / "config.json"
        config = AppConfig.create_default()
        config.ui.window_width = 1024
        ConfigLoader.save_to_file(config, path)

        self.assertEqual(ConfigLoader.load_from_file(path).ui.window_width, 1024)

    def test_bad_files_raise_configuration_error(self):
        bad_yaml = self.dir / "bad.yaml"
        bad_yaml.write_text("feeds: [unclosed\n", encoding="utf-8")
        top_level_list = self.dir / "list.yaml"
        top_level_list.write_text("- 1\n- 2\n", encoding="utf-8")
        wrong_suffix = self.dir / "config.txt"
        wrong_suffix.write_text("", encoding="utf-8")

        for path in (bad_yaml, top_level_list, wrong_suffix, self.dir / "missing.yaml"):
            with self.assertRaises(ConfigurationError, msg=str(path)):
                ConfigLoader.load_from_file(path)

    def test_find_config_file(self):
        self.assertIsNone(ConfigLoader.find_config_file([self.dir]))

        ConfigLoader.create_default_config_file(self.dir / "config.yml")
        self.assertEqual(ConfigLoader.find_config_file([self.dir]), self.dir / "config.yml")

    def test_validator_reports_problems(self):
        config = AppConfig.create_default()
        config.feeds.geolocation = "gps"
        config.feeds.fallback_latitude = 123.0
        config.notification.dismiss_ms = 0

        errors = ConfigValidator.validate(config)
        self.assertEqual(len(errors), 3)

    def test_static_geolocation_needs_coordinates(self):
        config = AppConfig.create_default()
        config.feeds.geolocation = "static"

        self.assertEqual(
            ConfigValidator.validate(config),
            ["static geolocation needs static_latitude and static_longitude"],
        )


# ============================================================================
# TEST ERROR HANDLING
# ============================================================================

class TestErrorHandling(unittest.TestCase):
    """Test error handling system"""

    def setUp(self):
        self.mock_logger = Mock()
        self.error_handler = ErrorHandler(self.mock_logger)

    def test_start_page_error_creation(self):
        error = StartPageError(
            message="Test error",
            severity=ErrorSeverity.ERROR,
            user_message="User friendly message",
            context={"key": "value"}
        )

        self.assertEqual(error.message, "Test error")
        self.assertEqual(error.user_message, "User friendly message")
        self.assertEqual(error.to_dict()["type"], "StartPageError")

    def test_severities(self):
        self.assertEqual(ConfigurationError("x").severity, ErrorSeverity.CRITICAL)
        self.assertEqual(StorageError("x").severity, ErrorSeverity.ERROR)
        self.assertEqual(NetworkError("x").severity, ErrorSeverity.WARNING)
        self.assertEqual(GeolocationError("x").user_message, "Location access denied. Using default.")

    def test_error_handler_logs_by_severity(self):
        self.error_handler.handle_error(NetworkError("offline"), notify_user=False)
        self.mock_logger.info.assert_called()

        self.error_handler.handle_error(StorageError("disk full"), notify_user=False)
        self.mock_logger.error.assert_called()

    def test_on_error_receives_user_facing_error(self):
        seen = Mock()
        self.error_handler.on_error = seen

        self.error_handler.handle_error(StorageError("disk full"))

        seen.assert_called_once()
        self.assertEqual(seen.call_args[0][0].user_message, "Could not save your preferences.")

    def test_critical_errors_use_critical_callback(self):
        on_error = Mock()
        on_critical = Mock()
        self.error_handler.on_error = on_error
        self.error_handler.on_critical_error = on_critical

        self.error_handler.handle_error(ConfigurationError("bad config"))

        on_critical.assert_called_once()
        on_error.assert_not_called()

    def test_history_is_capped(self):
        self.error_handler.max_history = 3
        for i in range(5):
            self.error_handler.handle_error(StartPageError(f"Error {i}"), notify_user=False)

        history = self.error_handler.get_recent_errors(count=10)
        self.assertEqual([e.message for e in history], ["Error 2", "Error 3", "Error 4"])

    def test_with_error_handling_returns_default(self):
        handler = self.error_handler

        class Component:
            error_handler = handler

            @with_error_handling("Test", "operation", default_return="default")
            def failing_method(self):
                raise RuntimeError("Intentional failure")

        self.assertEqual(Component().failing_method(), "default")
        self.assertEqual(len(handler.get_recent_errors()), 1)


# ============================================================================
# RUN TESTS
# ============================================================================

if __name__ == "__main__":
    unittest.main(verbosity=2)
