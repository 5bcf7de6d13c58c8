"""
Preference Store
================

Durable key/value persistence for the five user preference slots:

    themeOverride        scalar, absent means automatic
    customThemes         JSON list of {name, colors}
    shortcuts            JSON list of {name, url}
    defaultSearchEngine  google | bing | duckduckgo | startpage
    showStats            "true" / "false"

Each slot loads independently and is rewritten in full on save. Loading never
raises: anything unreadable falls back to the slot default and is logged.
"""

# ============================================================================
# IMPORTS
# ============================================================================

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .error_handling import StorageError
from .models import CustomTheme, SearchEngine, Shortcut

logger = logging.getLogger("bartstart.preferences")


# ============================================================================
# STORAGE BACKENDS
# ============================================================================

class KeyValueStorage(Protocol):
    """String key/value persistence scoped to one profile"""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStorage:
    """Dict-backed storage for tests and --ephemeral runs"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class JsonFileStorage:
    """
    One JSON object per profile file.

    The file is read once on construction; every write rewrites the whole
    file through a temp file and os.replace so a crash never leaves half a
    document behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Dict[str, str] = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to load preferences file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Preferences file %s is not a JSON object; ignoring", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]):
        """Persist *data*; adopt it in memory only once it is on disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".prefs-", suffix=".tmp", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                try:
                    os.unlink(tmp)
                except OSError:
                    pass
                raise
        except OSError as e:
            raise StorageError(
                f"Failed to write preferences: {e}",
                context={"path": str(self.path)}
            ) from e
        self._data = data

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        data = dict(self._data)
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        if key in self._data:
            data = dict(self._data)
            del data[key]
            self._write(data)


# ============================================================================
# PREFERENCE SLOTS
# ============================================================================

KEY_THEME_OVERRIDE = "themeOverride"
KEY_CUSTOM_THEMES = "customThemes"
KEY_SHORTCUTS = "shortcuts"
KEY_SEARCH_ENGINE = "defaultSearchEngine"
KEY_SHOW_STATS = "showStats"

DEFAULT_SEARCH_ENGINE = SearchEngine.GOOGLE


@dataclass
class Preferences:
    """Everything the session hydrates from at startup"""
    theme_override: Optional[str] = None
    custom_themes: List[CustomTheme] = field(default_factory=list)
    shortcuts: List[Shortcut] = field(default_factory=list)
    search_engine: SearchEngine = DEFAULT_SEARCH_ENGINE
    show_stats: bool = True


class PreferenceStore:
    """Typed load/save over a KeyValueStorage"""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def _read_json_list(self, key: str) -> list:
        raw = self.storage.get(key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Stored %s is not valid JSON (%s); using default", key, e)
            return []
        if not isinstance(data, list):
            logger.warning("Stored %s is not a list; using default", key)
            return []
        return data

    def _write(self, key: str, value: str):
        try:
            self.storage.set(key, value)
        except StorageError:
            raise
        except OSError as e:
            raise StorageError(f"Failed to save {key}: {e}", context={"key": key}) from e

    # --- theme override ------------------------------------------------------

    def load_theme_override(self) -> Optional[str]:
        value = self.storage.get(KEY_THEME_OVERRIDE)
        return value if value else None

    def save_theme_override(self, value: Optional[str]):
        if value is None:
            try:
                self.storage.remove(KEY_THEME_OVERRIDE)
            except OSError as e:
                raise StorageError(f"Failed to clear {KEY_THEME_OVERRIDE}: {e}") from e
        else:
            self._write(KEY_THEME_OVERRIDE, value)

    # --- custom themes -------------------------------------------------------

    def load_custom_themes(self) -> List[CustomTheme]:
        themes: List[CustomTheme] = []
        for entry in self._read_json_list(KEY_CUSTOM_THEMES):
            try:
                themes.append(CustomTheme.from_dict(entry))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed custom theme %r: %s", entry, e)
        return themes

    def save_custom_themes(self, themes: List[CustomTheme]):
        self._write(KEY_CUSTOM_THEMES, json.dumps([t.to_dict() for t in themes]))

    # --- shortcuts -----------------------------------------------------------

    def load_shortcuts(self) -> List[Shortcut]:
        shortcuts: List[Shortcut] = []
        for entry in self._read_json_list(KEY_SHORTCUTS):
            try:
                shortcuts.append(Shortcut.from_dict(entry))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed shortcut %r: %s", entry, e)
        return shortcuts

    def save_shortcuts(self, shortcuts: List[Shortcut]):
        self._write(KEY_SHORTCUTS, json.dumps([s.to_dict() for s in shortcuts]))

    # --- search engine -------------------------------------------------------

    def load_search_engine(self) -> SearchEngine:
        raw = self.storage.get(KEY_SEARCH_ENGINE)
        if raw is None:
            return DEFAULT_SEARCH_ENGINE
        try:
            return SearchEngine(raw)
        except ValueError:
            logger.warning("Unknown search engine %r; using %s", raw, DEFAULT_SEARCH_ENGINE.value)
            return DEFAULT_SEARCH_ENGINE

    def save_search_engine(self, engine: SearchEngine):
        self._write(KEY_SEARCH_ENGINE, engine.value)

    # --- stats visibility ----------------------------------------------------

    def load_show_stats(self) -> bool:
        # Only an explicit "false" hides the stats
        return self.storage.get(KEY_SHOW_STATS) != "false"

    def save_show_stats(self, visible: bool):
        self._write(KEY_SHOW_STATS, "true" if visible else "false")

    # --- all slots -----------------------------------------------------------

    def load_all(self) -> Preferences:
        prefs = Preferences(
            theme_override=self.load_theme_override(),
            custom_themes=self.load_custom_themes(),
            shortcuts=self.load_shortcuts(),
            search_engine=self.load_search_engine(),
            show_stats=self.load_show_stats(),
        )
        logger.info(
            "Loaded preferences: override=%s, %d custom theme(s), %d shortcut(s), engine=%s, stats=%s",
            prefs.theme_override, len(prefs.custom_themes), len(prefs.shortcuts),
            prefs.search_engine.value, prefs.show_stats,
        )
        return prefs
