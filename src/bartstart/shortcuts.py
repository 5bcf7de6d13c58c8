"""
Shortcut list management: ordered, duplicates allowed, addressed by position.
"""

import logging
import re
from typing import Iterable, List, Optional, Tuple

from .models import Shortcut
from .preferences import PreferenceStore

logger = logging.getLogger("bartstart.shortcuts")

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_url(url: str) -> str:
    """Trim and make sure the url carries an explicit scheme."""
    url = url.strip()
    if not _SCHEME_RE.match(url):
        url = "https://" + url
    return url


class ShortcutManager:
    """CRUD over the persisted shortcut sequence"""

    def __init__(self, store: PreferenceStore):
        self.store = store
        self._items: List[Shortcut] = []

    def load(self, shortcuts: Optional[Iterable[Shortcut]] = None):
        """Read the stored list, or adopt one already loaded."""
        self._items = list(shortcuts) if shortcuts is not None else self.store.load_shortcuts()

    @property
    def shortcuts(self) -> Tuple[Shortcut, ...]:
        return tuple(self._items)

    def add(self, name: str, url: str) -> bool:
        """Append a shortcut. Returns False (and saves nothing) on empty input."""
        name = (name or "").strip()
        url = (url or "").strip()
        if not name or not url:
            return False

        updated = self._items + [Shortcut(name=name, url=normalize_url(url))]
        self.store.save_shortcuts(updated)
        self._items = updated
        logger.info("Added shortcut %s -> %s", name, updated[-1].url)
        return True

    def delete(self, index: int) -> bool:
        """Remove by position. Returns True when something was removed.

        An unknown position leaves the list as is but still persists it.
        """
        updated = [s for i, s in enumerate(self._items) if i != index]
        self.store.save_shortcuts(updated)
        removed = len(updated) != len(self._items)
        self._items = updated
        if removed:
            logger.info("Deleted shortcut at position %d", index)
        return removed
