"""
Search box redirect: engine key -> query URL, opened in the browser.
"""

import logging
import webbrowser
from typing import Callable, Dict, Optional
from urllib.parse import quote

from .models import SearchEngine
from .preferences import DEFAULT_SEARCH_ENGINE, PreferenceStore

logger = logging.getLogger("bartstart.search")

SEARCH_URLS: Dict[SearchEngine, str] = {
    SearchEngine.GOOGLE: "https://www.google.com/search?q=",
    SearchEngine.BING: "https://www.bing.com/search?q=",
    SearchEngine.DUCKDUCKGO: "https://duckduckgo.com/?q=",
    SearchEngine.STARTPAGE: "https://www.startpage.com/do/search?query=",
}

SEARCH_LABELS: Dict[SearchEngine, str] = {
    SearchEngine.GOOGLE: "Google",
    SearchEngine.BING: "Bing",
    SearchEngine.DUCKDUCKGO: "DuckDuckGo",
    SearchEngine.STARTPAGE: "Startpage",
}


def build_search_url(query: str, engine: SearchEngine) -> Optional[str]:
    """URL for *query*, or None when the query is blank.

    The raw query is encoded, surrounding whitespace included.
    """
    if not query or not query.strip():
        return None
    return SEARCH_URLS[engine] + quote(query, safe="!~*'()")


class SearchDispatcher:
    def __init__(self, store: PreferenceStore, opener: Callable[[str], object] = webbrowser.open):
        self.store = store
        self.opener = opener
        self.engine: SearchEngine = DEFAULT_SEARCH_ENGINE

    def load(self, engine: Optional[SearchEngine] = None):
        self.engine = engine if engine is not None else self.store.load_search_engine()

    def set_engine(self, engine: SearchEngine):
        self.store.save_search_engine(engine)
        self.engine = engine
        logger.info("Search engine set to %s", engine.value)

    def placeholder(self) -> str:
        return f"Search {SEARCH_LABELS[self.engine]}..."

    def submit(self, query: str) -> Optional[str]:
        url = build_search_url(query, self.engine)
        if url is None:
            return None
        logger.debug("Opening %s", url)
        self.opener(url)
        return url
