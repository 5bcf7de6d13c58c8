"""
UI Theme: font definitions.

Colors come from the resolved Theme on every repaint; only fonts are fixed
for the lifetime of the window.
"""

import logging
import tkinter as tk
import tkinter.font as tkfont
from typing import Dict

from ..dependency_injection import UIConfig

logger = logging.getLogger("bartstart.ui.theme")


class UITheme:
    """Centralised font configuration."""

    @staticmethod
    def setup_fonts(root: tk.Tk, ui: UIConfig) -> Dict[str, tuple]:
        """Return a fonts dict.  Must be called after Tk() exists."""
        try:
            fam = set(tkfont.families(root))
        except Exception as e:
            logger.debug("Failed to enumerate font families: %s", e)
            fam = set()

        def _pick(*names: str, fallback: str = "Helvetica") -> str:
            for n in names:
                if n in fam:
                    return n
            return fallback

        clock = _pick(ui.clock_font, "Oswald", "Bahnschrift", "DejaVu Sans Condensed", "Arial Narrow")
        accent = _pick(ui.accent_font, "Dancing Script", "Segoe Script", "URW Chancery L", fallback="Times")
        body = _pick(ui.body_font, "Lato", "Segoe UI", "DejaVu Sans", "Arial")

        return {
            "CLOCK": (clock, 220, "bold"),
            "ACCENT": (accent, 72),
            "DATE": (body, 14),
            "BODY": (body, 11),
            "BODY_BOLD": (body, 11, "bold"),
            "SMALL": (body, 9),
            "SECTION": (body, 10, "bold"),
            "ICON": (body, 16),
        }
