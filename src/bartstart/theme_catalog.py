"""
Theme catalog: the prebuilt gradients and the time-of-day slots.

This module only holds static theme data. Resolution (override, custom
themes, role expansion) lives in theme_resolver.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


class PrebuiltThemeKey(Enum):
    """Fixed theme slots: three time-of-day slots plus eight moods"""
    MORNING = "morning"
    DAY = "day"
    NIGHT = "night"
    STORMY = "stormy"
    DAWN = "dawn"
    SUNSET = "sunset"
    MIDNIGHT = "midnight"
    SAKURA = "sakura"
    MATCHA = "matcha"
    KOINOBORI = "koinobori"
    SUMIE = "sumie"


# (bg_start, bg_end), top to bottom
PREBUILT_GRADIENTS: Dict[PrebuiltThemeKey, Tuple[str, str]] = {
    PrebuiltThemeKey.MORNING: ("#f3d6a2", "#a7c3d1"),
    PrebuiltThemeKey.DAY: ("#dcd6c6", "#6b94a3"),
    PrebuiltThemeKey.NIGHT: ("#0c246b", "#05102c"),
    PrebuiltThemeKey.STORMY: ("#2c3e50", "#34495e"),
    PrebuiltThemeKey.DAWN: ("#ffdde1", "#ee9ca7"),
    PrebuiltThemeKey.SUNSET: ("#ff9966", "#ff5e62"),
    PrebuiltThemeKey.MIDNIGHT: ("#0f0c29", "#24243e"),
    PrebuiltThemeKey.SAKURA: ("#ffb7c5", "#ffe4e1"),
    PrebuiltThemeKey.MATCHA: ("#c7e5c2", "#a2d4ab"),
    PrebuiltThemeKey.KOINOBORI: ("#1a2a6c", "#b21f1f"),
    PrebuiltThemeKey.SUMIE: ("#606c88", "#3f4c6b"),
}

DARK_PREBUILT: FrozenSet[PrebuiltThemeKey] = frozenset({
    PrebuiltThemeKey.NIGHT,
    PrebuiltThemeKey.STORMY,
    PrebuiltThemeKey.MIDNIGHT,
    PrebuiltThemeKey.KOINOBORI,
    PrebuiltThemeKey.SUMIE,
})

# Settings panel order
PREBUILT_LABELS: List[Tuple[PrebuiltThemeKey, str]] = [
    (PrebuiltThemeKey.MORNING, "Morning"),
    (PrebuiltThemeKey.DAY, "Day"),
    (PrebuiltThemeKey.NIGHT, "Night"),
    (PrebuiltThemeKey.STORMY, "Stormy Sea"),
    (PrebuiltThemeKey.DAWN, "Calm Dawn"),
    (PrebuiltThemeKey.SUNSET, "Golden Sunset"),
    (PrebuiltThemeKey.MIDNIGHT, "Midnight Ink"),
    (PrebuiltThemeKey.SAKURA, "Sakura"),
    (PrebuiltThemeKey.MATCHA, "Matcha"),
    (PrebuiltThemeKey.KOINOBORI, "Koinobori"),
    (PrebuiltThemeKey.SUMIE, "Sumi-e"),
]


def parse_prebuilt_key(value) -> Optional[PrebuiltThemeKey]:
    """Map a stored string (or a key) back to a PrebuiltThemeKey, else None."""
    if isinstance(value, PrebuiltThemeKey):
        return value
    try:
        return PrebuiltThemeKey(value)
    except ValueError:
        return None


def is_dark_prebuilt(key: PrebuiltThemeKey) -> bool:
    return key in DARK_PREBUILT


def time_of_day(moment: datetime) -> PrebuiltThemeKey:
    """Morning is [05:00, 12:00), day is [12:00, 17:00), night is the rest."""
    hour = moment.hour
    if 5 <= hour < 12:
        return PrebuiltThemeKey.MORNING
    if 12 <= hour < 17:
        return PrebuiltThemeKey.DAY
    return PrebuiltThemeKey.NIGHT
