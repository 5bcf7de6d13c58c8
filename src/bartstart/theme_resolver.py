"""
Theme resolution.

Turns (current time, override, custom themes) into one fully resolved
Theme. Rendering code only ever sees a Theme, never the catalog or the
custom theme list.

Resolution is pure and cheap; the presenter re-runs it on every clock tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple, Union

from .color import blend, midpoint, normalize_hex
from .models import CustomTheme
from .theme_catalog import (
    PREBUILT_GRADIENTS,
    PrebuiltThemeKey,
    is_dark_prebuilt,
    parse_prebuilt_key,
    time_of_day,
)

logger = logging.getLogger("bartstart.theme")

WHITE = "#ffffff"
BLACK = "#000000"


# ============================================================================
# RESOLVED THEME
# ============================================================================

@dataclass(frozen=True)
class Theme:
    """Every visual role the view paints with, as concrete #rrggbb colors."""
    name: str
    source: str  # "prebuilt" | "custom" | "fallback"
    is_dark: bool

    bg_start: str
    bg_end: str

    clock_overlay: str
    clock_accent: str
    date_text: str
    stats_text: str
    stats_track: str
    stats_fill: str

    input_bg: str
    input_text: str
    input_placeholder: str
    input_focus_ring: str

    modal_bg: str
    modal_text: str
    modal_border: str
    modal_button_bg: str
    modal_button_hover_bg: str


# ============================================================================
# THEME SOURCES (tagged variant)
# ============================================================================

@dataclass(frozen=True)
class PrebuiltSource:
    key: PrebuiltThemeKey


@dataclass(frozen=True)
class CustomSource:
    theme: CustomTheme


@dataclass(frozen=True)
class FallbackSource:
    """Override named something that no longer exists."""
    requested: str
    key: PrebuiltThemeKey


ThemeSource = Union[PrebuiltSource, CustomSource, FallbackSource]


def active_key(now: datetime, override: Optional[str]) -> str:
    return override or time_of_day(now).value


def select_source(
    now: datetime,
    override: Optional[str],
    custom_themes: Iterable[CustomTheme],
) -> ThemeSource:
    """Pick where this tick's palette comes from.

    Custom names win over prebuilt keys. A dangling override falls back to
    the time-of-day palette.
    """
    key = active_key(now, override)

    for custom in custom_themes:
        if custom.name == key:
            return CustomSource(custom)

    prebuilt = parse_prebuilt_key(key)
    if prebuilt is not None:
        return PrebuiltSource(prebuilt)

    return FallbackSource(requested=key, key=time_of_day(now))


# ============================================================================
# ROLE TABLES
# ============================================================================

# role -> (ink, alpha, surface). Surface is what the role sits on:
# the gradient backdrop, the modal panel or the input field.
_DARK_ROLES: Dict[str, Tuple[str, float, str]] = {
    "clock_overlay": (WHITE, 0.10, "backdrop"),
    "stats_track": (WHITE, 0.20, "backdrop"),
    "stats_fill": (WHITE, 0.70, "backdrop"),
    "input_bg": (WHITE, 0.10, "backdrop"),
    "input_text": (WHITE, 0.80, "input_bg"),
    "input_placeholder": (WHITE, 0.50, "input_bg"),
    "input_focus_ring": (WHITE, 0.30, "backdrop"),
    "modal_bg": (BLACK, 0.50, "backdrop"),
    "modal_text": (WHITE, 0.90, "modal_bg"),
    "modal_border": (WHITE, 0.20, "modal_bg"),
    "modal_button_bg": (WHITE, 0.10, "modal_bg"),
    "modal_button_hover_bg": (WHITE, 0.20, "modal_bg"),
}

_LIGHT_ROLES: Dict[str, Tuple[str, float, str]] = {
    "clock_overlay": (BLACK, 0.10, "backdrop"),
    "stats_track": (BLACK, 0.20, "backdrop"),
    "stats_fill": (BLACK, 0.70, "backdrop"),
    "input_bg": (BLACK, 0.05, "backdrop"),
    "input_text": (BLACK, 0.90, "input_bg"),
    "input_placeholder": (BLACK, 0.60, "input_bg"),
    "input_focus_ring": (BLACK, 0.20, "backdrop"),
    "modal_bg": (WHITE, 0.70, "backdrop"),
    "modal_text": (BLACK, 0.90, "modal_bg"),
    "modal_border": (BLACK, 0.20, "modal_bg"),
    "modal_button_bg": (BLACK, 0.10, "modal_bg"),
    "modal_button_hover_bg": (BLACK, 0.20, "modal_bg"),
}

# Accent roles for prebuilt themes; custom themes bring their own.
_PREBUILT_ACCENTS = {
    True: {
        "clock_accent": ("#f0f8ff", 1.0),
        "date_text": (WHITE, 0.60),
        "stats_text": (WHITE, 0.70),
    },
    False: {
        "clock_accent": ("#44403c", 1.0),  # stone-700
        "date_text": (BLACK, 0.70),
        "stats_text": (BLACK, 0.80),
    },
}


def _expand_roles(dark: bool, backdrop: str) -> Dict[str, str]:
    table = _DARK_ROLES if dark else _LIGHT_ROLES
    surfaces = {"backdrop": backdrop}
    roles: Dict[str, str] = {}
    # Surfaces first so dependent roles can blend against them
    for role in ("input_bg", "modal_bg"):
        ink, alpha, surface = table[role]
        roles[role] = surfaces[role] = blend(ink, surfaces[surface], alpha)
    for role, (ink, alpha, surface) in table.items():
        if role not in roles:
            roles[role] = blend(ink, surfaces[surface], alpha)
    return roles


def _prebuilt_accents(dark: bool, backdrop: str) -> Dict[str, str]:
    return {
        role: blend(ink, backdrop, alpha)
        for role, (ink, alpha) in _PREBUILT_ACCENTS[dark].items()
    }


# ============================================================================
# RESOLUTION
# ============================================================================

def theme_from_source(source: ThemeSource) -> Theme:
    """Expand a source into the full role set."""
    if isinstance(source, CustomSource):
        custom = source.theme
        dark = custom.is_dark
        fallback_bg = PREBUILT_GRADIENTS[PrebuiltThemeKey.NIGHT if dark else PrebuiltThemeKey.DAY]
        bg_start = normalize_hex(custom.colors.bg_start) or fallback_bg[0]
        bg_end = normalize_hex(custom.colors.bg_end) or fallback_bg[1]
        backdrop = midpoint(bg_start, bg_end)
        accents = _prebuilt_accents(dark, backdrop)
        for role in ("clock_accent", "date_text", "stats_text"):
            chosen = normalize_hex(getattr(custom.colors, role))
            if chosen is not None:
                accents[role] = chosen
        name, kind = custom.name, "custom"
    else:
        key = source.key
        dark = is_dark_prebuilt(key)
        bg_start, bg_end = PREBUILT_GRADIENTS[key]
        backdrop = midpoint(bg_start, bg_end)
        accents = _prebuilt_accents(dark, backdrop)
        if isinstance(source, FallbackSource):
            name, kind = source.requested, "fallback"
        else:
            name, kind = key.value, "prebuilt"

    return Theme(
        name=name,
        source=kind,
        is_dark=dark,
        bg_start=bg_start,
        bg_end=bg_end,
        **accents,
        **_expand_roles(dark, backdrop),
    )


def resolve(
    now: datetime,
    override: Optional[str],
    custom_themes: Iterable[CustomTheme],
) -> Theme:
    """Resolve the palette for *now*. Same inputs, same Theme."""
    return theme_from_source(select_source(now, override, custom_themes))
