"""
Start Page Data Models
======================

Plain dataclasses shared by the preference store, the session and the view:
custom themes, shortcuts, search engines and the two feed samples.

Persisted records keep the camelCase keys the stored preference format uses
(``bgStart``, ``clockAccent`` ...), so existing profiles keep loading.
"""

# ============================================================================
# IMPORTS
# ============================================================================

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .color import is_dark, normalize_hex


# =============================================================================
# ENUMS
# =============================================================================

class SearchEngine(Enum):
    """Search engines the search box can redirect to"""
    GOOGLE = "google"
    BING = "bing"
    DUCKDUCKGO = "duckduckgo"
    STARTPAGE = "startpage"


# =============================================================================
# CUSTOM THEMES
# =============================================================================

# attribute name -> stored key
_COLOR_KEYS: Tuple[Tuple[str, str], ...] = (
    ("bg_start", "bgStart"),
    ("bg_end", "bgEnd"),
    ("clock_accent", "clockAccent"),
    ("date_text", "dateText"),
    ("stats_text", "statsText"),
)


@dataclass(frozen=True)
class ThemeColors:
    """The five user-chosen colors of a custom theme"""
    bg_start: str = "#1a2a6c"
    bg_end: str = "#b21f1f"
    clock_accent: str = "#ffffff"
    date_text: str = "#ffffff"
    stats_text: str = "#ffffff"

    def to_dict(self) -> Dict[str, str]:
        return {stored: getattr(self, attr) for attr, stored in _COLOR_KEYS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ThemeColors':
        """Build from stored keys; every color must be present as a string."""
        values = {}
        for attr, stored in _COLOR_KEYS:
            value = data.get(stored, data.get(attr))
            if not isinstance(value, str):
                raise ValueError(f"missing color {stored!r}")
            values[attr] = value
        return cls(**values)

    def items(self) -> List[Tuple[str, str]]:
        """(attribute, color) pairs in editor order"""
        return [(attr, getattr(self, attr)) for attr, _ in _COLOR_KEYS]


@dataclass(frozen=True)
class CustomTheme:
    """A user-authored theme, keyed by name"""
    name: str
    colors: ThemeColors

    @property
    def is_dark(self) -> bool:
        """Dark if either gradient stop is dark; computed, never stored."""
        return is_dark(self.colors.bg_start) or is_dark(self.colors.bg_end)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "colors": self.colors.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CustomTheme':
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("custom theme needs a non-empty name")
        colors = data.get("colors")
        if not isinstance(colors, dict):
            raise ValueError("custom theme needs a colors mapping")
        return cls(name=name.strip(), colors=ThemeColors.from_dict(colors))

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate the theme before saving.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []

        if not self.name.strip():
            errors.append("Theme name is required")

        for attr, value in self.colors.items():
            if normalize_hex(value) is None:
                errors.append(f"{attr.replace('_', ' ')} must be a #RRGGBB color")

        return (len(errors) == 0, errors)


# =============================================================================
# SHORTCUTS
# =============================================================================

@dataclass(frozen=True)
class Shortcut:
    """A named link shown above the search box"""
    name: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Shortcut':
        name = data.get("name")
        url = data.get("url")
        if not isinstance(name, str) or not isinstance(url, str):
            raise ValueError("shortcut needs string name and url")
        return cls(name=name, url=url)


# =============================================================================
# FEED SAMPLES
# =============================================================================

@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class WeatherSample:
    """Current conditions; lives for one session only"""
    temperature_c: int
    precipitation_mm: float
    cloud_cover_pct: float


@dataclass(frozen=True)
class StatsSample:
    """Simulated resource gauges.

    These are NOT measurements. CPU and network values are a random walk
    kept for visual liveliness only.
    """
    ram_pct: float = 45.0
    cpu_pct: float = 3.0
    download_kbps: float = 257.8
    upload_kbps: float = 7.2


@dataclass(frozen=True)
class WeatherState:
    """What the weather badge shows: a sample, an error, or still loading"""
    sample: Optional[WeatherSample] = None
    error: Optional[str] = None
    used_fallback: bool = False
    notice: Optional[str] = None  # why the fallback location was used
    coordinates: Optional[Coordinates] = None

    @property
    def loading(self) -> bool:
        return self.sample is None and self.error is None
