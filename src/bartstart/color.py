"""
Color helpers: light/dark classification of user-chosen colors.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


def normalize_hex(value) -> Optional[str]:
    """Return ``#rrggbb`` for a 6-digit hex color, or None if malformed."""
    if not isinstance(value, str):
        return None
    m = _HEX_RE.match(value.strip())
    if not m:
        return None
    return "#" + m.group(1).lower()


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    """Split ``#rrggbb`` into channels. Raises ValueError when malformed."""
    norm = normalize_hex(value)
    if norm is None:
        raise ValueError(f"not a 6-digit hex color: {value!r}")
    return int(norm[1:3], 16), int(norm[3:5], 16), int(norm[5:7], 16)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#{:02x}{:02x}{:02x}".format(
        max(0, min(255, int(round(r)))),
        max(0, min(255, int(round(g)))),
        max(0, min(255, int(round(b)))),
    )


def relative_luminance(value: str) -> float:
    """Rec. 709 luminance over channels normalised to [0, 1]."""
    r, g, b = hex_to_rgb(value)
    return 0.2126 * (r / 255) + 0.7152 * (g / 255) + 0.0722 * (b / 255)


def is_dark(hex_color) -> bool:
    """True when a light-on-dark palette should be used against *hex_color*.

    Malformed input is treated as dark.
    """
    try:
        return relative_luminance(hex_color) < 0.5
    except ValueError:
        return True


def blend(foreground: str, background: str, alpha: float) -> str:
    """Composite *foreground* over *background* at *alpha* (0..1).

    Tk has no alpha channel, so translucent roles are pre-blended.
    """
    alpha = max(0.0, min(1.0, alpha))
    fr, fg, fb = hex_to_rgb(foreground)
    br, bg, bb = hex_to_rgb(background)
    return rgb_to_hex(
        fr * alpha + br * (1 - alpha),
        fg * alpha + bg * (1 - alpha),
        fb * alpha + bb * (1 - alpha),
    )


def midpoint(start: str, end: str) -> str:
    """Average of two colors; the backdrop translucent roles blend against."""
    return blend(start, end, 0.5)


def gradient_steps(start: str, end: str, steps: int):
    """Yield *steps* colors linearly interpolated from *start* to *end*."""
    if steps <= 1:
        yield normalize_hex(start) or start
        return
    for i in range(steps):
        yield blend(end, start, i / (steps - 1))
