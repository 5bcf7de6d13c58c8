"""
Reusable widget helpers: button styling, section headers, gradient fill, stat bars.
"""

import logging
import tkinter as tk
from typing import Dict, Optional

from ..color import gradient_steps
from ..system_stats import StatMetric, bar_percentage, format_stat
from ..theme_resolver import Theme
from ..weather import WeatherIcon

logger = logging.getLogger("bartstart.ui.widgets")

WEATHER_GLYPHS: Dict[WeatherIcon, str] = {
    WeatherIcon.RAIN: "☔",           # umbrella with rain
    WeatherIcon.CLOUD: "☁",          # cloud
    WeatherIcon.PARTLY_CLOUDY: "⛅",  # sun behind cloud
    WeatherIcon.SUN: "☀",            # sun
}

STAT_LABELS = {
    StatMetric.RAM: "RAM",
    StatMetric.CPU: "CPU",
    StatMetric.DOWNLOAD: "DOWN",
    StatMetric.UPLOAD: "UP",
}


def style_button(btn: tk.Widget, theme: Theme, fonts: Dict[str, tuple], *, selected: bool = False):
    """Apply a flat, modal-friendly button style."""
    bg = theme.modal_button_bg if selected else theme.modal_bg
    cfg = {
        "font": fonts["BODY"],
        "bg": bg,
        "fg": theme.modal_text,
        "activebackground": theme.modal_button_hover_bg,
        "activeforeground": theme.modal_text,
        "relief": "flat",
        "bd": 0,
        "highlightthickness": 0,
        "anchor": "w",
        "padx": 10,
        "pady": 3,
        "cursor": "hand2",
    }
    for k, v in cfg.items():
        try:
            btn.configure(**{k: v})
        except Exception as e:
            logger.debug("Button configure %s failed: %s", k, e)

    try:
        btn.bind("<Enter>", lambda _e: btn.configure(bg=theme.modal_button_hover_bg))
        btn.bind("<Leave>", lambda _e: btn.configure(bg=bg))
    except Exception as e:
        logger.debug("Button hover bind failed: %s", e)


def create_section_header(parent: tk.Widget, text: str, theme: Theme,
                          fonts: Dict[str, tuple]) -> tk.Label:
    return tk.Label(
        parent,
        text=text,
        font=fonts["SECTION"],
        fg=theme.modal_text,
        bg=theme.modal_bg,
        anchor="w",
    )


def draw_gradient(canvas: tk.Canvas, start: str, end: str, width: int, height: int,
                  tag: str = "gradient", bands: int = 128):
    """Paint a top-to-bottom gradient as horizontal bands under everything else."""
    canvas.delete(tag)
    if width <= 1 or height <= 1:
        return
    bands = max(1, min(bands, height))
    band_h = height / bands
    for i, color in enumerate(gradient_steps(start, end, bands)):
        y0 = int(i * band_h)
        y1 = int((i + 1) * band_h) + 1
        canvas.create_rectangle(0, y0, width, y1, fill=color, outline="", tags=(tag,))
    canvas.tag_lower(tag)


class StatBar:
    """Label, track, fill and value text for one metric, drawn on a canvas."""

    WIDTH = 90
    HEIGHT = 4

    def __init__(self, canvas: tk.Canvas, metric: StatMetric, fonts: Dict[str, tuple]):
        self.canvas = canvas
        self.metric = metric
        self.fonts = fonts
        tag = f"stat_{metric.value}"
        self.tag = tag
        self.label = canvas.create_text(0, 0, anchor="w", text=STAT_LABELS[metric],
                                        font=fonts["SMALL"], tags=(tag, "stats"))
        self.track = canvas.create_rectangle(0, 0, 0, 0, outline="", tags=(tag, "stats"))
        self.fill = canvas.create_rectangle(0, 0, 0, 0, outline="", tags=(tag, "stats"))
        self.value = canvas.create_text(0, 0, anchor="e", text="", font=fonts["SMALL"],
                                        tags=(tag, "stats"))
        self._x = 0
        self._y = 0
        self._pct = 0.0

    def place(self, x: int, y: int):
        self._x, self._y = x, y
        c = self.canvas
        c.coords(self.label, x, y)
        c.coords(self.value, x + 60 + self.WIDTH + 60, y)
        c.coords(self.track, x + 50, y - self.HEIGHT // 2, x + 50 + self.WIDTH, y + self.HEIGHT // 2)
        self._place_fill()

    def _place_fill(self):
        x0 = self._x + 50
        self.canvas.coords(
            self.fill, x0, self._y - self.HEIGHT // 2,
            x0 + self.WIDTH * self._pct / 100, self._y + self.HEIGHT // 2,
        )

    def apply_theme(self, theme: Theme):
        c = self.canvas
        c.itemconfigure(self.label, fill=theme.stats_text)
        c.itemconfigure(self.value, fill=theme.stats_text)
        c.itemconfigure(self.track, fill=theme.stats_track)
        c.itemconfigure(self.fill, fill=theme.stats_fill)

    def update(self, value: float):
        self._pct = bar_percentage(self.metric, value)
        self.canvas.itemconfigure(self.value, text=format_stat(self.metric, value))
        self._place_fill()


def hover_color(widget: tk.Widget, normal: str, hover: Optional[str]):
    """Swap a widget's background while the pointer is over it."""
    if not hover:
        return
    widget.bind("<Enter>", lambda _e: widget.configure(bg=hover))
    widget.bind("<Leave>", lambda _e: widget.configure(bg=normal))
