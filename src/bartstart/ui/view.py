"""
View Layer - UI Components Only
================================

Pure UI code with no business logic.
Everything is drawn on one full-window canvas so the gradient shows behind
the clock, the stats and the weather badge. The presenter pushes state in
through the update_* methods and receives user actions through the on_*
callbacks.
"""

# ============================================================================
# IMPORTS
# ============================================================================

import logging
import tkinter as tk
from datetime import datetime
from typing import Callable, Dict, Optional, Sequence

from ..clock import format_date, format_day, format_hours, format_minutes
from ..dependency_injection import AppConfig
from ..models import CustomTheme, SearchEngine, Shortcut, StatsSample, WeatherState
from ..system_stats import StatMetric, sample_value
from ..theme_resolver import Theme
from ..weather import format_temperature, weather_icon
from .dialogs import SettingsPanel
from .theme import UITheme
from .widgets import WEATHER_GLYPHS, StatBar, draw_gradient, hover_color

logger = logging.getLogger("bartstart.ui.view")

LOADING_WEATHER = "Loading weather..."


class StartPageView:
    """View layer - manages all UI components"""

    def __init__(self, root: tk.Tk, config: AppConfig):
        self.root = root
        self.config = config

        # Event callbacks (set by presenter)
        self.on_search: Optional[Callable[[str], None]] = None
        self.on_select_theme: Optional[Callable[[Optional[str]], None]] = None
        self.on_save_custom_theme: Optional[Callable[[CustomTheme], bool]] = None
        self.on_delete_custom_theme: Optional[Callable[[str], None]] = None
        self.on_toggle_stats: Optional[Callable[[], None]] = None
        self.on_select_engine: Optional[Callable[[SearchEngine], None]] = None
        self.on_add_shortcut: Optional[Callable[[str, str], bool]] = None
        self.on_delete_shortcut: Optional[Callable[[int], None]] = None
        self.on_open_shortcut: Optional[Callable[[int], None]] = None
        self.on_dismiss_toast: Optional[Callable[[], None]] = None

        self.widgets: Dict[str, tk.Widget] = {}
        self.fonts = UITheme.setup_fonts(root, config.ui)
        self.theme: Optional[Theme] = None

        self._now = datetime.now()
        self._placeholder = ""
        self._placeholder_shown = False
        self._shortcuts: Sequence[Shortcut] = ()
        self._stats_visible = True
        self._settings_snapshot: Dict[str, object] = {}
        self._settings_panel: Optional[SettingsPanel] = None

    # ------------------------------------------------------------------
    # BUILD UI
    # ------------------------------------------------------------------
    def build_ui(self):
        """Build the complete UI"""
        ui = self.config.ui
        self.root.title(self.config.app_name)

        screen_width = self.root.winfo_screenwidth()
        screen_height = self.root.winfo_screenheight()
        width = min(ui.window_width, screen_width)
        height = min(ui.window_height, screen_height)
        x_position = (screen_width - width) // 2
        y_position = (screen_height - height) // 2
        self.root.geometry(f"{width}x{height}+{x_position}+{y_position}")
        self.root.minsize(640, 480)

        if ui.fullscreen:
            try:
                self.root.attributes("-fullscreen", True)
            except tk.TclError as e:
                logger.debug("Fullscreen not available: %s", e)
            self.root.bind("<Escape>", lambda _e: self.root.attributes("-fullscreen", False))

        canvas = tk.Canvas(self.root, highlightthickness=0, bd=0)
        canvas.pack(fill="both", expand=True)
        self.canvas = canvas

        fonts = self.fonts
        self._hours = canvas.create_text(0, 0, anchor="e", font=fonts["CLOCK"], text="")
        self._minutes = canvas.create_text(0, 0, anchor="w", font=fonts["CLOCK"], text="")
        self._weekday = canvas.create_text(0, 0, anchor="center", font=fonts["ACCENT"], text="")
        self._date = canvas.create_text(0, 0, anchor="center", font=fonts["DATE"], text="")
        self._weather = canvas.create_text(0, 0, anchor="e", font=fonts["ICON"], text=LOADING_WEATHER)

        self._stat_bars = [StatBar(canvas, metric, fonts) for metric in StatMetric]

        self._build_search()
        self._build_shortcuts()
        self._build_toast()
        self._build_gear()

        canvas.bind("<Configure>", self._on_resize)

    def _build_search(self):
        entry = tk.Entry(self.canvas, font=self.fonts["BODY"], relief="flat", bd=0,
                         highlightthickness=2, width=48)
        entry.bind("<Return>", self._submit_search)
        entry.bind("<FocusIn>", self._hide_placeholder)
        entry.bind("<FocusOut>", self._show_placeholder)
        self.widgets["search"] = entry
        self._search_window = self.canvas.create_window(0, 0, window=entry, anchor="center")

    def _build_shortcuts(self):
        frame = tk.Frame(self.canvas, bd=0)
        self.widgets["shortcuts"] = frame
        self._shortcuts_window = self.canvas.create_window(0, 0, window=frame, anchor="center")

    def _build_toast(self):
        toast = tk.Label(self.canvas, font=self.fonts["BODY"], padx=14, pady=6, cursor="hand2")
        toast.bind("<Button-1>", lambda _e: self.on_dismiss_toast and self.on_dismiss_toast())
        self.widgets["toast"] = toast
        self._toast_window = self.canvas.create_window(0, 0, window=toast, anchor="s", state="hidden")

    def _build_gear(self):
        gear = tk.Label(self.canvas, text="⚙", font=self.fonts["ICON"], cursor="hand2")
        gear.bind("<Button-1>", lambda _e: self.open_settings())
        self.widgets["gear"] = gear
        self._gear_window = self.canvas.create_window(0, 0, window=gear, anchor="se")

    # ------------------------------------------------------------------
    # LAYOUT
    # ------------------------------------------------------------------
    def _on_resize(self, event=None):
        self._layout()
        if self.theme is not None:
            draw_gradient(self.canvas, self.theme.bg_start, self.theme.bg_end,
                          self.canvas.winfo_width(), self.canvas.winfo_height())

    def _layout(self):
        c = self.canvas
        w = max(c.winfo_width(), 1)
        h = max(c.winfo_height(), 1)
        cx, cy = w // 2, int(h * 0.40)

        c.coords(self._hours, cx - 20, cy)
        c.coords(self._minutes, cx + 20, cy)
        c.coords(self._weekday, cx, cy)
        c.coords(self._date, cx, cy + 130)
        c.coords(self._weather, w - 24, 32)

        for i, bar in enumerate(self._stat_bars):
            bar.place(24, 28 + i * 20)

        c.coords(self._shortcuts_window, cx, int(h * 0.72))
        c.coords(self._search_window, cx, int(h * 0.80))
        c.coords(self._toast_window, cx, h - 24)
        c.coords(self._gear_window, w - 16, h - 12)

    # ------------------------------------------------------------------
    # PRESENTER ENTRY POINTS
    # ------------------------------------------------------------------
    def apply_theme(self, theme: Theme):
        """Repaint every themed element from the resolved Theme."""
        self.theme = theme
        c = self.canvas
        draw_gradient(c, theme.bg_start, theme.bg_end, c.winfo_width(), c.winfo_height())

        c.itemconfigure(self._hours, fill=theme.clock_overlay)
        c.itemconfigure(self._minutes, fill=theme.clock_overlay)
        c.itemconfigure(self._weekday, fill=theme.clock_accent)
        c.itemconfigure(self._date, fill=theme.date_text)
        c.itemconfigure(self._weather, fill=theme.stats_text)
        for bar in self._stat_bars:
            bar.apply_theme(theme)

        entry = self.widgets["search"]
        entry.configure(
            bg=theme.input_bg,
            insertbackground=theme.input_text,
            highlightbackground=theme.input_bg,
            highlightcolor=theme.input_focus_ring,
            fg=theme.input_placeholder if self._placeholder_shown else theme.input_text,
        )
        self.widgets["toast"].configure(bg=theme.modal_bg, fg=theme.modal_text)
        self.widgets["gear"].configure(bg=theme.bg_end, fg=theme.stats_text)

        self.update_shortcuts(self._shortcuts)
        if self._settings_panel is not None and self._settings_panel.is_open():
            self._settings_panel.refresh(theme, self._settings_snapshot)

    def update_clock(self, now: datetime):
        self._now = now
        c = self.canvas
        c.itemconfigure(self._hours, text=format_hours(now))
        c.itemconfigure(self._minutes, text=format_minutes(now))
        c.itemconfigure(self._weekday, text=format_day(now))
        c.itemconfigure(self._date, text=format_date(now))

    def update_stats(self, sample: StatsSample, visible: bool):
        self._stats_visible = visible
        self.canvas.itemconfigure("stats", state="normal" if visible else "hidden")
        if not visible:
            return
        for bar in self._stat_bars:
            bar.update(sample_value(sample, bar.metric))

    def update_weather(self, state: WeatherState):
        if state.sample is not None:
            icon = weather_icon(state.sample)
            text = f"{WEATHER_GLYPHS[icon]}  {format_temperature(state.sample)}"
        elif state.error is not None:
            text = ""
        else:
            text = LOADING_WEATHER
        self.canvas.itemconfigure(self._weather, text=text)

    def update_shortcuts(self, shortcuts: Sequence[Shortcut]):
        self._shortcuts = tuple(shortcuts)
        frame = self.widgets["shortcuts"]
        for child in frame.winfo_children():
            child.destroy()
        if self.theme is None:
            return

        theme = self.theme
        frame.configure(bg=theme.bg_end)
        for index, shortcut in enumerate(self._shortcuts):
            btn = tk.Label(
                frame, text=shortcut.name, font=self.fonts["BODY"], padx=12, pady=4,
                bg=theme.input_bg, fg=theme.input_text, cursor="hand2",
            )
            btn.bind("<Button-1>", lambda _e, i=index: self.on_open_shortcut and self.on_open_shortcut(i))
            hover_color(btn, theme.input_bg, theme.input_focus_ring)
            btn.pack(side="left", padx=4)

    def update_search(self, engine: SearchEngine, placeholder: str):
        self._placeholder = placeholder
        entry = self.widgets["search"]
        if self._placeholder_shown:
            entry.delete(0, "end")
            self._placeholder_shown = False
        if self.root.focus_get() is not entry:
            self._show_placeholder()

    def update_settings(self, **snapshot):
        self._settings_snapshot = snapshot
        if self._settings_panel is not None and self._settings_panel.is_open() and self.theme is not None:
            self._settings_panel.refresh(self.theme, snapshot)

    def update_toast(self, message: Optional[str], visible: bool):
        toast = self.widgets["toast"]
        if visible and message:
            toast.configure(text=message)
            self.canvas.itemconfigure(self._toast_window, state="normal")
        else:
            self.canvas.itemconfigure(self._toast_window, state="hidden")

    def clear_search(self):
        entry = self.widgets["search"]
        entry.delete(0, "end")
        if self.root.focus_get() is not entry:
            self._show_placeholder()

    # ------------------------------------------------------------------
    # SEARCH ENTRY PLACEHOLDER
    # ------------------------------------------------------------------
    def _show_placeholder(self, _event=None):
        entry = self.widgets["search"]
        if entry.get() or self._placeholder_shown:
            return
        entry.insert(0, self._placeholder)
        self._placeholder_shown = True
        if self.theme is not None:
            entry.configure(fg=self.theme.input_placeholder)

    def _hide_placeholder(self, _event=None):
        if not self._placeholder_shown:
            return
        entry = self.widgets["search"]
        entry.delete(0, "end")
        self._placeholder_shown = False
        if self.theme is not None:
            entry.configure(fg=self.theme.input_text)

    def _submit_search(self, _event=None):
        if self._placeholder_shown:
            return
        query = self.widgets["search"].get()
        if self.on_search:
            self.on_search(query)

    # ------------------------------------------------------------------
    # SETTINGS
    # ------------------------------------------------------------------
    def open_settings(self):
        if self.theme is None:
            return
        if self._settings_panel is None:
            self._settings_panel = SettingsPanel(self)
        self._settings_panel.open(self.theme, self._settings_snapshot)

    def close(self):
        if self._settings_panel is not None:
            self._settings_panel.close()
        try:
            self.root.destroy()
        except tk.TclError as e:
            logger.debug("root.destroy failed: %s", e)
