"""
Settings panel and custom theme editor (Toplevel dialogs).
"""

import logging
import tkinter as tk
from tkinter import colorchooser
from typing import TYPE_CHECKING, Dict, Optional

from ..color import normalize_hex
from ..models import CustomTheme, SearchEngine, ThemeColors
from ..search import SEARCH_LABELS
from ..theme_catalog import PREBUILT_LABELS
from ..theme_resolver import Theme
from .widgets import create_section_header, style_button

if TYPE_CHECKING:
    from .view import StartPageView

logger = logging.getLogger("bartstart.ui.dialogs")

COLOR_LABELS = {
    "bg_start": "Background Start",
    "bg_end": "Background End",
    "clock_accent": "Clock Accent",
    "date_text": "Date Text",
    "stats_text": "Stats Text",
}


class SettingsPanel:
    """Theme, stats, shortcut and search engine settings"""

    def __init__(self, view: "StartPageView"):
        self.view = view
        self.window: Optional[tk.Toplevel] = None
        self._editor: Optional[CustomThemeEditor] = None
        self._name_var: Optional[tk.StringVar] = None
        self._url_var: Optional[tk.StringVar] = None
        self._pending = None

    def is_open(self) -> bool:
        return self.window is not None and self.window.winfo_exists()

    def open(self, theme: Theme, snapshot: Dict[str, object]):
        if not self.is_open():
            self.window = tk.Toplevel(self.view.root)
            self.window.title("Settings")
            self.window.transient(self.view.root)
            self.window.resizable(False, True)
            self.window.protocol("WM_DELETE_WINDOW", self.close)
            self._name_var = tk.StringVar(self.window)
            self._url_var = tk.StringVar(self.window)
        self.refresh(theme, snapshot)
        self.window.lift()

    def close(self):
        if self._editor is not None:
            self._editor.close()
        if self.is_open():
            self.window.destroy()
        self.window = None
        self._pending = None

    def refresh(self, theme: Theme, snapshot: Dict[str, object]):
        """Rebuild on the next idle turn; buttons may still be mid-callback."""
        first = self._pending is None
        self._pending = (theme, snapshot)
        if first:
            self.window.after_idle(self._rebuild)

    def _rebuild(self):
        pending, self._pending = self._pending, None
        if pending is None or not self.is_open():
            return
        theme, snapshot = pending
        win = self.window
        for child in win.winfo_children():
            child.destroy()
        win.configure(bg=theme.modal_bg, highlightthickness=1, highlightbackground=theme.modal_border)

        body = tk.Frame(win, bg=theme.modal_bg, padx=14, pady=12)
        body.pack(fill="both", expand=True)

        override = snapshot.get("override")
        self._build_themes(body, theme, override, snapshot.get("custom_themes", ()))
        self._build_stats_toggle(body, theme, bool(snapshot.get("show_stats", True)))
        self._build_shortcuts(body, theme, snapshot.get("shortcuts", ()))
        self._build_engines(body, theme, snapshot.get("engine", SearchEngine.GOOGLE))

    # ------------------------------------------------------------------
    # SECTIONS
    # ------------------------------------------------------------------
    def _theme_button(self, parent, theme: Theme, text: str, key: Optional[str], selected: bool):
        btn = tk.Button(parent, text=text, command=lambda: self._select_theme(key))
        style_button(btn, theme, self.view.fonts, selected=selected)
        return btn

    def _build_themes(self, body, theme: Theme, override, custom_themes):
        fonts = self.view.fonts
        create_section_header(body, "Theme", theme, fonts).pack(fill="x", pady=(0, 4))

        self._theme_button(body, theme, "Automatic", None, override is None).pack(fill="x")

        create_btn = tk.Button(body, text="+ Create Theme", command=self._open_editor)
        style_button(create_btn, theme, fonts)
        create_btn.pack(fill="x")

        for custom in custom_themes:
            row = tk.Frame(body, bg=theme.modal_bg)
            row.pack(fill="x")
            self._theme_button(row, theme, custom.name, custom.name,
                               override == custom.name).pack(side="left", fill="x", expand=True)
            delete = tk.Button(row, text="✕", command=lambda n=custom.name: self._delete_theme(n))
            style_button(delete, theme, fonts)
            delete.pack(side="right")

        tk.Frame(body, height=1, bg=theme.modal_border).pack(fill="x", pady=4)

        for key, label in PREBUILT_LABELS:
            self._theme_button(body, theme, label, key.value, override == key.value).pack(fill="x")

    def _build_stats_toggle(self, body, theme: Theme, show_stats: bool):
        fonts = self.view.fonts
        create_section_header(body, "Display", theme, fonts).pack(fill="x", pady=(10, 4))
        text = "Hide system stats" if show_stats else "Show system stats"
        btn = tk.Button(body, text=text, command=lambda: self.view.on_toggle_stats and self.view.on_toggle_stats())
        style_button(btn, theme, fonts)
        btn.pack(fill="x")

    def _build_shortcuts(self, body, theme: Theme, shortcuts):
        fonts = self.view.fonts
        create_section_header(body, "Shortcuts", theme, fonts).pack(fill="x", pady=(10, 4))

        for index, shortcut in enumerate(shortcuts):
            row = tk.Frame(body, bg=theme.modal_bg)
            row.pack(fill="x")
            tk.Label(row, text=shortcut.name, font=fonts["BODY"], bg=theme.modal_bg,
                     fg=theme.modal_text, anchor="w").pack(side="left", fill="x", expand=True)
            delete = tk.Button(row, text="✕", command=lambda i=index: self._delete_shortcut(i))
            style_button(delete, theme, fonts)
            delete.pack(side="right")

        form = tk.Frame(body, bg=theme.modal_bg)
        form.pack(fill="x", pady=(4, 0))
        for var, hint in ((self._name_var, "Name"), (self._url_var, "URL")):
            tk.Label(form, text=hint, font=fonts["SMALL"], bg=theme.modal_bg,
                     fg=theme.modal_text).pack(anchor="w")
            tk.Entry(form, textvariable=var, font=fonts["BODY"], relief="flat",
                     bg=theme.modal_button_bg, fg=theme.modal_text,
                     insertbackground=theme.modal_text).pack(fill="x", pady=(0, 4))
        add = tk.Button(form, text="Add Shortcut", command=self._add_shortcut)
        style_button(add, theme, fonts, selected=True)
        add.pack(fill="x")

    def _build_engines(self, body, theme: Theme, engine: SearchEngine):
        fonts = self.view.fonts
        create_section_header(body, "Search Engine", theme, fonts).pack(fill="x", pady=(10, 4))
        for option, label in SEARCH_LABELS.items():
            btn = tk.Button(body, text=label, command=lambda e=option: self._select_engine(e))
            style_button(btn, theme, fonts, selected=option == engine)
            btn.pack(fill="x")

    # ------------------------------------------------------------------
    # ACTIONS
    # ------------------------------------------------------------------
    def _select_theme(self, key: Optional[str]):
        if self.view.on_select_theme:
            self.view.on_select_theme(key)
        self.close()

    def _delete_theme(self, name: str):
        if self.view.on_delete_custom_theme:
            self.view.on_delete_custom_theme(name)

    def _select_engine(self, engine: SearchEngine):
        if self.view.on_select_engine:
            self.view.on_select_engine(engine)

    def _add_shortcut(self):
        if not self.view.on_add_shortcut:
            return
        if self.view.on_add_shortcut(self._name_var.get(), self._url_var.get()):
            self._name_var.set("")
            self._url_var.set("")

    def _delete_shortcut(self, index: int):
        if self.view.on_delete_shortcut:
            self.view.on_delete_shortcut(index)

    def _open_editor(self):
        if self._editor is None:
            self._editor = CustomThemeEditor(self.view)
        self._editor.open(self.view.theme)


class CustomThemeEditor:
    """Name plus five colors, picked with the Tk color chooser"""

    def __init__(self, view: "StartPageView"):
        self.view = view
        self.window: Optional[tk.Toplevel] = None
        self._name_var: Optional[tk.StringVar] = None
        self._colors: Dict[str, str] = {}
        self._swatches: Dict[str, tk.Label] = {}
        self._error: Optional[tk.Label] = None

    def open(self, theme: Theme):
        if self.window is not None and self.window.winfo_exists():
            self.window.lift()
            return

        defaults = ThemeColors()
        self._colors = dict(defaults.items())
        fonts = self.view.fonts

        win = tk.Toplevel(self.view.root)
        win.title("Create Custom Theme")
        win.transient(self.view.root)
        win.resizable(False, False)
        win.configure(bg=theme.modal_bg)
        win.protocol("WM_DELETE_WINDOW", self.close)
        self.window = win

        body = tk.Frame(win, bg=theme.modal_bg, padx=14, pady=12)
        body.pack(fill="both", expand=True)

        tk.Label(body, text="Theme Name", font=fonts["SMALL"], bg=theme.modal_bg,
                 fg=theme.modal_text).grid(row=0, column=0, columnspan=2, sticky="w")
        self._name_var = tk.StringVar(win, value="My Custom Theme")
        tk.Entry(body, textvariable=self._name_var, font=fonts["BODY"], relief="flat",
                 bg=theme.modal_button_bg, fg=theme.modal_text,
                 insertbackground=theme.modal_text).grid(row=1, column=0, columnspan=2, sticky="ew", pady=(0, 8))

        self._swatches = {}
        for row, (attr, color) in enumerate(self._colors.items(), start=2):
            tk.Label(body, text=COLOR_LABELS[attr], font=fonts["BODY"], bg=theme.modal_bg,
                     fg=theme.modal_text, anchor="w").grid(row=row, column=0, sticky="w", pady=2)
            swatch = tk.Label(body, width=6, bg=color, relief="flat", cursor="hand2",
                              highlightthickness=1, highlightbackground=theme.modal_border)
            swatch.bind("<Button-1>", lambda _e, a=attr: self._pick(a))
            swatch.grid(row=row, column=1, sticky="e", padx=(12, 0), pady=2)
            self._swatches[attr] = swatch

        self._error = tk.Label(body, text="", font=fonts["SMALL"], bg=theme.modal_bg,
                               fg=theme.modal_text, anchor="w", justify="left")
        self._error.grid(row=8, column=0, columnspan=2, sticky="w")

        buttons = tk.Frame(body, bg=theme.modal_bg)
        buttons.grid(row=9, column=0, columnspan=2, sticky="e", pady=(10, 0))
        cancel = tk.Button(buttons, text="Cancel", command=self.close)
        style_button(cancel, theme, fonts)
        cancel.pack(side="left", padx=(0, 6))
        save = tk.Button(buttons, text="Save", command=self._save)
        style_button(save, theme, fonts, selected=True)
        save.pack(side="left")

    def _pick(self, attr: str):
        _rgb, chosen = colorchooser.askcolor(
            color=self._colors[attr], parent=self.window, title=COLOR_LABELS[attr]
        )
        chosen = normalize_hex(chosen)
        if chosen is None:
            return
        self._colors[attr] = chosen
        self._swatches[attr].configure(bg=chosen)

    def _save(self):
        theme = CustomTheme(name=self._name_var.get().strip(), colors=ThemeColors(**self._colors))
        is_valid, errors = theme.validate()
        if not is_valid:
            self._error.configure(text="\n".join(errors))
            return
        if self.view.on_save_custom_theme and self.view.on_save_custom_theme(theme):
            self.close()

    def close(self):
        if self.window is not None and self.window.winfo_exists():
            self.window.destroy()
        self.window = None
