"""
Tk presentation layer: the clock face, the settings panel and the theme editor.
"""

from .view import StartPageView

__all__ = ["StartPageView"]
