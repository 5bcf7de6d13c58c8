"""
BartStart - a personal start page.

Clock with ambient time-of-day theming, weather badge, resource gauges,
a search box and user shortcuts.
"""

__version__ = "1.0.0"
