"""
Clock face text. English names regardless of the process locale.
"""

from datetime import datetime

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_hours(moment: datetime) -> str:
    return f"{moment.hour:02d}"


def format_minutes(moment: datetime) -> str:
    return f"{moment.minute:02d}"


def format_day(moment: datetime) -> str:
    return WEEKDAYS[moment.weekday()]


def format_date(moment: datetime) -> str:
    """e.g. ``OCTOBER 05, 2026``"""
    return f"{MONTHS[moment.month - 1]} {moment.day:02d}, {moment.year}".upper()
