"""Adapters - I/O implementations of ports."""

from .google_calendar import GoogleCalendarAdapter, CalendarError

__all__ = [
    "GoogleCalendarAdapter",
    "CalendarError",
]
