"""Ports - interfaces/protocols for external dependencies."""

from .calendar_repo import CalendarRepository

__all__ = [
    "CalendarRepository",
]
