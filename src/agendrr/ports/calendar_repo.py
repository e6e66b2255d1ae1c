"""Calendar repository interface."""

from datetime import date
from typing import Protocol

from agendrr.core.event import Event


class CalendarRepository(Protocol):
    """Interface for fetching a day's calendar events from any backend."""

    def fetch_day(self, target_date: date) -> list[Event]:
        """Fetch events for a specific date, ordered by start time."""
        ...
