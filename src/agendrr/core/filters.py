"""Event filters - decide which events are left off the agenda."""

import logging
import re
from typing import Iterable, Protocol

from agendrr.config import Config

from .event import Event

logger = logging.getLogger(__name__)


class EventFilter(Protocol):
    """Interface for predicates that exclude events from the agenda."""

    def exclude(self, event: Event) -> bool:
        """Return True if the event should be left out."""
        ...


class ColorFilter:
    """Excludes events whose calendar colour is in the ignored set."""

    def __init__(self, ignored_colors: Iterable[str]):
        self.ignored_colors = frozenset(ignored_colors)

    def exclude(self, event: Event) -> bool:
        return event.color in self.ignored_colors


class NameRegexFilter:
    """Excludes events whose name contains a match for any ignored pattern."""

    def __init__(self, patterns: Iterable[re.Pattern]):
        self.patterns = tuple(patterns)

    def exclude(self, event: Event) -> bool:
        return any(p.search(event.name) for p in self.patterns)


def is_excluded(filters: list[EventFilter], event: Event) -> bool:
    """
    Check an event against every filter.

    Stops at the first filter that excludes the event.
    """
    for f in filters:
        if f.exclude(event):
            logger.debug(f"Excluded '{event.name}' ({type(f).__name__})")
            return True
    return False


def default_filters(config: Config) -> list[EventFilter]:
    """Build the filters described by the configuration."""
    return [
        ColorFilter(config.ignored_colours),
        NameRegexFilter(config.ignored_patterns),
    ]
