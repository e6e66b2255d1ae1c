"""Agenda assembly - filter and render a day's events in order."""

from .event import Event
from .filters import EventFilter, is_excluded
from .handlers import EventHandler, render_event


def build_agenda(
    events: list[Event],
    filters: list[EventFilter],
    handlers: list[EventHandler],
) -> list[str]:
    """
    Render a list of events as agenda lines.

    Pure function - no I/O.

    Args:
        events: Events in the order they should appear (usually by start time)
        filters: Filters that may exclude events
        handlers: Handlers in priority order

    Returns:
        One line per retained event, in input order
    """
    lines = []
    for event in events:
        if is_excluded(filters, event):
            continue
        line = render_event(handlers, event)
        if line is not None:
            lines.append(line)
    return lines


def format_agenda(lines: list[str]) -> str:
    """Join agenda lines into a markdown block."""
    return "\n".join(lines)
