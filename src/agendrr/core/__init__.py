"""Functional core - pure business logic with no I/O."""

from .event import Event, NO_COLOR
from .filters import EventFilter, ColorFilter, NameRegexFilter, is_excluded, default_filters
from .handlers import (
    EventHandler,
    RegularEventHandler,
    MappedEventHandler,
    InterviewEventHandler,
    OneToOneEventHandler,
    CalendlyEventHandler,
    DefaultEventHandler,
    default_handlers,
    render_event,
)
from .agenda import build_agenda, format_agenda

__all__ = [
    # Events
    "Event",
    "NO_COLOR",
    # Filters
    "EventFilter",
    "ColorFilter",
    "NameRegexFilter",
    "is_excluded",
    "default_filters",
    # Handlers
    "EventHandler",
    "RegularEventHandler",
    "MappedEventHandler",
    "InterviewEventHandler",
    "OneToOneEventHandler",
    "CalendlyEventHandler",
    "DefaultEventHandler",
    "default_handlers",
    "render_event",
    # Agenda
    "build_agenda",
    "format_agenda",
]
