"""
Event handlers - render retained events as agenda lines.

Handlers are tried in a fixed priority order (see default_handlers). The
first handler that returns a line wins; returning None passes the event on
to the next handler. Several handlers can apply to the same event, so the
order matters.
"""

import glob
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, Protocol

from agendrr.config import Config, ConfigError, is_valid_email

from .event import Event

logger = logging.getLogger(__name__)

INTERVIEW_SCHEDULER_ADDRESS = "schedule@rose.greenhouse.io"
DEFAULT_CALENDLY_PARTNER = "Jon Seager"

# Event names created by the in-house auto-scheduler; the candidate is only
# named in the description.
_SCHEDULER_NAME_PATTERN = re.compile(r"^Please interview a candidate for .+$")
_SCHEDULER_DESCRIPTION_PATTERN = re.compile(r"^Please interview (.+)[.]$", re.MULTILINE)
# Event names created by Greenhouse itself.
_GREENHOUSE_NAME_PATTERN = re.compile(r"^Please interview (.+) for .+$")

_WORD_SEPARATOR = re.compile(r"[^0-9A-Za-z]+")
# A character class: "[", optional "!", at least one member (which may be "]"), "]".
_GLOB_CLASS = re.compile(r"\[!?.[^\]]*\]")


class EventHandler(Protocol):
    """Interface for agenda renderers."""

    def handle(self, event: Event) -> str | None:
        """Return the agenda line for the event, or None if not applicable."""
        ...


def linked_agenda_entry(start: datetime, target: str, alias: str) -> str:
    """Format an agenda line linking to a note, anchored on the event date."""
    return f"- **{start.strftime('%H%M')}**: [[{target}#{start.strftime('%Y-%m-%d')}|{alias}]]"


def plain_agenda_entry(start: datetime, text: str) -> str:
    return f"- **{start.strftime('%H%M')}**: {text}"


def title_case(value: str) -> str:
    """Capitalise each word, treating any non-alphanumeric run as a separator."""
    return " ".join(w.capitalize() for w in _WORD_SEPARATOR.split(value) if w)


def check_glob(pattern: str) -> None:
    """
    Reject malformed glob patterns, which glob.glob silently treats as
    matching nothing.

    Raises:
        ConfigError: On an unclosed character class, or a "**" that is not a
            whole path component.
    """
    for component in re.split(r"[/\\]", pattern):
        if "**" in component and component != "**":
            raise ConfigError(f"invalid regular note glob {pattern!r}: '**' must be a whole path component")

    pos = pattern.find("[")
    while pos != -1:
        match = _GLOB_CLASS.match(pattern, pos)
        if not match:
            raise ConfigError(f"invalid regular note glob {pattern!r}: unclosed '[' at {pos}")
        pos = pattern.find("[", match.end())


def fs_note_list(pattern: str) -> list[str]:
    """
    List note names (file stems) for files matching a glob pattern.

    Raises:
        ConfigError: If the pattern is malformed or cannot be expanded.
    """
    if not pattern:
        return []
    check_glob(pattern)
    try:
        paths = glob.glob(str(Path(pattern).expanduser()), recursive=True)
    except (OSError, ValueError) as e:
        raise ConfigError(f"failed to read regular note glob {pattern!r}: {e}") from e
    return [Path(p).stem for p in sorted(paths) if Path(p).is_file()]


class RegularEventHandler:
    """Links events that have a named note of their own on the filesystem."""

    def __init__(self, notes: Iterable[str]):
        self.notes = frozenset(notes)

    @classmethod
    def from_glob(cls, pattern: str) -> "RegularEventHandler":
        notes = fs_note_list(pattern)
        logger.debug(f"Found {len(notes)} regular meeting notes matching {pattern!r}")
        return cls(notes)

    def handle(self, event: Event) -> str | None:
        if event.name not in self.notes:
            return None
        return linked_agenda_entry(event.start_time, event.name, event.name)


class MappedEventHandler:
    """Links events whose note has a different name to the event."""

    def __init__(self, notes: dict[str, str]):
        self.notes = dict(notes)

    def handle(self, event: Event) -> str | None:
        note_name = self.notes.get(event.name)
        if note_name is None:
            return None
        return linked_agenda_entry(event.start_time, note_name, note_name)


class InterviewEventHandler:
    """
    Links interview events to a per-candidate notes file.

    Two schedulers create these events. The auto-scheduler uses a generic
    event name and names the candidate in the description; Greenhouse names
    the candidate in the event name. Which one created the event is decided
    by the name alone, so an auto-scheduler event with no candidate line in
    its description is not handled.
    """

    def __init__(self, scheduler_address: str = INTERVIEW_SCHEDULER_ADDRESS):
        self.scheduler_address = scheduler_address

    def candidate_name(self, event: Event) -> str | None:
        """Extract the candidate's name from the event, if present."""
        if _SCHEDULER_NAME_PATTERN.match(event.name):
            match = _SCHEDULER_DESCRIPTION_PATTERN.search(event.description)
        else:
            match = _GREENHOUSE_NAME_PATTERN.match(event.name)
        return match.group(1) if match else None

    def handle(self, event: Event) -> str | None:
        if self.scheduler_address not in event.attendees:
            return None

        name = self.candidate_name(event)
        if name is None:
            return None

        candidate_file_name = name.lower().replace(" ", "-")
        filename = f"{event.start_time.strftime('%Y%m%d%H%M')}-{candidate_file_name}"
        return f"- **{event.time_label}**: [[{filename}|{name} Interview Notes]]"


class OneToOneEventHandler:
    """Links meetings with a single colleague to the note named after them."""

    def __init__(self, user_first_name: str, home_domain: str):
        self.user_first_name = user_first_name
        self.home_domain = home_domain

    def parse_name_from_email(self, email: str) -> tuple[str, str] | None:
        """
        Extract (first name, full name) from a first.last@domain address.

        Addresses outside the user's own domain are refused, since their
        local parts don't follow a known convention.
        """
        if not is_valid_email(email):
            return None

        local_part, _, domain = email.rpartition("@")
        if domain != self.home_domain:
            return None

        first, sep, last = local_part.partition(".")
        if not sep:
            return None

        first_name = title_case(first)
        return first_name, f"{first_name} {title_case(last)}".strip()

    def handle(self, event: Event) -> str | None:
        if len(event.attendees) != 1:
            return None

        names = self.parse_name_from_email(event.attendees[0])
        if names is None:
            return None

        first_name, full_name = names
        alias = f"{self.user_first_name}/{first_name}"
        return linked_agenda_entry(event.start_time, full_name, alias)


class CalendlyEventHandler:
    """Links events booked through Calendly ("<Name> and <Partner>")."""

    def __init__(self, user_name: str, partner_name: str = DEFAULT_CALENDLY_PARTNER):
        self.user_name = user_name
        self.pattern = re.compile(rf"^(.+) and {re.escape(partner_name)}")

    def handle(self, event: Event) -> str | None:
        match = self.pattern.match(event.name)
        if not match:
            return None

        full_name = match.group(1)
        first_name = full_name.split(" ", 1)[0]
        alias = f"{self.user_name}/{first_name}"
        return linked_agenda_entry(event.start_time, full_name, alias)


class DefaultEventHandler:
    """Renders any event as plain text. Must be last in the chain."""

    def handle(self, event: Event) -> str | None:
        return plain_agenda_entry(event.start_time, event.name)


def default_handlers(config: Config) -> list[EventHandler]:
    """
    Build all handlers, in priority order.

    Raises:
        ConfigError: If the regular note glob cannot be read.
    """
    return [
        RegularEventHandler.from_glob(config.regular_note_glob),
        MappedEventHandler(config.mapped_filenames),
        InterviewEventHandler(),
        OneToOneEventHandler(config.user_preferred_name, config.user_domain),
        CalendlyEventHandler(config.user_preferred_name, config.calendly_partner_name),
        DefaultEventHandler(),
    ]


def render_event(handlers: list[EventHandler], event: Event) -> str | None:
    """Render an event with the first handler that applies to it."""
    for handler in handlers:
        line = handler.handle(event)
        if line is not None:
            logger.debug(f"Rendered '{event.name}' with {type(handler).__name__}")
            return line
    return None
