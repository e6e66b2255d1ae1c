"""Calendar event model - pure, no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime

# Colour id used when the calendar leaves an event's colour unset.
NO_COLOR = "none"


@dataclass(frozen=True)
class Event:
    """A calendar event, normalised for agenda rendering."""

    start_time: datetime
    name: str
    description: str = ""
    color: str = NO_COLOR
    attendees: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def build(
        cls,
        start_time: datetime,
        name: str,
        description: str,
        color: str,
        attendees: list[str],
        *,
        user_email: str,
        strip_suffixes: list[str] | None = None,
    ) -> "Event":
        """
        Build an event in the context of the current user.

        The user's own address is removed from the attendees, and every
        configured suffix (such as " - Weekly") is trimmed from the end of
        the name, repeatedly, in the order given.
        """
        for suffix in strip_suffixes or []:
            if not suffix:
                continue
            while name.endswith(suffix):
                name = name[: -len(suffix)]

        return cls(
            start_time=start_time,
            name=name,
            description=description,
            color=color,
            attendees=tuple(a for a in attendees if a != user_email),
        )

    @property
    def time_label(self) -> str:
        """24-hour zero-padded start time, e.g. 0930."""
        return self.start_time.strftime("%H%M")
