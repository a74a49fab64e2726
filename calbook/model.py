"""
Event and Calendar value model.

Both types are immutable: every edit produces a new Event, every change
to a calendar's event set produces a new Calendar that replaces the old
one in the repository. Event identity for duplicate detection is the
(subject, start, end) triple; the other fields ride along.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, tzinfo
from typing import Iterable

from .errors import InvalidArgumentError
from .timezone_utils import format_datetime, zone_name


# Fixed wall-clock window used for all-day events
ALL_DAY_START = (8, 0)
ALL_DAY_END = (17, 0)

# Single-letter weekday codes used by recurring requests (datetime.weekday() values)
WEEKDAY_CODES = {
    'M': 0,
    'T': 1,
    'W': 2,
    'R': 3,
    'F': 4,
    'S': 5,
    'U': 6,
}

WEEKDAY_NAMES = (
    "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY"
)


def parse_weekdays(codes: str) -> frozenset[int]:
    """
    Parse a weekday code string such as 'MWF' into datetime.weekday() values.

    Raises:
        InvalidArgumentError: if the string names no weekday or has unknown letters.
    """
    codes = (codes or "").strip()
    if not codes:
        raise InvalidArgumentError("Recurring events need at least one weekday.")
    days = set()
    for char in codes.upper():
        if char not in WEEKDAY_CODES:
            raise InvalidArgumentError(
                f"Unknown weekday code '{char}' (use letters from MTWRFSU)."
            )
        days.add(WEEKDAY_CODES[char])
    return frozenset(days)


def weekday_name(dt: datetime) -> str:
    return WEEKDAY_NAMES[dt.weekday()]


def new_series_id() -> str:
    """Mint an opaque identifier for a new series."""
    return str(uuid.uuid4())


@dataclass(frozen=True, eq=False)
class Event:
    """
    One calendar entry.

    start and end are aware datetimes in the owning calendar's zone.
    series_id is empty for standalone events; occurrences created by one
    recurring request share the same non-empty id.
    """
    subject: str
    start: datetime
    end: datetime
    series_id: str = ""
    description: str = ""
    location: str = ""
    status: str = ""

    @property
    def key(self) -> tuple:
        return (self.subject, self.start, self.end)

    @property
    def in_series(self) -> bool:
        return bool(self.series_id)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def spans_single_day(self) -> bool:
        return self.start.date() == self.end.date()

    def with_changes(self, **changes) -> 'Event':
        """Return a copy of this event with some fields replaced."""
        return replace(self, **changes)

    def __hash__(self):
        return hash(self.key)

    def __eq__(self, other):
        if isinstance(other, Event):
            return self.key == other.key
        return NotImplemented

    def __repr__(self):
        return (
            f"Event(subject={self.subject!r}, start={format_datetime(self.start)}, "
            f"end={format_datetime(self.end)}, series_id={self.series_id!r})"
        )


@dataclass(frozen=True)
class Calendar:
    """A named calendar: one zone plus a duplicate-free set of events."""
    name: str
    timezone: tzinfo
    events: frozenset = field(default_factory=frozenset)

    @property
    def timezone_name(self) -> str:
        return zone_name(self.timezone)

    def with_events(self, events: Iterable[Event]) -> 'Calendar':
        return Calendar(name=self.name, timezone=self.timezone, events=frozenset(events))

    def renamed(self, name: str) -> 'Calendar':
        return Calendar(name=name, timezone=self.timezone, events=self.events)

    def __repr__(self):
        return (
            f"Calendar(name={self.name!r}, timezone={self.timezone_name!r}, "
            f"events={len(self.events)})"
        )
