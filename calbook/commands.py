"""
Validated request objects handed to the engines.

Requests are produced by an outer layer (CLI, config seeding, GUI forms)
and carry plain strings: date-times as 'YYYY-MM-DDTHH:MM', dates as
'YYYY-MM-DD', weekdays as letters from 'MTWRFSU'. The enum tag on each
request selects the engine variant.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from .errors import InvalidArgumentError


def _as_text(value: Any) -> Optional[str]:
    """Render TOML date/datetime values in the request text formats."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)


class CreateType(Enum):
    TIMED_SINGLE = "timed_single"
    TIMED_RECURRING_FOR = "timed_recurring_for"
    TIMED_RECURRING_UNTIL = "timed_recurring_until"
    ALL_DAY_SINGLE = "all_day_single"
    ALL_DAY_RECURRING_FOR = "all_day_recurring_for"
    ALL_DAY_RECURRING_UNTIL = "all_day_recurring_until"


class EditScope(Enum):
    SINGLE = "single"
    SERIES = "series"
    FORWARD = "forward"


class CopyType(Enum):
    SINGLE_EVENT = "single_event"
    EVENTS_ON_DATE = "events_on_date"
    EVENTS_BETWEEN_DATES = "events_between_dates"


class QueryType(Enum):
    PRINT_ON_DATE = "print_on_date"
    PRINT_IN_RANGE = "print_in_range"
    SHOW_STATUS_AT = "show_status_at"


@dataclass(frozen=True)
class CreateEventRequest:
    """A request to create one event or one recurring series."""
    type: CreateType
    subject: str
    start: Optional[str] = None
    end: Optional[str] = None
    on_date: Optional[str] = None
    weekdays: Optional[str] = None
    times: Optional[int] = None
    until: Optional[str] = None
    description: str = ""
    location: str = ""
    status: str = ""

    @classmethod
    def timed_single(cls, subject: str, start: str, end: str, **extra) -> 'CreateEventRequest':
        return cls(CreateType.TIMED_SINGLE, subject, start=start, end=end, **extra)

    @classmethod
    def timed_recurring_for(cls, subject: str, start: str, end: str,
                            weekdays: str, times: int, **extra) -> 'CreateEventRequest':
        return cls(CreateType.TIMED_RECURRING_FOR, subject, start=start, end=end,
                   weekdays=weekdays, times=times, **extra)

    @classmethod
    def timed_recurring_until(cls, subject: str, start: str, end: str,
                              weekdays: str, until: str, **extra) -> 'CreateEventRequest':
        return cls(CreateType.TIMED_RECURRING_UNTIL, subject, start=start, end=end,
                   weekdays=weekdays, until=until, **extra)

    @classmethod
    def all_day_single(cls, subject: str, on_date: str, **extra) -> 'CreateEventRequest':
        return cls(CreateType.ALL_DAY_SINGLE, subject, on_date=on_date, **extra)

    @classmethod
    def all_day_recurring_for(cls, subject: str, on_date: str,
                              weekdays: str, times: int, **extra) -> 'CreateEventRequest':
        return cls(CreateType.ALL_DAY_RECURRING_FOR, subject, on_date=on_date,
                   weekdays=weekdays, times=times, **extra)

    @classmethod
    def all_day_recurring_until(cls, subject: str, on_date: str,
                                weekdays: str, until: str, **extra) -> 'CreateEventRequest':
        return cls(CreateType.ALL_DAY_RECURRING_UNTIL, subject, on_date=on_date,
                   weekdays=weekdays, until=until, **extra)

    @classmethod
    def from_mapping(cls, data: dict) -> 'CreateEventRequest':
        """
        Build a request from a plain mapping (e.g. a TOML table).

        The variant follows from which keys are present: 'on' selects an
        all-day event, 'weekdays' a recurring one, and 'times' or 'until'
        its end condition.
        """
        subject = data.get('subject')
        if not subject:
            raise InvalidArgumentError("Event entry is missing a subject.")
        extra = {
            'description': data.get('description', ''),
            'location': data.get('location', ''),
            'status': data.get('status', ''),
        }
        weekdays = data.get('weekdays')
        times = data.get('times')
        until = _as_text(data.get('until'))
        all_day = 'on' in data

        if weekdays and times is None and until is None:
            raise InvalidArgumentError(
                f"Recurring event '{subject}' needs either 'times' or 'until'."
            )

        if all_day:
            on_date = _as_text(data['on'])
            if not weekdays:
                return cls.all_day_single(subject, on_date, **extra)
            if times is not None:
                return cls.all_day_recurring_for(subject, on_date, weekdays, times, **extra)
            return cls.all_day_recurring_until(subject, on_date, weekdays, until, **extra)

        start = _as_text(data.get('start'))
        end = _as_text(data.get('end'))
        if not start or not end:
            raise InvalidArgumentError(
                f"Event '{subject}' needs 'start' and 'end' (or 'on' for all-day)."
            )
        if not weekdays:
            return cls.timed_single(subject, start, end, **extra)
        if times is not None:
            return cls.timed_recurring_for(subject, start, end, weekdays, times, **extra)
        return cls.timed_recurring_until(subject, start, end, weekdays, until, **extra)


@dataclass(frozen=True)
class EditEventRequest:
    """
    A request to change one or more properties of existing occurrences.

    changes maps a property name (subject, start, end, location,
    description, status) to its new value. target_end is only used by
    the SINGLE scope.
    """
    scope: EditScope
    subject: str
    start: str
    changes: dict = field(default_factory=dict)
    end: Optional[str] = None

    @classmethod
    def single(cls, subject: str, start: str, end: str, changes: dict) -> 'EditEventRequest':
        return cls(EditScope.SINGLE, subject, start, dict(changes), end=end)

    @classmethod
    def series(cls, subject: str, start: str, changes: dict) -> 'EditEventRequest':
        return cls(EditScope.SERIES, subject, start, dict(changes))

    @classmethod
    def forward(cls, subject: str, start: str, changes: dict) -> 'EditEventRequest':
        return cls(EditScope.FORWARD, subject, start, dict(changes))

    @property
    def normalized_changes(self) -> dict:
        return {prop.strip().lower(): value for prop, value in self.changes.items()}


@dataclass(frozen=True)
class CopyEventRequest:
    """A request to copy events from the active calendar into a target calendar."""
    type: CopyType
    target_calendar: str
    event_name: Optional[str] = None
    source_start: Optional[str] = None
    target_start: Optional[str] = None
    source_date: Optional[str] = None
    target_date: Optional[str] = None
    interval_start: Optional[str] = None
    interval_end: Optional[str] = None

    @classmethod
    def single_event(cls, event_name: str, source_start: str,
                     target_calendar: str, target_start: str) -> 'CopyEventRequest':
        return cls(CopyType.SINGLE_EVENT, target_calendar, event_name=event_name,
                   source_start=source_start, target_start=target_start)

    @classmethod
    def events_on_date(cls, source_date: str, target_calendar: str,
                       target_date: str) -> 'CopyEventRequest':
        return cls(CopyType.EVENTS_ON_DATE, target_calendar,
                   source_date=source_date, target_date=target_date)

    @classmethod
    def events_between_dates(cls, interval_start: str, interval_end: str,
                             target_calendar: str, target_date: str) -> 'CopyEventRequest':
        return cls(CopyType.EVENTS_BETWEEN_DATES, target_calendar,
                   interval_start=interval_start, interval_end=interval_end,
                   target_date=target_date)


@dataclass(frozen=True)
class QueryEventRequest:
    type: QueryType
    on_date: Optional[str] = None
    range_start: Optional[str] = None
    range_end: Optional[str] = None
    at: Optional[str] = None

    @classmethod
    def on(cls, on_date: str) -> 'QueryEventRequest':
        return cls(QueryType.PRINT_ON_DATE, on_date=on_date)

    @classmethod
    def in_range(cls, range_start: str, range_end: str) -> 'QueryEventRequest':
        return cls(QueryType.PRINT_IN_RANGE, range_start=range_start, range_end=range_end)

    @classmethod
    def status_at(cls, at: str) -> 'QueryEventRequest':
        return cls(QueryType.SHOW_STATUS_AT, at=at)


@dataclass(frozen=True)
class QueryResult:
    """Events matched by a query, tagged with the query type for formatting."""
    events: frozenset
    query_type: QueryType

    @property
    def busy(self) -> bool:
        return bool(self.events)

    def sorted_events(self) -> list:
        return sorted(self.events, key=lambda e: (e.start, e.end, e.subject))
