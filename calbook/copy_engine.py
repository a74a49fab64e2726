"""
Copy engine: duplicate events from a source calendar into a target calendar.

The source calendar is never modified. Every copy call builds the full
list of new events first, checks each against the target's existing
events, and returns the new target event set only when all of them pass.

Series ids are remapped once per call: each distinct source series id
gets exactly one fresh id, so a partial series copy forms its own
consistent series in the target.
"""

from datetime import date, datetime, timedelta
from typing import Callable

from .commands import CopyEventRequest, CopyType
from .debug import debug_print
from .errors import InvalidArgumentError, NotFoundError
from .model import Calendar, Event, new_series_id
from .timezone_utils import (
    at_time, local_date, parse_date, parse_datetime, shift, shift_days, start_of_day, to_zone,
)
from .validation import validate_no_duplicate


def _debug_print(message: str) -> None:
    debug_print("COPY", message)


class SeriesRemapper:
    """Stable 1:1 mapping from source series ids to fresh ids for one copy call."""

    def __init__(self):
        self._mapping: dict[str, str] = {}

    def remap(self, series_id: str) -> str:
        if not series_id:
            return ""
        if series_id not in self._mapping:
            self._mapping[series_id] = new_series_id()
        return self._mapping[series_id]

    def __len__(self):
        return len(self._mapping)


def copy(request: CopyEventRequest, source: Calendar, target: Calendar) -> frozenset[Event]:
    """
    Copy the events selected by request from source into target.

    Returns:
        The complete new event set of the target calendar

    Raises:
        NotFoundError: if nothing matches the selection
        InvalidArgumentError: for malformed dates or when a copied series
            occurrence would no longer start and end on the same day
        AlreadyExistsError: if any copied event collides with a target event
    """
    strategy = COPY_STRATEGIES.get(request.type)
    if strategy is None:
        raise InvalidArgumentError(f"Unsupported copy request: {request.type}")
    new_events = strategy(request, source, target)
    _debug_print(
        f"{request.type.value}: {len(new_events)} event(s) "
        f"'{source.name}' ({source.timezone_name}) -> '{target.name}' ({target.timezone_name})"
    )
    return target.events | frozenset(new_events)


# ==================== Shared helpers ====================

def _copied_event(original: Event, new_start: datetime, series_id: str) -> Event:
    """Build a copy starting at new_start with the original's exact duration."""
    new_end = shift(new_start, original.duration)
    if original.in_series and local_date(new_start) != local_date(new_end):
        raise InvalidArgumentError(
            "Error: Start Date and End Date should not differ for a recurring event. "
            f"Event would span from {local_date(new_start)} to {local_date(new_end)}"
        )
    return original.with_changes(start=new_start, end=new_end, series_id=series_id)


def _stage_all(candidates: list[Event], target: Calendar) -> list[Event]:
    staged: set[Event] = set()
    for candidate in candidates:
        validate_no_duplicate(candidate, target.events, pending_adds=staged)
        staged.add(candidate)
    return candidates


def _copy_with_day_offset(events: list[Event], days: int, source: Calendar,
                          target: Calendar) -> list[Event]:
    """
    Shift events by whole days in the source zone, then reproject into the target zone.

    Day arithmetic happens on the source wall clock so each event keeps
    its source weekday and time of day before reprojection.
    """
    remapper = SeriesRemapper()
    candidates = []
    for original in sorted(events, key=lambda e: (e.start, e.end, e.subject)):
        source_start = to_zone(original.start, source.timezone)
        new_start = to_zone(shift_days(source_start, days), target.timezone)
        candidates.append(_copied_event(original, new_start, remapper.remap(original.series_id)))
    return _stage_all(candidates, target)


def next_matching_weekday(anchor: date, weekday: int) -> date:
    """Snap anchor forward (0-6 days) to the next date falling on weekday."""
    return anchor + timedelta(days=(weekday - anchor.weekday()) % 7)


# ==================== Strategies ====================

def _copy_single_event(request: CopyEventRequest, source: Calendar,
                       target: Calendar) -> list[Event]:
    source_start = parse_datetime(request.source_start, source.timezone)
    original = next(
        (e for e in source.events
         if e.subject == request.event_name and e.start == source_start),
        None,
    )
    if original is None:
        raise NotFoundError(
            f"Event '{request.event_name}' starting at {request.source_start} not found."
        )
    new_start = parse_datetime(request.target_start, target.timezone)
    series_id = new_series_id() if original.in_series else ""
    return _stage_all([_copied_event(original, new_start, series_id)], target)


def _copy_events_on_date(request: CopyEventRequest, source: Calendar,
                         target: Calendar) -> list[Event]:
    source_day = parse_date(request.source_date)
    target_day = parse_date(request.target_date)
    selected = [e for e in source.events if local_date(e.start, source.timezone) == source_day]
    if not selected:
        raise NotFoundError(f"No events found on {request.source_date}")
    return _copy_with_day_offset(selected, (target_day - source_day).days, source, target)


def _copy_events_between_dates(request: CopyEventRequest, source: Calendar,
                               target: Calendar) -> list[Event]:
    first_day = parse_date(request.interval_start)
    last_day = parse_date(request.interval_end)
    anchor = parse_date(request.target_date)
    if last_day < first_day:
        raise InvalidArgumentError(
            f"Interval end {request.interval_end} is before its start {request.interval_start}."
        )

    interval_start = start_of_day(first_day, source.timezone)
    interval_end = shift(at_time(last_day, 23, 59, source.timezone), timedelta(seconds=59))
    selected = [
        e for e in source.events
        if e.start <= interval_end and e.end >= interval_start
    ]
    if not selected:
        raise NotFoundError(
            f"No events found between {request.interval_start} and {request.interval_end}"
        )

    earliest = min(selected, key=lambda e: e.start)
    earliest_day = local_date(earliest.start, source.timezone)
    target_day = next_matching_weekday(anchor, earliest_day.weekday())
    return _copy_with_day_offset(selected, (target_day - earliest_day).days, source, target)


COPY_STRATEGIES: dict[CopyType, Callable[[CopyEventRequest, Calendar, Calendar], list[Event]]] = {
    CopyType.SINGLE_EVENT: _copy_single_event,
    CopyType.EVENTS_ON_DATE: _copy_events_on_date,
    CopyType.EVENTS_BETWEEN_DATES: _copy_events_between_dates,
}
