"""
Recurrence generator: expands one create request into Event occurrences.

Each CreateType maps to one generator function through CREATE_STRATEGIES.
Generators never touch the caller's event set; they return the new
occurrences and the caller merges them only on a normal return.
"""

from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Collection, Iterator

from .commands import CreateEventRequest, CreateType
from .debug import debug_print
from .errors import InvalidArgumentError
from .model import ALL_DAY_END, ALL_DAY_START, Event, new_series_id, parse_weekdays
from .timezone_utils import at_time, format_datetime, localize, parse_date, parse_naive_datetime
from .validation import validate_no_duplicate


def _debug_print(message: str) -> None:
    debug_print("CREATE", message)


def create(request: CreateEventRequest, existing_events: Collection[Event],
           timezone: tzinfo) -> set[Event]:
    """
    Generate the occurrences described by request.

    Args:
        request: The validated create request
        existing_events: Events already in the calendar (not modified)
        timezone: The calendar's zone; request times are wall-clock times in it

    Returns:
        The set of new events

    Raises:
        InvalidArgumentError: for inconsistent times, weekdays or counts
        AlreadyExistsError: on the first occurrence that collides with an existing event
    """
    strategy = CREATE_STRATEGIES.get(request.type)
    if strategy is None:
        raise InvalidArgumentError(f"Unsupported create request: {request.type}")
    events = strategy(request, existing_events, timezone)
    _debug_print(f"{request.type.value}: '{request.subject}' -> {len(events)} occurrence(s)")
    return events


# ==================== Helpers ====================

def _build(request: CreateEventRequest, start: datetime, end: datetime,
           series_id: str = "") -> Event:
    return Event(
        subject=request.subject,
        start=start,
        end=end,
        series_id=series_id,
        description=request.description or "",
        location=request.location or "",
        status=request.status or "",
    )


def _add(event: Event, result: set[Event], existing_events: Collection[Event]) -> None:
    validate_no_duplicate(event, existing_events, pending_adds=result)
    result.add(event)


def _parse_times(request: CreateEventRequest) -> tuple[datetime, datetime]:
    start = parse_naive_datetime(request.start)
    end = parse_naive_datetime(request.end)
    if end < start:
        raise InvalidArgumentError("Error: Event end time cannot be before its start time.")
    return start, end


def _ordered(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """Check order on zoned values; a start inside a DST gap moves forward."""
    if end < start:
        raise InvalidArgumentError(
            "Error: Event end time cannot be before its start time "
            f"({format_datetime(start)} to {format_datetime(end)})."
        )
    return start, end


def _parse_count(request: CreateEventRequest) -> int:
    try:
        count = int(request.times)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Invalid repeat count '{request.times}'.")
    if count <= 0:
        raise InvalidArgumentError("Repeat count must be a positive number.")
    return count


def _walk_for(first_day: date, weekdays: frozenset[int], count: int) -> Iterator[date]:
    """Yield the first count dates on or after first_day that fall on weekdays."""
    day = first_day
    emitted = 0
    while emitted < count:
        if day.weekday() in weekdays:
            yield day
            emitted += 1
        day += timedelta(days=1)


def _walk_until(first_day: date, weekdays: frozenset[int], until: date) -> Iterator[date]:
    """Yield every date in [first_day, until] that falls on weekdays."""
    if until < first_day:
        raise InvalidArgumentError(
            "Error: 'until' date cannot be before the event's start date."
        )
    day = first_day
    while day <= until:
        if day.weekday() in weekdays:
            yield day
        day += timedelta(days=1)


def _timed_series(request: CreateEventRequest, days: Iterator[date],
                  start: datetime, end: datetime,
                  existing_events: Collection[Event], timezone: tzinfo) -> set[Event]:
    series_id = new_series_id()
    result: set[Event] = set()
    for day in days:
        occurrence_start, occurrence_end = _ordered(
            localize(datetime.combine(day, start.time()), timezone),
            localize(datetime.combine(day, end.time()), timezone),
        )
        occurrence = _build(request, occurrence_start, occurrence_end, series_id)
        _add(occurrence, result, existing_events)
    return result


def _all_day_series(request: CreateEventRequest, days: Iterator[date],
                    existing_events: Collection[Event], timezone: tzinfo) -> set[Event]:
    series_id = new_series_id()
    result: set[Event] = set()
    for day in days:
        occurrence = _build(
            request,
            at_time(day, *ALL_DAY_START, timezone),
            at_time(day, *ALL_DAY_END, timezone),
            series_id,
        )
        _add(occurrence, result, existing_events)
    return result


def _require_same_day(start: datetime, end: datetime) -> None:
    if start.date() != end.date():
        raise InvalidArgumentError(
            "Error: Recurring events must start and end on the same day. "
            f"Event would span from {start.date()} to {end.date()}"
        )


# ==================== Strategies ====================

def _create_timed_single(request, existing_events, timezone) -> set[Event]:
    start, end = _parse_times(request)
    start, end = _ordered(localize(start, timezone), localize(end, timezone))
    result: set[Event] = set()
    _add(_build(request, start, end), result, existing_events)
    return result


def _create_all_day_single(request, existing_events, timezone) -> set[Event]:
    day = parse_date(request.on_date)
    result: set[Event] = set()
    _add(_build(request, at_time(day, *ALL_DAY_START, timezone),
                at_time(day, *ALL_DAY_END, timezone)),
         result, existing_events)
    return result


def _create_timed_recurring_for(request, existing_events, timezone) -> set[Event]:
    start, end = _parse_times(request)
    _require_same_day(start, end)
    days = _walk_for(start.date(), parse_weekdays(request.weekdays), _parse_count(request))
    return _timed_series(request, days, start, end, existing_events, timezone)


def _create_timed_recurring_until(request, existing_events, timezone) -> set[Event]:
    start, end = _parse_times(request)
    _require_same_day(start, end)
    days = _walk_until(start.date(), parse_weekdays(request.weekdays),
                       parse_date(request.until))
    return _timed_series(request, days, start, end, existing_events, timezone)


def _create_all_day_recurring_for(request, existing_events, timezone) -> set[Event]:
    days = _walk_for(parse_date(request.on_date), parse_weekdays(request.weekdays),
                     _parse_count(request))
    return _all_day_series(request, days, existing_events, timezone)


def _create_all_day_recurring_until(request, existing_events, timezone) -> set[Event]:
    days = _walk_until(parse_date(request.on_date), parse_weekdays(request.weekdays),
                       parse_date(request.until))
    return _all_day_series(request, days, existing_events, timezone)


CREATE_STRATEGIES: dict[CreateType, Callable[..., set[Event]]] = {
    CreateType.TIMED_SINGLE: _create_timed_single,
    CreateType.ALL_DAY_SINGLE: _create_all_day_single,
    CreateType.TIMED_RECURRING_FOR: _create_timed_recurring_for,
    CreateType.TIMED_RECURRING_UNTIL: _create_timed_recurring_until,
    CreateType.ALL_DAY_RECURRING_FOR: _create_all_day_recurring_for,
    CreateType.ALL_DAY_RECURRING_UNTIL: _create_all_day_recurring_until,
}
