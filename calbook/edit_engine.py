"""
Edit engine: scoped changes to existing occurrences.

An edit locates its target occurrence(s), selects the affected group
for the requested scope, stages the whole group for removal and builds
one replacement per member. Every replacement passes the duplicate check
before the next one is built; the caller's event set is never modified,
and the new set is only returned when the whole batch succeeded.

Series membership after an edit:
- changing start gives the edited group a fresh series id, splitting it
  from any untouched remainder of its series;
- every other change keeps the group's series id.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Callable, Collection, Optional

from .commands import EditEventRequest, EditScope
from .debug import debug_print
from .errors import CalendarError, InvalidArgumentError, NotFoundError
from .model import Event, new_series_id
from .timezone_utils import format_datetime, parse_datetime, shift
from .validation import validate_no_duplicate


TIME_PROPERTIES = ('start', 'end')
TEXT_PROPERTIES = ('subject', 'description', 'location', 'status')
EDITABLE_PROPERTIES = TIME_PROPERTIES + TEXT_PROPERTIES


def _debug_print(message: str) -> None:
    debug_print("EDIT", message)


# ==================== Occurrence lookup ====================

def find_by_subject_and_start(subject: str, start: datetime,
                              events: Collection[Event]) -> list[Event]:
    return sorted(
        (e for e in events if e.subject == subject and e.start == start),
        key=lambda e: e.end,
    )


def find_series(series_id: str, events: Collection[Event]) -> list[Event]:
    if not series_id:
        return []
    return [e for e in events if e.series_id == series_id]


def find_series_from(series_id: str, from_start: datetime,
                     events: Collection[Event]) -> list[Event]:
    return [e for e in find_series(series_id, events) if e.start >= from_start]


def _select_single(target: Event, events: Collection[Event]) -> list[Event]:
    return [target]


def _select_series(target: Event, events: Collection[Event]) -> list[Event]:
    if not target.in_series:
        return [target]
    return find_series(target.series_id, events)


def _select_forward(target: Event, events: Collection[Event]) -> list[Event]:
    if not target.in_series:
        return [target]
    return find_series_from(target.series_id, target.start, events)


SCOPE_SELECTORS: dict[EditScope, Callable[[Event, Collection[Event]], list[Event]]] = {
    EditScope.SINGLE: _select_single,
    EditScope.SERIES: _select_series,
    EditScope.FORWARD: _select_forward,
}


# ==================== Entry point ====================

def edit(request: EditEventRequest, events: Collection[Event],
         timezone: tzinfo) -> set[Event]:
    """
    Apply an edit request to a snapshot of a calendar's events.

    Args:
        request: The validated edit request
        events: The calendar's current events (not modified)
        timezone: The calendar's zone; request times are wall-clock times in it

    Returns:
        The complete new event set

    Raises:
        NotFoundError: if no occurrence matches the request
        InvalidArgumentError: for unknown properties or impossible times
        AlreadyExistsError: if a replacement would duplicate another event
    """
    changes = _validated_changes(request)
    targets = _find_targets(request, events, timezone)
    selector = SCOPE_SELECTORS[request.scope]

    pending_removals: set[Event] = set()
    pending_adds: set[Event] = set()

    for target in targets:
        if target in pending_removals:
            # Already covered by the group of an earlier target
            continue
        group = sorted(selector(target, events), key=lambda e: (e.start, e.end))
        pending_removals.update(group)
        _edit_group(target, group, changes, timezone, events, pending_adds, pending_removals)

    _debug_print(
        f"{request.scope.value} edit of '{request.subject}': "
        f"replaced {len(pending_removals)} occurrence(s) "
        f"({', '.join(sorted(changes))})"
    )
    result = {e for e in events if e not in pending_removals}
    result.update(pending_adds)
    return result


def _validated_changes(request: EditEventRequest) -> dict:
    changes = request.normalized_changes
    if not changes:
        raise InvalidArgumentError("Edit request does not change any property.")
    for prop in changes:
        if prop not in EDITABLE_PROPERTIES:
            raise InvalidArgumentError(f"Unknown property: {prop}")
    return changes


def _find_targets(request: EditEventRequest, events: Collection[Event],
                  timezone: tzinfo) -> list[Event]:
    start = parse_datetime(request.start, timezone)

    if request.scope is EditScope.SINGLE:
        if not request.end:
            raise InvalidArgumentError("Editing a single event requires its end time.")
        end = parse_datetime(request.end, timezone)
        for event in events:
            if event.subject == request.subject and event.start == start and event.end == end:
                return [event]
        raise NotFoundError(
            f"Event not found with subject '{request.subject}' "
            f"from {format_datetime(start)} to {format_datetime(end)}"
        )

    matches = find_by_subject_and_start(request.subject, start, events)
    if not matches:
        raise NotFoundError(
            f"Event not found with subject '{request.subject}' "
            f"starting at {format_datetime(start)}"
        )
    return matches


# ==================== Group edit ====================

def _edit_group(
    target: Event,
    group: list[Event],
    changes: dict,
    timezone: tzinfo,
    events: Collection[Event],
    pending_adds: set[Event],
    pending_removals: set[Event],
) -> None:
    """Build, check and stage the replacements for one scoped group."""
    has_start = 'start' in changes
    has_end = 'end' in changes
    start_offset, end_offset = _offsets(target, group, changes, timezone)

    # A start change splits the group off into its own series
    series_id: Optional[str] = None
    if has_start and target.in_series:
        series_id = new_series_id()

    text_changes = {prop: changes[prop] for prop in TEXT_PROPERTIES if prop in changes}
    time_edited = has_start or has_end

    for position, original in enumerate(group, start=1):
        try:
            replacement = _replacement(original, start_offset, end_offset,
                                       text_changes, series_id)
            if time_edited:
                _check_times(replacement, single_day=original.in_series or bool(series_id))
            validate_no_duplicate(replacement, events, pending_adds, pending_removals)
        except CalendarError as exc:
            if len(group) > 1:
                raise type(exc)(
                    f"Failed to update event #{position} in series "
                    f"(starting at {format_datetime(original.start)}): {exc}"
                ) from exc
            raise
        pending_adds.add(replacement)


def _offsets(target: Event, group: list[Event], changes: dict,
             timezone: tzinfo) -> tuple[timedelta, timedelta]:
    """
    Compute the (start, end) offsets applied to every member of a group.

    With both start and end requested the earliest occurrence is the
    reference for both offsets; a lone start change moves the whole
    occurrence; a lone end change only moves the end.
    """
    zero = timedelta(0)
    has_start = 'start' in changes
    has_end = 'end' in changes

    if has_start and has_end:
        reference = group[0]
        new_start = parse_datetime(changes['start'], timezone)
        new_end = parse_datetime(changes['end'], timezone)
        return new_start - reference.start, new_end - reference.end
    if has_start:
        offset = parse_datetime(changes['start'], timezone) - target.start
        return offset, offset
    if has_end:
        return zero, parse_datetime(changes['end'], timezone) - target.end
    return zero, zero


def _replacement(original: Event, start_offset: timedelta, end_offset: timedelta,
                 text_changes: dict, series_id: Optional[str]) -> Event:
    fields = dict(text_changes)
    if start_offset:
        fields['start'] = shift(original.start, start_offset)
    if end_offset:
        fields['end'] = shift(original.end, end_offset)
    if series_id is not None:
        fields['series_id'] = series_id
    return original.with_changes(**fields)


def _check_times(event: Event, single_day: bool) -> None:
    if not event.start < event.end:
        raise InvalidArgumentError(
            f"Invalid update: New start time ({format_datetime(event.start)}) "
            f"must be before end time ({format_datetime(event.end)})"
        )
    if single_day and not event.spans_single_day():
        raise InvalidArgumentError(
            "Invalid update: Events in a series must start and end on the same day. "
            f"Event would span from {event.start.date()} to {event.end.date()}"
        )
