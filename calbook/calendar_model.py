"""
Calendar model: the orchestrator in front of the engines.

Holds the active calendar selection and a repository of calendars. Every
mutating operation follows the same cycle: read the stored Calendar,
hand its event set to an engine, and on normal return save a rebuilt
Calendar in its place. If an engine raises, nothing is saved, so stored
calendars are left exactly as they were.
"""

from pathlib import Path
from typing import Callable, Optional, Union

from . import copy_engine, edit_engine, queries, recurrence
from .calendar_repository import CalendarRepository
from .commands import (
    CopyEventRequest, CreateEventRequest, EditEventRequest, QueryEventRequest, QueryResult,
)
from .debug import debug_print
from .errors import AlreadyExistsError, InvalidArgumentError, InvalidStateError, NotFoundError
from .exporters import get_exporter
from .model import Calendar, Event, weekday_name
from .timezone_utils import get_timezone, to_zone, zone_name


def _debug_print(message: str) -> None:
    debug_print("MODEL", message)


class CalendarModel:
    """
    Entry point for calendar operations.

    Usage:
        model = CalendarModel()
        model.create_calendar("Work", "America/New_York")
        model.set_active_calendar("Work")
        model.create_event(CreateEventRequest.timed_single(...))
    """

    def __init__(self, repository: Optional[CalendarRepository] = None,
                 export_dir: Optional[Union[str, Path]] = None):
        self._repository = repository if repository is not None else CalendarRepository()
        self._active_name: Optional[str] = None
        self._export_dir = Path(export_dir) if export_dir else None
        self._on_change_callback: Optional[Callable[[str], None]] = None

    @property
    def repository(self) -> CalendarRepository:
        return self._repository

    def set_on_change_callback(self, callback: Callable[[str], None]) -> None:
        """Register a callback receiving the calendar name after every saved change."""
        self._on_change_callback = callback

    def _publish(self, calendar: Calendar) -> Calendar:
        self._repository.save(calendar)
        _debug_print(f"saved '{calendar.name}' ({len(calendar.events)} events)")
        if self._on_change_callback:
            self._on_change_callback(calendar.name)
        return calendar

    # ==================== Calendar selection ====================

    def set_active_calendar(self, name: str) -> None:
        if not self._repository.exists_by_name(name):
            raise NotFoundError(f"Error: Calendar '{name}' not found.")
        self._active_name = name

    def get_active_calendar(self) -> Optional[str]:
        return self._active_name

    def _active(self) -> Calendar:
        if self._active_name is None:
            raise InvalidStateError("No calendar is currently selected.")
        calendar = self._repository.find(self._active_name)
        if calendar is None:
            raise NotFoundError(f"Calendar '{self._active_name}' not found.")
        return calendar

    def _require(self, name: str) -> Calendar:
        calendar = self._repository.find(name)
        if calendar is None:
            raise NotFoundError(f"Calendar '{name}' not found.")
        return calendar

    # ==================== Calendar management ====================

    def create_calendar(self, name: str, zone: str) -> Calendar:
        if not name or not name.strip():
            raise InvalidArgumentError("Calendar name must not be empty.")
        if self._repository.exists_by_name(name):
            raise AlreadyExistsError(f"Error: A calendar with the name '{name}' already exists.")
        return self._publish(Calendar(name=name, timezone=get_timezone(zone)))

    def calendar_exists(self, name: str) -> bool:
        return self._repository.exists_by_name(name)

    def get_calendar(self, name: str) -> Optional[Calendar]:
        return self._repository.find(name)

    def get_calendar_timezone(self, name: str) -> str:
        return self._require(name).timezone_name

    def all_calendar_names(self) -> list[str]:
        return self._repository.all_names()

    def edit_calendar(self, name: str, property_name: str, value: str) -> Calendar:
        """Change a calendar's 'name' or 'timezone'."""
        prop = (property_name or "").strip().lower()
        if prop == 'name':
            return self.update_calendar_name(name, value)
        if prop == 'timezone':
            return self.update_calendar_timezone(name, value)
        raise InvalidArgumentError(f"Error: Unknown property '{property_name}'")

    def update_calendar_name(self, current_name: str, new_name: str) -> Calendar:
        original = self._require(current_name)
        if not new_name or not new_name.strip():
            raise InvalidArgumentError("Calendar name must not be empty.")
        if self._repository.exists_by_name(new_name):
            raise AlreadyExistsError(f"Error: A calendar with the name '{new_name}' already exists.")
        renamed = original.renamed(new_name)
        self._repository.delete_by_name(current_name)
        if self._active_name == current_name:
            self._active_name = new_name
        return self._publish(renamed)

    def update_calendar_timezone(self, name: str, zone: str) -> Calendar:
        """
        Move a calendar into another zone.

        Every event keeps its instant and duration. The whole migration is
        rejected if any event would change its local day span or weekday.
        """
        original = self._require(name)
        new_zone = get_timezone(zone)
        if zone_name(new_zone) == original.timezone_name:
            return original

        migrated = []
        for event in sorted(original.events, key=lambda e: (e.start, e.end, e.subject)):
            new_start = to_zone(event.start, new_zone)
            new_end = to_zone(event.end, new_zone)
            old_span = (event.end.date() - event.start.date()).days
            new_span = (new_end.date() - new_start.date()).days
            if old_span != new_span:
                raise InvalidArgumentError(
                    f"Error: Timezone change would cause event '{event.subject}' to span "
                    f"from {new_start.date()} to {new_end.date()}."
                )
            if event.start.weekday() != new_start.weekday():
                raise InvalidArgumentError(
                    f"Error: Timezone change would cause event '{event.subject}' to shift "
                    f"from {weekday_name(event.start)} to {weekday_name(new_start)}."
                )
            migrated.append(event.with_changes(start=new_start, end=new_end))

        _debug_print(f"'{name}': {original.timezone_name} -> {zone_name(new_zone)}")
        return self._publish(Calendar(name=name, timezone=new_zone, events=frozenset(migrated)))

    # ==================== Event operations ====================

    def create_event(self, request: CreateEventRequest) -> set[Event]:
        """Create one event or series in the active calendar. Returns the new events."""
        calendar = self._active()
        new_events = recurrence.create(request, calendar.events, calendar.timezone)
        self._publish(calendar.with_events(calendar.events | new_events))
        return new_events

    def edit_event(self, request: EditEventRequest) -> Calendar:
        calendar = self._active()
        events = edit_engine.edit(request, calendar.events, calendar.timezone)
        return self._publish(calendar.with_events(events))

    def copy_event(self, request: CopyEventRequest) -> Calendar:
        """Copy events from the active calendar into request.target_calendar."""
        source = self._active()
        target = self._repository.find(request.target_calendar)
        if target is None:
            raise NotFoundError(f"Target calendar '{request.target_calendar}' not found.")
        events = copy_engine.copy(request, source, target)
        return self._publish(target.with_events(events))

    def query_events(self, request: QueryEventRequest) -> QueryResult:
        calendar = self._active()
        return queries.find(request, calendar.events, calendar.timezone)

    def export_events(self, file_name: Union[str, Path]) -> str:
        """Export the active calendar's events. Returns the absolute file path."""
        calendar = self._active()
        exporter = get_exporter(str(file_name))
        path = Path(file_name)
        if not path.is_absolute() and self._export_dir is not None:
            path = self._export_dir / path
        return exporter.export(calendar.events, path)
