"""
In-memory calendar repository.

Maps calendar names to immutable Calendar values. Saving a calendar
replaces whatever was stored under its name.
"""

from typing import Optional

from .model import Calendar


class CalendarRepository:
    """Name -> Calendar store used by CalendarModel."""

    def __init__(self):
        self._calendars: dict[str, Calendar] = {}

    def find(self, name: str) -> Optional[Calendar]:
        return self._calendars.get(name)

    def save(self, calendar: Calendar):
        self._calendars[calendar.name] = calendar

    def exists_by_name(self, name: str) -> bool:
        return name in self._calendars

    def delete_by_name(self, name: str) -> bool:
        """Remove a calendar. Returns False if no calendar had that name."""
        return self._calendars.pop(name, None) is not None

    def all_names(self) -> list[str]:
        return sorted(self._calendars)

    def __len__(self):
        return len(self._calendars)
