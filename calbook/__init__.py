"""
calbook - named calendars with recurring events, scoped edits,
cross-calendar copies and timezone migration.

This package provides:
- Value model (model.py) - immutable Event and Calendar
- Request objects (commands.py) - tagged create/edit/copy/query requests
- Recurrence generator (recurrence.py)
- Edit engine (edit_engine.py) - single/series/forward scopes
- Copy engine (copy_engine.py) - weekday-preserving copies between calendars
- Queries (queries.py) backed by an interval tree (interval_tree.py)
- Exporters (exporters.py) - Google CSV and iCalendar
- Calendar model (calendar_model.py) - active calendar, atomic publish
- Configuration parsing (config.py)
"""

from .calendar_model import CalendarModel
from .calendar_repository import CalendarRepository
from .commands import (
    CopyEventRequest,
    CopyType,
    CreateEventRequest,
    CreateType,
    EditEventRequest,
    EditScope,
    QueryEventRequest,
    QueryResult,
    QueryType,
)
from .config import Config
from .errors import (
    AlreadyExistsError,
    CalendarError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from .model import Calendar, Event

__all__ = [
    'CalendarModel',
    'CalendarRepository',
    'Config',
    'Calendar',
    'Event',
    'CreateEventRequest',
    'CreateType',
    'EditEventRequest',
    'EditScope',
    'CopyEventRequest',
    'CopyType',
    'QueryEventRequest',
    'QueryResult',
    'QueryType',
    'CalendarError',
    'NotFoundError',
    'AlreadyExistsError',
    'InvalidArgumentError',
    'InvalidStateError',
]
