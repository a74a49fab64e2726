"""Shared fixtures for calbook tests.

Provides zones, a ready-made calendar model with a 'Work' calendar in
New York and a 'Personal' calendar in Los Angeles, and small helpers
for building events directly.
"""

from datetime import datetime

import pytest
import pytz

from calbook import CalendarModel, Event
from calbook.debug import set_debug


NEW_YORK = pytz.timezone("America/New_York")
LOS_ANGELES = pytz.timezone("America/Los_Angeles")
LONDON = pytz.timezone("Europe/London")


def ny(text: str) -> datetime:
    """Aware New York datetime from 'YYYY-MM-DDTHH:MM'."""
    return NEW_YORK.localize(datetime.strptime(text, "%Y-%m-%dT%H:%M"))


def la(text: str) -> datetime:
    """Aware Los Angeles datetime from 'YYYY-MM-DDTHH:MM'."""
    return LOS_ANGELES.localize(datetime.strptime(text, "%Y-%m-%dT%H:%M"))


def make_event(subject: str, start: str, end: str, series_id: str = "", **extra) -> Event:
    return Event(subject=subject, start=ny(start), end=ny(end), series_id=series_id, **extra)


@pytest.fixture(autouse=True)
def debug_off():
    """Diagnostic output is a process-wide switch; reset it around each test."""
    set_debug(False)
    yield
    set_debug(False)


@pytest.fixture
def model() -> CalendarModel:
    """Model with 'Work' (New York, active) and 'Personal' (Los Angeles)."""
    calendar_model = CalendarModel()
    calendar_model.create_calendar("Work", "America/New_York")
    calendar_model.create_calendar("Personal", "America/Los_Angeles")
    calendar_model.set_active_calendar("Work")
    return calendar_model


@pytest.fixture
def work_events(model):
    """Current event set of the 'Work' calendar (call to re-read)."""
    def _events():
        return model.get_calendar("Work").events
    return _events
