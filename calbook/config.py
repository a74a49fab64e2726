"""
Configuration parser for calbook.

Reads a TOML file describing the default zone, the export directory and
the calendars to create at startup (optionally seeded with events).

Example:

    [General]
    default_timezone = "America/New_York"
    export_dir = "~/calendars"
    debug = false

    [Calendar.Work]
    timezone = "America/New_York"
    active = true

    [[Calendar.Work.events]]
    subject = "Standup"
    start = "2025-12-01T09:00"
    end = "2025-12-01T09:15"
    weekdays = "MWF"
    times = 3
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .commands import CreateEventRequest
from .debug import debug_print
from .errors import InvalidArgumentError
from .timezone_utils import get_timezone


DEFAULT_TIMEZONE = "America/New_York"


def _debug_print(message: str) -> None:
    debug_print("CONFIG", message)


@dataclass
class CalendarConfig:
    """One calendar to create at startup."""
    name: str
    timezone: str = DEFAULT_TIMEZONE
    active: bool = False
    events: list[CreateEventRequest] = field(default_factory=list)


@dataclass
class Config:
    """Main configuration container for calbook."""

    default_timezone: str = DEFAULT_TIMEZONE
    export_dir: Path = field(default_factory=Path.cwd)
    debug: bool = False
    calendars: list[CalendarConfig] = field(default_factory=list)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'calbook' / 'calbook.toml'

    @property
    def active_calendar(self) -> Optional[str]:
        """Name of the calendar marked active, else the first configured one."""
        for calendar in self.calendars:
            if calendar.active:
                return calendar.name
        return self.calendars[0].name if self.calendars else None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from a TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise InvalidArgumentError(f"Invalid configuration file {config_path}: {e}")

        _debug_print(f"Loaded {config_path} (sections: {list(data.keys())})")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        general = data.get('General', {})
        default_timezone = general.get('default_timezone', DEFAULT_TIMEZONE)
        get_timezone(default_timezone)

        export_dir_str = general.get('export_dir')
        export_dir = Path(os.path.expanduser(export_dir_str)) if export_dir_str else Path.cwd()

        debug = general.get('debug', False)
        if not isinstance(debug, bool):
            raise InvalidArgumentError("[General] debug must be true or false.")

        # Supports both [Calendar.Name] (quoted key) and [Calendar] with nested sub-tables
        calendars = []
        for key, value in data.items():
            if key.startswith('Calendar.') and isinstance(value, dict):
                calendars.append(_parse_calendar(key.split('.', 1)[1], value, default_timezone))
            elif key == 'Calendar' and isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    if isinstance(sub_value, dict):
                        calendars.append(_parse_calendar(sub_key, sub_value, default_timezone))

        names = [c.name for c in calendars]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidArgumentError(f"Calendar configured more than once: {', '.join(duplicates)}")

        _debug_print(f"Total calendars configured: {len(calendars)}")
        return cls(
            default_timezone=default_timezone,
            export_dir=export_dir,
            debug=debug,
            calendars=calendars,
        )


def _parse_calendar(name: str, value: dict, default_timezone: str) -> CalendarConfig:
    timezone = value.get('timezone', default_timezone)
    get_timezone(timezone)

    raw_events = value.get('events', [])
    if not isinstance(raw_events, list):
        raise InvalidArgumentError(f"[Calendar.{name}] events must be a list of tables.")
    events = []
    for entry in raw_events:
        if not isinstance(entry, dict):
            raise InvalidArgumentError(f"[Calendar.{name}] events must be a list of tables.")
        events.append(CreateEventRequest.from_mapping(entry))

    _debug_print(f"Found calendar: {name} ({timezone}, {len(events)} event entries)")
    return CalendarConfig(
        name=name,
        timezone=timezone,
        active=bool(value.get('active', False)),
        events=events,
    )
