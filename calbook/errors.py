"""
Error taxonomy for calbook.

Every failure raised by the engines and the calendar model derives from
CalendarError, so presentation layers can catch one type and show the
message text. The subclasses also inherit from the closest builtin so
callers that only know about ValueError/LookupError keep working.
"""


class CalendarError(Exception):
    """Base class for all calendar failures."""


class NotFoundError(CalendarError, LookupError):
    """An event, series or calendar does not exist."""


class AlreadyExistsError(CalendarError):
    """A duplicate event or calendar name would be created."""


class InvalidArgumentError(CalendarError, ValueError):
    """A request carries a value that cannot be applied."""


class InvalidStateError(CalendarError, RuntimeError):
    """The model is not in a state that allows the operation."""
