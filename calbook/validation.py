"""
Duplicate detection shared by the create, edit and copy engines.

Each engine stages a batch of additions and removals before anything is
published; validate_no_duplicate() is called once per candidate inside
the batch, so the first collision aborts the whole batch.
"""

from typing import Collection

from .errors import AlreadyExistsError
from .model import Event
from .timezone_utils import format_datetime


def validate_no_duplicate(
    candidate: Event,
    existing_events: Collection[Event],
    pending_adds: Collection[Event] = (),
    pending_removals: Collection[Event] = (),
) -> None:
    """
    Check that adding candidate keeps the event set duplicate-free.

    An existing event that is also staged for removal does not count, so
    replacing an event in place is allowed.

    Raises:
        AlreadyExistsError: if candidate collides with a remaining event
            or with another addition staged in the same batch.
    """
    if candidate in existing_events and candidate not in pending_removals:
        raise AlreadyExistsError(
            f"An event with subject '{candidate.subject}' from "
            f"{format_datetime(candidate.start)} to {format_datetime(candidate.end)} "
            f"already exists."
        )
    if candidate in pending_adds:
        raise AlreadyExistsError(
            f"Would create duplicate events: subject '{candidate.subject}' from "
            f"{format_datetime(candidate.start)} to {format_datetime(candidate.end)} "
            f"already exists in this change."
        )
