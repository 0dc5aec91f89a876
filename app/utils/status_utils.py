"""
Hour status rules.

Any status may be replaced by any other at any time; an hour is a self-report the
employee is free to correct. What matters for concurrent writes is only which one
carries the later ``updated_at`` (see ``WorkLogStore.upsert``).
"""
from datetime import date, datetime
from typing import Dict, Iterable, Union
from schemas.work_log import WorkLogStatus, NOTE_MAX_LENGTH
from exceptions import InvalidInput

HOURS_PER_DAY = 24
DEFAULT_STATUS = WorkLogStatus.PENDING


def parse_status(value: Union[str, WorkLogStatus]) -> WorkLogStatus:
    if isinstance(value, WorkLogStatus):
        return value
    try:
        return WorkLogStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in WorkLogStatus)
        raise InvalidInput(f"Unknown status {value!r}, expected one of: {allowed}")


def validate_hour(hour) -> int:
    # bool is an int subclass, True would otherwise land in hour 1
    if isinstance(hour, bool) or not isinstance(hour, int):
        raise InvalidInput(f"Hour must be an integer, got {hour!r}")
    if not 0 <= hour < HOURS_PER_DAY:
        raise InvalidInput(f"Hour must be between 0 and {HOURS_PER_DAY - 1}, got {hour}")
    return hour


def validate_note(note) -> str:
    if note is None:
        return ""
    if not isinstance(note, str):
        raise InvalidInput("Note must be a string")
    if len(note) > NOTE_MAX_LENGTH:
        raise InvalidInput(f"Note is longer than {NOTE_MAX_LENGTH} characters")
    return note


def parse_day(day: Union[str, date]) -> date:
    """Accept a ``date`` (a ``datetime`` is truncated to its date) or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(day, datetime):
        return day.date()
    if isinstance(day, date):
        return day
    if isinstance(day, str):
        try:
            return date.fromisoformat(day)
        except ValueError:
            pass
    raise InvalidInput(f"Date must be an ISO calendar date (YYYY-MM-DD), got {day!r}")


def is_active(status: WorkLogStatus) -> bool:
    return status != WorkLogStatus.PENDING


def count_statuses(statuses: Iterable[WorkLogStatus]) -> Dict[WorkLogStatus, int]:
    counts = {status: 0 for status in WorkLogStatus}
    for status in statuses:
        counts[parse_status(status)] += 1
    return counts
