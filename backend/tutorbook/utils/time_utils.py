from __future__ import annotations

import re
from datetime import time
from typing import Any

from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import TimeFormatException

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time_to_minutes(value: Any) -> int:
    """
    Convert an "HH:MM" (or "HH:MM:SS") string to minutes since midnight.

    "24:00" is accepted as 1440 (end of day). Seconds are ignored.

    Raises:
        TimeFormatException: If value is not a well-formed time of day.
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        raise TimeFormatException(value)
    match = _TIME_RE.match(value.strip())
    if not match:
        raise TimeFormatException(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise TimeFormatException(value)
    return hours * 60 + minutes


def minutes_to_time_str(minutes: int) -> str:
    """
    Convert minutes since midnight to HH:MM.

    1440 is rendered as "24:00".
    """
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    if minutes == MINUTES_PER_DAY:
        return "24:00"
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_to_time(minutes: int) -> time:
    """Convert minutes since midnight to a time; 1440 maps to time.max."""
    if minutes == MINUTES_PER_DAY:
        return time.max
    return time(minutes // 60, minutes % 60)


def normalize_time_str(value: Any) -> str:
    """Canonical zero-padded HH:MM form of a time value."""
    return minutes_to_time_str(parse_time_to_minutes(value))


def add_minutes(value: str, minutes: int) -> str:
    """Add minutes to an HH:MM string without wrapping past midnight."""
    return minutes_to_time_str(parse_time_to_minutes(value) + minutes)


def round_up_to_step(minutes: int, step: int) -> int:
    """Round minutes up to the next multiple of step (unchanged when aligned)."""
    if step <= 0:
        raise ValueError(f"step must be positive: {step}")
    return -(-minutes // step) * step


def duration_minutes(start: str, end: str) -> int:
    """Minutes between two HH:MM strings."""
    return parse_time_to_minutes(end) - parse_time_to_minutes(start)


def format_time_display(value: str) -> str:
    """Render HH:MM in 12-hour form, e.g. "14:30" -> "2:30 PM"."""
    total = parse_time_to_minutes(value) % MINUTES_PER_DAY
    hours, mins = divmod(total, 60)
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{mins:02d} {period}"


def format_time_range(start: str, end: str) -> str:
    return f"{format_time_display(start)} - {format_time_display(end)}"
