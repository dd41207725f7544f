"""
utils/dates.py
--------------
Calendar helpers shared by the schedule logic and the handlers.

Month and year arithmetic uses dateutil's relativedelta, which clamps to the
last valid day of the target month:
    2024-01-31 + 1 month  -> 2024-02-29
    2023-01-31 + 1 month  -> 2023-02-28
    2024-02-29 + 1 year   -> 2025-02-28
"""

from datetime import date, datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from models.subscription import WEEKLY, MONTHLY, QUARTERLY, YEARLY

DateLike = Union[date, datetime, str]

_INTERVALS = {
    WEEKLY: timedelta(weeks=1),
    MONTHLY: relativedelta(months=1),
    QUARTERLY: relativedelta(months=3),
    YEARLY: relativedelta(years=1),
}


def to_date(value: DateLike, field_name: str = "date") -> date:
    """
    Normalize a date, datetime or ISO 'YYYY-MM-DD' string to a calendar date.

    Datetimes keep only their date component. A string may be a full ISO
    timestamp ('2024-01-15T10:30:00Z'); the whole string must parse, and
    only its date is kept.

    Raises:
        ValueError: If the value is empty or not a recognizable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            # fromisoformat takes any separator character; only 'T' and ' ' are dates
            if len(text) > 10 and text[10] in "T ":
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise ValueError(f"Invalid {field_name}: {value!r} (expected YYYY-MM-DD)")


def add_interval(start: DateLike, frequency: str) -> date:
    """
    Return the next occurrence after `start` for the given frequency.

    Unknown frequencies are treated as monthly.
    """
    return to_date(start) + _INTERVALS.get(frequency, _INTERVALS[MONTHLY])


def add_months(start: DateLike, months: int) -> date:
    """Add calendar months, clamping to the end of the target month."""
    return to_date(start) + relativedelta(months=months)
