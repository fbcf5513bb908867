# backend/book_exchange/services/matching/exchange_calendar.py
"""
Exchange-date policy.

Exchanges happen Monday to Friday inside a daily window (09:30-18:30 by
default) split into three equal periods.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, Tuple

from ...models.enums import TimeSlotPeriod

DEFAULT_DAY_START = time(9, 30)
DEFAULT_DAY_END = time(18, 30)

PERIOD_SEQUENCE = (
    TimeSlotPeriod.MORNING,
    TimeSlotPeriod.AFTERNOON,
    TimeSlotPeriod.EVENING,
)


def is_weekday(day: date) -> bool:
    return day.weekday() < 5


def next_weekday(day: date) -> date:
    """First Monday-Friday date strictly after ``day``."""
    candidate = day + timedelta(days=1)
    while not is_weekday(candidate):
        candidate += timedelta(days=1)
    return candidate


def next_valid_exchange_date(
    now: datetime, day_end: time = DEFAULT_DAY_END
) -> date:
    """Date the next exchanges should be scheduled for.

    Today, if today is a weekday and the window has not closed yet (the
    before-opening case still counts as today). Otherwise the next weekday.
    """
    today = now.date()
    if not is_weekday(today) or now.time() >= day_end:
        return next_weekday(today)
    return today


def period_windows(
    day_start: time = DEFAULT_DAY_START, day_end: time = DEFAULT_DAY_END
) -> Dict[TimeSlotPeriod, Tuple[time, time]]:
    """Split the daily window into morning/afternoon/evening periods."""
    anchor = date(2000, 1, 3)
    start = datetime.combine(anchor, day_start)
    end = datetime.combine(anchor, day_end)
    if end <= start:
        raise ValueError("day_start must be earlier than day_end")

    length = (end - start) / len(PERIOD_SEQUENCE)
    windows: Dict[TimeSlotPeriod, Tuple[time, time]] = {}
    for index, period in enumerate(PERIOD_SEQUENCE):
        window_start = start + length * index
        window_end = end if index == len(PERIOD_SEQUENCE) - 1 else window_start + length
        windows[period] = (window_start.time(), window_end.time())
    return windows
