# backend/book_exchange/tests/unit/test_exchange_calendar.py

from datetime import date, datetime, time

import pytest

from book_exchange.models.enums import TimeSlotPeriod
from book_exchange.services.matching import (
    is_weekday,
    next_valid_exchange_date,
    next_weekday,
    period_windows,
)

MONDAY = date(2026, 10, 19)
FRIDAY = date(2026, 10, 23)
SATURDAY = date(2026, 10, 24)
SUNDAY = date(2026, 10, 25)
NEXT_MONDAY = date(2026, 10, 26)


class TestNextValidExchangeDate:
    def test_weekday_inside_window_is_today(self):
        assert next_valid_exchange_date(datetime.combine(MONDAY, time(10, 0))) == MONDAY

    def test_weekday_before_opening_is_today(self):
        assert next_valid_exchange_date(datetime.combine(MONDAY, time(7, 15))) == MONDAY

    def test_window_closed_moves_to_next_weekday(self):
        assert next_valid_exchange_date(datetime.combine(MONDAY, time(18, 30))) == date(
            2026, 10, 20
        )

    def test_friday_evening_skips_weekend(self):
        assert next_valid_exchange_date(datetime.combine(FRIDAY, time(19, 0))) == NEXT_MONDAY

    @pytest.mark.parametrize("day", [SATURDAY, SUNDAY])
    def test_weekend_resolves_to_monday(self, day):
        assert next_valid_exchange_date(datetime.combine(day, time(12, 0))) == NEXT_MONDAY

    def test_custom_day_end(self):
        now = datetime.combine(MONDAY, time(16, 0))
        assert next_valid_exchange_date(now, day_end=time(15, 0)) == date(2026, 10, 20)


class TestWeekdays:
    def test_is_weekday(self):
        assert is_weekday(MONDAY)
        assert is_weekday(FRIDAY)
        assert not is_weekday(SATURDAY)
        assert not is_weekday(SUNDAY)

    def test_next_weekday_is_strictly_after(self):
        assert next_weekday(MONDAY) == date(2026, 10, 20)
        assert next_weekday(FRIDAY) == NEXT_MONDAY
        assert next_weekday(SATURDAY) == NEXT_MONDAY


class TestPeriodWindows:
    def test_default_window_split_in_three(self):
        windows = period_windows()

        assert list(windows) == [
            TimeSlotPeriod.MORNING,
            TimeSlotPeriod.AFTERNOON,
            TimeSlotPeriod.EVENING,
        ]
        assert windows[TimeSlotPeriod.MORNING] == (time(9, 30), time(12, 30))
        assert windows[TimeSlotPeriod.AFTERNOON] == (time(12, 30), time(15, 30))
        assert windows[TimeSlotPeriod.EVENING] == (time(15, 30), time(18, 30))

    def test_custom_window(self):
        windows = period_windows(time(9, 0), time(18, 0))
        assert windows[TimeSlotPeriod.AFTERNOON] == (time(12, 0), time(15, 0))

    def test_inverted_window_rejected(self):
        with pytest.raises(ValueError):
            period_windows(time(18, 0), time(9, 0))
