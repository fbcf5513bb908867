# backend/book_exchange/models/enums.py
"""Enumerations shared by the ORM models and the matching engine."""

import enum


class Branch(str, enum.Enum):
    CS = "CS"
    IT = "IT"
    EXTC = "EXTC"
    MECH = "MECH"
    CIVIL = "CIVIL"
    AIDS = "AIDS"
    AIML = "AIML"


class ExchangeStatus(str, enum.Enum):
    PENDING = "pending"
    REQUESTED = "requested"
    MATCHED = "matched"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MatchStatus(str, enum.Enum):
    MATCHED = "matched"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TimeSlotPeriod(str, enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @property
    def sort_order(self) -> int:
        return _PERIOD_ORDER[self]


_PERIOD_ORDER = {
    TimeSlotPeriod.MORNING: 0,
    TimeSlotPeriod.AFTERNOON: 1,
    TimeSlotPeriod.EVENING: 2,
}
