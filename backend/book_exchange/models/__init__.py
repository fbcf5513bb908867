# backend/book_exchange/models/__init__.py

from .base import Base
from .enums import Branch, ExchangeStatus, MatchStatus, TimeSlotPeriod
from .academic import StudentAcademicInfo
from .exchange import ExchangeLocation, ExchangeTimeSlot, ExchangeMatch
from .system import SystemSetting, AdminActionLog

__all__ = [
    # Base
    "Base",
    # Enums
    "Branch",
    "ExchangeStatus",
    "MatchStatus",
    "TimeSlotPeriod",
    # Academic models
    "StudentAcademicInfo",
    # Exchange models
    "ExchangeLocation",
    "ExchangeTimeSlot",
    "ExchangeMatch",
    # System models
    "SystemSetting",
    "AdminActionLog",
]
