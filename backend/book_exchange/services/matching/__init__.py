# backend/book_exchange/services/matching/__init__.py
"""
Automated matching engine.

Pairs pending slot-1 and slot-2 students, books an exchange time slot for
each pair and commits the batch.
"""

from .types import (
    Term,
    StudentRecord,
    ScheduleSlot,
    PendingMatch,
    CommitResult,
    MatchingRunResult,
)
from .exchange_calendar import (
    is_weekday,
    next_weekday,
    next_valid_exchange_date,
    period_windows,
)
from .eligibility import EligibilityFilter
from .term_resolver import TermResolver
from .slot_allocator import SlotAllocator
from .pairing import PairingEngine, find_partner
from .committer import MatchCommitter
from .matching_engine_service import MatchingEngineService

__all__ = [
    # Types
    "Term",
    "StudentRecord",
    "ScheduleSlot",
    "PendingMatch",
    "CommitResult",
    "MatchingRunResult",
    # Date policy
    "is_weekday",
    "next_weekday",
    "next_valid_exchange_date",
    "period_windows",
    # Stages
    "EligibilityFilter",
    "TermResolver",
    "SlotAllocator",
    "PairingEngine",
    "find_partner",
    "MatchCommitter",
    "MatchingEngineService",
]
