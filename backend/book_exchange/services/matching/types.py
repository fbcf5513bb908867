# backend/book_exchange/services/matching/types.py
"""In-memory types passed between the matching engine stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Dict, List, Optional
from uuid import UUID

from ...models.enums import TimeSlotPeriod


@dataclass(frozen=True)
class Term:
    semester: str
    academic_year: str


@dataclass(frozen=True)
class StudentRecord:
    """Read-only view of a student's academic record."""

    user_id: UUID
    slot: int
    branch: str
    division: str
    roll_number: int
    exchange_status: str = "pending"


@dataclass
class ScheduleSlot:
    """A time slot as tracked during one run.

    ``current_exchanges`` starts at the persisted value and is bumped by
    ``reserve`` for every pair assigned in the run; the committer writes the
    difference back.
    """

    id: UUID
    date: date
    period: TimeSlotPeriod
    start_time: time
    end_time: time
    location_id: Optional[UUID]
    current_exchanges: int
    max_exchanges: int
    is_active: bool = True
    reserved: int = 0

    @property
    def has_capacity(self) -> bool:
        return self.is_active and self.current_exchanges < self.max_exchanges

    def reserve(self) -> None:
        if not self.has_capacity:
            raise ValueError(f"Time slot {self.id} is already full")
        self.current_exchanges += 1
        self.reserved += 1


@dataclass
class PendingMatch:
    student_1: StudentRecord
    student_2: StudentRecord
    slot: ScheduleSlot


@dataclass
class CommitResult:
    created: int
    match_ids: List[UUID] = field(default_factory=list)
    students_updated: int = 0
    slot_usage: Dict[UUID, int] = field(default_factory=dict)


@dataclass
class MatchingRunResult:
    success: bool
    message: str = ""
    matches_created: int = 0
    semester: Optional[str] = None
    academic_year: Optional[str] = None
    exchange_date: Optional[date] = None
    error: Optional[str] = None
    status_code: int = 200
    eligible_slot_1: int = 0
    eligible_slot_2: int = 0
    stopped_early: bool = False
    exchange_dates: List[date] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, status_code: int = 500) -> "MatchingRunResult":
        return cls(success=False, error=error, status_code=status_code)

    def summary(self) -> Dict[str, Any]:
        """Compact dict for logs and audit metadata."""
        return {
            "matches_created": self.matches_created,
            "semester": self.semester,
            "academic_year": self.academic_year,
            "exchange_date": self.exchange_date.isoformat() if self.exchange_date else None,
            "eligible_slot_1": self.eligible_slot_1,
            "eligible_slot_2": self.eligible_slot_2,
            "stopped_early": self.stopped_early,
        }
