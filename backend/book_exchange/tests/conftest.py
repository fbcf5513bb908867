# backend/book_exchange/tests/conftest.py

import copy
import itertools
import uuid
from contextlib import asynccontextmanager
from datetime import date, datetime, time
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence, Set
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError

from book_exchange.config import TestingSettings
from book_exchange.models.enums import MatchStatus, TimeSlotPeriod
from book_exchange.services.matching import (
    MatchingEngineService,
    ScheduleSlot,
    StudentRecord,
    Term,
)
from book_exchange.services.matching.exchange_calendar import period_windows

# 2026-10-19 is a Monday
MONDAY = date(2026, 10, 19)

TERM = Term(semester="Odd", academic_year="2026-27")


class FakeExchangeData:
    """In-memory stand-in for ExchangeData with commit/rollback snapshots.

    Methods listed in ``fail_on`` raise ``SQLAlchemyError`` the way a broken
    query would.
    """

    def __init__(self, term: Optional[Term] = TERM):
        self.term_row: Optional[Dict[str, str]] = (
            {"semester": term.semester, "academic_year": term.academic_year}
            if term
            else None
        )
        self.students: List[Dict[str, Any]] = []
        self.slots: Dict[UUID, Dict[str, Any]] = {}
        self.locations: List[Dict[str, Any]] = []
        self.matches: List[Dict[str, Any]] = []
        self.settings: Dict[str, Any] = {}
        self.lock_available = True
        self.fail_on: Set[str] = set()
        self.calls: List[str] = []
        self.commits = 0
        self.rollbacks = 0
        self._rolls = itertools.count(1)
        self._snapshot = self._take_snapshot()

    # Helpers for arranging state
    def add_student(
        self,
        slot: int,
        branch: str = "CS",
        division: str = "A",
        status: str = "pending",
    ) -> UUID:
        user_id = uuid.uuid4()
        self.students.append(
            {
                "user_id": user_id,
                "slot": slot,
                "branch": branch,
                "division": division,
                "roll_number": next(self._rolls),
                "exchange_status": status,
            }
        )
        self._snapshot = self._take_snapshot()
        return user_id

    def add_location(self, name: str = "Library Foyer", is_active: bool = True) -> UUID:
        location_id = uuid.uuid4()
        self.locations.append({"id": location_id, "name": name, "is_active": is_active})
        self._snapshot = self._take_snapshot()
        return location_id

    def add_slot(
        self,
        day: date,
        period: TimeSlotPeriod = TimeSlotPeriod.MORNING,
        current: int = 0,
        maximum: int = 10,
        is_active: bool = True,
        location_id: Optional[UUID] = None,
    ) -> UUID:
        start, end = period_windows()[period]
        slot_id = uuid.uuid4()
        self.slots[slot_id] = {
            "id": slot_id,
            "date": day,
            "period": period,
            "start_time": start,
            "end_time": end,
            "location_id": location_id,
            "current_exchanges": current,
            "max_exchanges": maximum,
            "is_active": is_active,
        }
        self._snapshot = self._take_snapshot()
        return slot_id

    def add_match(
        self,
        student_1_id: UUID,
        student_2_id: UUID,
        status: MatchStatus = MatchStatus.MATCHED,
        term: Term = TERM,
    ) -> None:
        self.matches.append(
            {
                "id": uuid.uuid4(),
                "student_1_id": student_1_id,
                "student_2_id": student_2_id,
                "match_status": status,
                "semester": term.semester,
                "academic_year": term.academic_year,
            }
        )
        self._snapshot = self._take_snapshot()

    def student(self, user_id: UUID) -> Dict[str, Any]:
        return next(s for s in self.students if s["user_id"] == user_id)

    def slots_on(self, day: date) -> List[Dict[str, Any]]:
        return sorted(
            (s for s in self.slots.values() if s["date"] == day),
            key=lambda s: s["period"].sort_order,
        )

    # Snapshot handling
    def _take_snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(
            {"students": self.students, "slots": self.slots, "matches": self.matches}
        )

    def _fail(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise SQLAlchemyError(f"{name} failed")

    # ExchangeData interface
    async def commit(self) -> None:
        self.commits += 1
        self._snapshot = self._take_snapshot()

    async def rollback(self) -> None:
        self.rollbacks += 1
        restored = copy.deepcopy(self._snapshot)
        self.students = restored["students"]
        self.slots = restored["slots"]
        self.matches = restored["matches"]

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        yield

    async def try_acquire_run_lock(self, key: int) -> bool:
        self._fail("try_acquire_run_lock")
        return self.lock_available

    async def get_setting(self, key: str) -> Optional[Any]:
        self._fail("get_setting")
        return self.settings.get(key)

    async def get_current_semester(self) -> Optional[Dict[str, str]]:
        self._fail("get_current_semester")
        return dict(self.term_row) if self.term_row else None

    async def get_pending_students(self, slot: int) -> List[StudentRecord]:
        self._fail("get_pending_students")
        return [
            StudentRecord(**s)
            for s in self.students
            if s["slot"] == slot and s["exchange_status"] == "pending"
        ]

    async def is_student_matched_this_semester(self, user_id: UUID) -> bool:
        self._fail("is_student_matched_this_semester")
        term = self.term_row or {}
        return any(
            m["match_status"] != MatchStatus.CANCELLED
            and m["semester"] == term.get("semester")
            and m["academic_year"] == term.get("academic_year")
            and user_id in (m["student_1_id"], m["student_2_id"])
            for m in self.matches
        )

    async def get_active_slots_for_date(self, day: date) -> List[ScheduleSlot]:
        self._fail("get_active_slots_for_date")
        return [ScheduleSlot(**dict(s)) for s in self.slots_on(day) if s["is_active"]]

    async def get_default_location_id(self) -> Optional[UUID]:
        self._fail("get_default_location_id")
        active = [loc for loc in self.locations if loc["is_active"]]
        return active[0]["id"] if active else None

    async def create_time_slots(self, rows: Sequence[Dict[str, Any]]) -> List[ScheduleSlot]:
        self._fail("create_time_slots")
        created = []
        for row in rows:
            taken = any(
                s["date"] == row["date"] and s["period"] == row["period"]
                for s in self.slots.values()
            )
            if taken:
                continue
            slot_id = uuid.uuid4()
            self.slots[slot_id] = {"id": slot_id, **row}
            created.append(ScheduleSlot(**dict(self.slots[slot_id])))
        return sorted(created, key=lambda s: s.period.sort_order)

    async def increment_slot_usage(self, slot_id: UUID, count: int) -> bool:
        self._fail("increment_slot_usage")
        slot = self.slots.get(slot_id)
        if slot is None or slot["current_exchanges"] + count > slot["max_exchanges"]:
            return False
        slot["current_exchanges"] += count
        return True

    async def insert_matches(self, rows: Sequence[Dict[str, Any]]) -> List[UUID]:
        self._fail("insert_matches")
        ids = []
        for row in rows:
            match_id = uuid.uuid4()
            self.matches.append({"id": match_id, **row})
            ids.append(match_id)
        return ids

    async def mark_students_matched(self, user_ids: Sequence[UUID]) -> int:
        self._fail("mark_students_matched")
        updated = 0
        for student in self.students:
            if student["user_id"] in user_ids and student["exchange_status"] == "pending":
                student["exchange_status"] = "matched"
                updated += 1
        return updated


@pytest.fixture
def exchange_data() -> FakeExchangeData:
    return FakeExchangeData()


@pytest.fixture
def test_settings() -> TestingSettings:
    return TestingSettings()


@pytest.fixture
def make_service(
    exchange_data: FakeExchangeData, test_settings: TestingSettings
) -> Callable[..., MatchingEngineService]:
    """Build a MatchingEngineService over the fake data at a fixed wall-clock time."""

    def _make(
        now: datetime = datetime.combine(MONDAY, time(10, 0)),
        data: Optional[FakeExchangeData] = None,
    ) -> MatchingEngineService:
        return MatchingEngineService(
            settings=test_settings,
            data=data or exchange_data,
            clock=lambda: now,
        )

    return _make


@pytest.fixture
def api_app():
    """The FastAPI app with dependency overrides cleared after each test."""
    from book_exchange.main import app

    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(api_app) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the app in-process. Lifespan (database setup) does not run."""
    async with AsyncClient(
        transport=ASGITransport(app=api_app), base_url="http://test"
    ) as ac:
        yield ac
