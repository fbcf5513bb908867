# backend/book_exchange/services/data_retrieval/exchange_data.py

"""
Data access for the matching engine.

Every database round trip the engine makes goes through this class, so the
engine itself only deals with the dataclasses in ``services.matching.types``.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update, insert, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.academic import StudentAcademicInfo
from ...models.enums import ExchangeStatus
from ...models.exchange import ExchangeLocation, ExchangeMatch, ExchangeTimeSlot
from ...models.system import SystemSetting
from ..matching.types import ScheduleSlot, StudentRecord

logger = logging.getLogger(__name__)


def _to_student(row: StudentAcademicInfo) -> StudentRecord:
    return StudentRecord(
        user_id=row.user_id,
        slot=row.slot,
        branch=getattr(row.branch, "value", row.branch),
        division=row.division,
        roll_number=row.roll_number,
        exchange_status=getattr(row.exchange_status, "value", row.exchange_status),
    )


def _to_slot(row: Any) -> ScheduleSlot:
    return ScheduleSlot(
        id=row.id,
        date=row.date,
        period=row.period,
        start_time=row.start_time,
        end_time=row.end_time,
        location_id=row.location_id,
        current_exchanges=row.current_exchanges or 0,
        max_exchanges=row.max_exchanges or 0,
        is_active=bool(row.is_active),
    )


class ExchangeData:
    """Service for reading and writing exchange data"""

    def __init__(self, session: AsyncSession):
        self.session = session

    # Transaction control
    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Nested transaction so a failed statement does not poison the run."""
        async with self.session.begin_nested():
            yield

    async def try_acquire_run_lock(self, key: int) -> bool:
        """Transaction-scoped advisory lock, released on commit or rollback."""
        result = await self.session.execute(
            text("SELECT pg_try_advisory_xact_lock(:key)"), {"key": key}
        )
        return bool(result.scalar())

    # Settings
    async def get_setting(self, key: str) -> Optional[Any]:
        stmt = select(SystemSetting.value).where(SystemSetting.key == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    # Term and eligibility
    async def get_current_semester(self) -> Optional[Dict[str, str]]:
        """Call the ``get_current_semester()`` database function."""
        result = await self.session.execute(
            text("SELECT semester, academic_year FROM get_current_semester()")
        )
        row = result.mappings().first()
        return dict(row) if row else None

    async def get_pending_students(self, slot: int) -> List[StudentRecord]:
        """Pending students of a book-slot in insertion order."""
        stmt = (
            select(StudentAcademicInfo)
            .where(
                StudentAcademicInfo.slot == slot,
                StudentAcademicInfo.exchange_status == ExchangeStatus.PENDING,
            )
            .order_by(StudentAcademicInfo.created_at, StudentAcademicInfo.id)
        )
        result = await self.session.execute(stmt)
        return [_to_student(row) for row in result.scalars().all()]

    async def is_student_matched_this_semester(self, user_id: UUID) -> bool:
        """Call the ``is_student_matched_this_semester`` database function."""
        result = await self.session.execute(
            text("SELECT is_student_matched_this_semester(_user_id => :user_id)"),
            {"user_id": user_id},
        )
        return bool(result.scalar())

    # Time slots
    async def get_active_slots_for_date(self, day: date) -> List[ScheduleSlot]:
        stmt = (
            select(ExchangeTimeSlot)
            .where(ExchangeTimeSlot.date == day, ExchangeTimeSlot.is_active.is_(True))
            .order_by(ExchangeTimeSlot.period, ExchangeTimeSlot.start_time)
        )
        result = await self.session.execute(stmt)
        slots = [_to_slot(row) for row in result.scalars().all()]
        return sorted(slots, key=lambda s: (s.period.sort_order, s.start_time))

    async def get_default_location_id(self) -> Optional[UUID]:
        stmt = (
            select(ExchangeLocation.id)
            .where(ExchangeLocation.is_active.is_(True))
            .order_by(ExchangeLocation.created_at, ExchangeLocation.name)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_time_slots(self, rows: Sequence[Dict[str, Any]]) -> List[ScheduleSlot]:
        """Insert slots, skipping any (date, period) that already exists.

        Returns only the rows this call created.
        """
        if not rows:
            return []
        table = ExchangeTimeSlot.__table__
        stmt = (
            pg_insert(table)
            .values(list(rows))
            .on_conflict_do_nothing(constraint="uq_exchange_time_slots_date_period")
            .returning(*table.c)
        )
        result = await self.session.execute(stmt)
        created = [_to_slot(row) for row in result.all()]
        return sorted(created, key=lambda s: (s.period.sort_order, s.start_time))

    async def increment_slot_usage(self, slot_id: UUID, count: int) -> bool:
        """Add ``count`` exchanges to a slot unless that would exceed its capacity."""
        stmt = (
            update(ExchangeTimeSlot)
            .where(
                ExchangeTimeSlot.id == slot_id,
                ExchangeTimeSlot.current_exchanges + count
                <= ExchangeTimeSlot.max_exchanges,
            )
            .values(current_exchanges=ExchangeTimeSlot.current_exchanges + count)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    # Matches
    async def insert_matches(self, rows: Sequence[Dict[str, Any]]) -> List[UUID]:
        if not rows:
            return []
        result = await self.session.execute(
            insert(ExchangeMatch.__table__).returning(ExchangeMatch.__table__.c.id),
            list(rows),
        )
        return list(result.scalars().all())

    async def mark_students_matched(self, user_ids: Sequence[UUID]) -> int:
        """Flip pending students to matched; returns the number of rows changed."""
        if not user_ids:
            return 0
        stmt = (
            update(StudentAcademicInfo)
            .where(
                StudentAcademicInfo.user_id.in_(list(user_ids)),
                StudentAcademicInfo.exchange_status == ExchangeStatus.PENDING,
            )
            .values(exchange_status=ExchangeStatus.MATCHED)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
