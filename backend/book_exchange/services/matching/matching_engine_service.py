# backend/book_exchange/services/matching/matching_engine_service.py

"""
One matching run: term -> eligibility -> pairing -> commit.

The whole run shares one database transaction. It starts by taking a
transaction-scoped advisory lock so overlapping runs cannot read the same
pending students, and it is committed once at the end or rolled back on any
failure.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import Settings, get_settings
from ...core.exceptions import AppError, MatchingRunInProgressError
from ..data_retrieval.exchange_data import ExchangeData
from .committer import MatchCommitter
from .eligibility import EligibilityFilter
from .exchange_calendar import next_valid_exchange_date
from .pairing import PairingEngine
from .slot_allocator import SlotAllocator
from .term_resolver import TermResolver
from .types import MatchingRunResult

logger = logging.getLogger(__name__)

PAUSED_MESSAGE = "Matching engine is paused"


def setting_enabled(value: Any) -> bool:
    """Interpret a system setting value written as JSON bool or string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


class MatchingEngineService:
    """Runs the automated matching engine once per call."""

    def __init__(
        self,
        session: Optional[AsyncSession] = None,
        settings: Optional[Settings] = None,
        *,
        data: Optional[ExchangeData] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if data is None and session is None:
            raise ValueError("MatchingEngineService needs a session or a data layer")
        self.settings = settings or get_settings()
        self.data = data or ExchangeData(session)
        self.clock = clock or (lambda: datetime.now(self.settings.exchange_tz))

    async def run(self) -> MatchingRunResult:
        """Run the pipeline and translate every failure into a result."""
        try:
            result = await self._run()
            await self.data.commit()
        except AppError as e:
            await self._safe_rollback()
            logger.error(f"Matching run failed: {e}", exc_info=e.status_code >= 500)
            return MatchingRunResult.failure(e.message, e.status_code)
        except Exception as e:
            await self._safe_rollback()
            logger.error(f"Matching engine error: {e}", exc_info=True)
            return MatchingRunResult.failure(str(e) or "Unknown error occurred")

        logger.info(f"Matching run finished: {result.summary()}")
        return result

    async def _safe_rollback(self) -> None:
        try:
            await self.data.rollback()
        except Exception as e:
            logger.error(f"Rollback after failed matching run also failed: {e}")

    async def _run(self) -> MatchingRunResult:
        settings = self.settings

        if not await self.data.try_acquire_run_lock(settings.MATCHING_LOCK_KEY):
            raise MatchingRunInProgressError()

        exchange_date = next_valid_exchange_date(self.clock(), settings.EXCHANGE_DAY_END)

        enabled = await self.data.get_setting(settings.MATCHING_ENGINE_SETTING_KEY)
        if enabled is not None and not setting_enabled(enabled):
            logger.info("Matching engine disabled by system setting, skipping run")
            return MatchingRunResult(
                success=True, message=PAUSED_MESSAGE, exchange_date=exchange_date
            )

        term = await TermResolver(self.data).resolve()

        eligibility = EligibilityFilter(self.data)
        slot1 = await eligibility.eligible_students(1)
        slot2 = await eligibility.eligible_students(2)

        result = MatchingRunResult(
            success=True,
            semester=term.semester,
            academic_year=term.academic_year,
            exchange_date=exchange_date,
            eligible_slot_1=len(slot1),
            eligible_slot_2=len(slot2),
        )

        if not slot1 or not slot2:
            result.message = (
                f"No pairs possible: {len(slot1)} eligible slot 1 and "
                f"{len(slot2)} eligible slot 2 students"
            )
            return result

        allocator = SlotAllocator(
            self.data,
            max_exchanges=settings.SLOT_MAX_EXCHANGES,
            day_start=settings.EXCHANGE_DAY_START,
            day_end=settings.EXCHANGE_DAY_END,
        )
        pairing = PairingEngine(allocator)
        pending = await pairing.match(slot1, slot2, exchange_date)
        result.stopped_early = pairing.stopped_early

        if not pending:
            result.message = (
                "No available time slots for matching"
                if pairing.stopped_early
                else "No pairs could be formed"
            )
            return result

        committed = await MatchCommitter(self.data).commit(pending, term)

        result.matches_created = committed.created
        result.exchange_dates = sorted({match.slot.date for match in pending})
        result.message = f"Successfully matched {committed.created} pairs"
        if pairing.stopped_early:
            result.message += " (stopped early: no exchange capacity left)"
        return result
