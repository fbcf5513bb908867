# backend/book_exchange/services/matching/slot_allocator.py

from __future__ import annotations

import logging
from datetime import date, time
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from ..data_retrieval.exchange_data import ExchangeData
from .exchange_calendar import DEFAULT_DAY_END, DEFAULT_DAY_START, period_windows
from .types import ScheduleSlot

logger = logging.getLogger(__name__)


def _slot_order(slot: ScheduleSlot):
    return (slot.period.sort_order, slot.start_time)


class SlotAllocator:
    """
    Finds a time slot with spare capacity for a date, creating the three
    standard periods for that date when none exist.

    Slots are cached per date for the lifetime of the allocator (one run), so
    reservations made through ``ScheduleSlot.reserve`` stay visible without
    going back to the database.
    """

    def __init__(
        self,
        data: ExchangeData,
        max_exchanges: int = 10,
        day_start: time = DEFAULT_DAY_START,
        day_end: time = DEFAULT_DAY_END,
    ):
        self.data = data
        self.max_exchanges = max_exchanges
        self.windows = period_windows(day_start, day_end)
        self._slots_by_date: Dict[date, Dict[UUID, ScheduleSlot]] = {}

    def _remember(self, day: date, slots: List[ScheduleSlot]) -> List[ScheduleSlot]:
        known = self._slots_by_date.setdefault(day, {})
        for slot in slots:
            # Keep the tracked object so local reservations are not lost
            known.setdefault(slot.id, slot)
        return sorted(known.values(), key=_slot_order)

    async def _slots_for(self, day: date, refresh: bool = False) -> List[ScheduleSlot]:
        if day in self._slots_by_date and not refresh:
            return sorted(self._slots_by_date[day].values(), key=_slot_order)
        fresh = await self.data.get_active_slots_for_date(day)
        return self._remember(day, fresh)

    async def find_available_slot(self, day: date) -> Optional[ScheduleSlot]:
        """First active slot of the day (morning to evening) with spare capacity."""
        for slot in await self._slots_for(day):
            if slot.has_capacity:
                return slot
        return None

    async def ensure_slots_for_date(self, day: date) -> List[ScheduleSlot]:
        """Create the morning/afternoon/evening slots for ``day``.

        Periods that already exist are left untouched; only newly created
        slots are returned.
        """
        location_id = await self.data.get_default_location_id()
        rows = [
            {
                "date": day,
                "period": period,
                "start_time": start,
                "end_time": end,
                "location_id": location_id,
                "current_exchanges": 0,
                "max_exchanges": self.max_exchanges,
                "is_active": True,
            }
            for period, (start, end) in self.windows.items()
        ]
        created = await self.data.create_time_slots(rows)
        if created:
            logger.info(
                f"Created {len(created)} exchange time slots for {day.isoformat()} "
                f"(location={location_id})"
            )
        self._remember(day, created)
        return sorted(created, key=_slot_order)

    async def allocate_slot(self, target_date: date) -> Optional[ScheduleSlot]:
        """Return a slot with spare capacity on ``target_date`` or None.

        Database failures are logged and reported as "no slot available".
        """
        try:
            async with self.data.savepoint():
                slot = await self.find_available_slot(target_date)
                if slot is not None:
                    return slot

                created = await self.ensure_slots_for_date(target_date)
                if created:
                    return created[0]

            # Lost a creation race or the periods already exist: look again
            async with self.data.savepoint():
                for slot in await self._slots_for(target_date, refresh=True):
                    if slot.has_capacity:
                        return slot
        except SQLAlchemyError as e:
            logger.warning(
                f"Time slot lookup for {target_date.isoformat()} failed: {e}"
            )
            return None

        logger.info(f"No exchange capacity left on {target_date.isoformat()}")
        return None
