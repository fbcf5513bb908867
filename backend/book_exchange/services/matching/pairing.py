# backend/book_exchange/services/matching/pairing.py

"""
Greedy pairing of slot-1 students with slot-2 students.

This is a first-found heuristic, not an optimal assignment: each slot-1
student (in input order) takes the first unmatched slot-2 student of the
best available tier, so earlier students can take partners a later student
would have preferred.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Set, Tuple
from uuid import UUID

from .exchange_calendar import next_weekday
from .slot_allocator import SlotAllocator
from .types import PendingMatch, ScheduleSlot, StudentRecord

logger = logging.getLogger(__name__)

PartnerRule = Callable[[StudentRecord, StudentRecord], bool]

# Tie-break hierarchy, highest priority first
PARTNER_TIERS: Tuple[Tuple[str, PartnerRule], ...] = (
    (
        "branch_and_division",
        lambda s1, s2: s1.branch == s2.branch and s1.division == s2.division,
    ),
    ("branch", lambda s1, s2: s1.branch == s2.branch),
    ("any", lambda s1, s2: True),
)


def find_partner(
    student: StudentRecord,
    candidates: Iterable[StudentRecord],
    matched_ids: Set[UUID],
) -> Optional[Tuple[StudentRecord, str]]:
    """Best unmatched candidate for ``student`` and the tier that selected it."""
    available = [c for c in candidates if c.user_id not in matched_ids]
    for tier, rule in PARTNER_TIERS:
        for candidate in available:
            if rule(student, candidate):
                return candidate, tier
    return None


class PairingEngine:
    """Forms pairs and books a time slot for each of them."""

    def __init__(self, allocator: SlotAllocator):
        self.allocator = allocator
        self.stopped_early = False
        self.working_date: Optional[date] = None

    async def _slot_for(self, working_date: date) -> Tuple[Optional[ScheduleSlot], date]:
        slot = await self.allocator.allocate_slot(working_date)
        if slot is not None:
            return slot, working_date

        next_date = next_weekday(working_date)
        logger.info(
            f"No capacity on {working_date.isoformat()}, trying {next_date.isoformat()}"
        )
        return await self.allocator.allocate_slot(next_date), next_date

    async def match(
        self,
        slot1: List[StudentRecord],
        slot2: List[StudentRecord],
        start_date: date,
    ) -> List[PendingMatch]:
        self.stopped_early = False
        self.working_date = start_date

        matched_ids: Set[UUID] = set()
        pending: List[PendingMatch] = []

        for student in slot1:
            if student.user_id in matched_ids:
                continue

            found = find_partner(student, slot2, matched_ids)
            if found is None:
                logger.debug(f"No slot 2 partner left for {student.user_id}")
                continue
            partner, tier = found

            slot, self.working_date = await self._slot_for(self.working_date)
            if slot is None:
                # Two consecutive days without capacity ends the run
                logger.warning(
                    f"Stopping after {len(pending)} pairs: no exchange capacity "
                    f"through {self.working_date.isoformat()}"
                )
                self.stopped_early = True
                break

            slot.reserve()
            matched_ids.update((student.user_id, partner.user_id))
            pending.append(PendingMatch(student_1=student, student_2=partner, slot=slot))
            logger.debug(
                f"Paired {student.user_id} with {partner.user_id} ({tier}) "
                f"on {slot.date.isoformat()} {slot.period.value}"
            )

        logger.info(f"Formed {len(pending)} pairs from {len(slot1)}x{len(slot2)} students")
        return pending
