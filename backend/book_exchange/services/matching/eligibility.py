# backend/book_exchange/services/matching/eligibility.py

import logging
from typing import List, Set
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from ...core.exceptions import EligibilityQueryError
from ..data_retrieval.exchange_data import ExchangeData
from .types import StudentRecord

logger = logging.getLogger(__name__)

VALID_SLOTS = (1, 2)


class EligibilityFilter:
    """Selects the students of a book-slot that may be matched in this run.

    A student is eligible when their exchange status is ``pending`` and they
    hold no active match in the current term. Database order is preserved
    because the pairing tie-break is positional.
    """

    def __init__(self, data: ExchangeData):
        self.data = data

    async def eligible_students(self, slot: int) -> List[StudentRecord]:
        if slot not in VALID_SLOTS:
            raise ValueError(f"slot must be one of {VALID_SLOTS}, got {slot!r}")

        try:
            pending = await self.data.get_pending_students(slot)

            eligible: List[StudentRecord] = []
            seen: Set[UUID] = set()
            for student in pending:
                if student.user_id in seen:
                    continue
                seen.add(student.user_id)
                if await self.data.is_student_matched_this_semester(student.user_id):
                    logger.debug(
                        f"Skipping slot {slot} student {student.user_id}: already matched this term"
                    )
                    continue
                eligible.append(student)
        except SQLAlchemyError as e:
            raise EligibilityQueryError(
                f"Failed to load eligible slot {slot} students: {e}", slot=slot, cause=e
            ) from e

        logger.info(
            f"Slot {slot}: {len(pending)} pending, {len(eligible)} eligible students"
        )
        return eligible
