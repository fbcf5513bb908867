# backend/book_exchange/services/matching/committer.py

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from ...core.exceptions import CommitError
from ...models.enums import MatchStatus
from ..data_retrieval.exchange_data import ExchangeData
from .types import CommitResult, PendingMatch, Term

logger = logging.getLogger(__name__)


class MatchCommitter:
    """Persists the pairs of a run.

    Writes the match rows, flips the students to ``matched`` in one bulk
    update and adds the per-slot totals to ``current_exchanges`` with one
    guarded update per slot. The caller owns the transaction; any failure
    here raises ``CommitError`` so the caller can roll everything back.
    """

    def __init__(
        self,
        data: ExchangeData,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.data = data
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _match_rows(self, pending: List[PendingMatch], term: Term) -> List[Dict]:
        matched_at = self.clock()
        return [
            {
                "student_1_id": match.student_1.user_id,
                "student_2_id": match.student_2.user_id,
                "time_slot_id": match.slot.id,
                "location_id": match.slot.location_id,
                "match_status": MatchStatus.MATCHED,
                "student_1_confirmed": False,
                "student_2_confirmed": False,
                "admin_approved": False,
                "semester": term.semester,
                "academic_year": term.academic_year,
                "matched_at": matched_at,
            }
            for match in pending
        ]

    async def commit(self, pending: List[PendingMatch], term: Term) -> CommitResult:
        if not pending:
            return CommitResult(created=0)

        try:
            match_ids = await self.data.insert_matches(self._match_rows(pending, term))
        except SQLAlchemyError as e:
            raise CommitError(f"Failed to insert exchange matches: {e}", cause=e) from e

        student_ids: List[UUID] = []
        for match in pending:
            for user_id in (match.student_1.user_id, match.student_2.user_id):
                if user_id not in student_ids:
                    student_ids.append(user_id)
        slot_usage = Counter(match.slot.id for match in pending)

        try:
            updated = await self.data.mark_students_matched(student_ids)
            if updated != len(student_ids):
                raise CommitError(
                    f"Expected to mark {len(student_ids)} students as matched, "
                    f"updated {updated}; some were no longer pending",
                    partial=True,
                )

            for slot_id, count in slot_usage.items():
                if not await self.data.increment_slot_usage(slot_id, count):
                    raise CommitError(
                        f"Time slot {slot_id} cannot take {count} more exchanges",
                        partial=True,
                        context={"time_slot_id": str(slot_id)},
                    )
        except SQLAlchemyError as e:
            raise CommitError(
                f"Matches inserted but status/capacity update failed: {e}",
                partial=True,
                cause=e,
            ) from e

        logger.info(
            f"Committed {len(match_ids)} matches for {term.semester} {term.academic_year} "
            f"across {len(slot_usage)} time slots"
        )
        return CommitResult(
            created=len(match_ids),
            match_ids=match_ids,
            students_updated=updated,
            slot_usage=dict(slot_usage),
        )
