# backend/book_exchange/services/matching/term_resolver.py

import logging

from sqlalchemy.exc import SQLAlchemyError

from ...core.exceptions import TermResolutionError
from ..data_retrieval.exchange_data import ExchangeData
from .types import Term

logger = logging.getLogger(__name__)


class TermResolver:
    """Resolves the (semester, academic_year) every match of a run is stamped with."""

    def __init__(self, data: ExchangeData):
        self.data = data

    async def resolve(self) -> Term:
        try:
            row = await self.data.get_current_semester()
        except SQLAlchemyError as e:
            raise TermResolutionError(
                f"get_current_semester() failed: {e}", cause=e
            ) from e

        if not row or not row.get("semester") or not row.get("academic_year"):
            raise TermResolutionError("get_current_semester() returned no term")

        term = Term(semester=str(row["semester"]), academic_year=str(row["academic_year"]))
        logger.info(f"Current term: {term.semester} {term.academic_year}")
        return term
