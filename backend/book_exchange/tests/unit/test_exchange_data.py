# backend/book_exchange/tests/unit/test_exchange_data.py

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession

from book_exchange.services.data_retrieval import ExchangeData

pytestmark = pytest.mark.asyncio


@pytest.fixture
def session():
    session = AsyncMock(spec=AsyncSession)
    result = MagicMock()
    result.scalars.return_value.all.return_value = []
    session.execute.return_value = result
    return session


async def test_pending_students_in_insertion_order(session):
    assert await ExchangeData(session).get_pending_students(1) == []

    statement = session.execute.await_args.args[0]
    sql = str(statement.compile(dialect=postgresql.dialect()))
    assert sql.rstrip().endswith(
        "ORDER BY student_academic_info.created_at, student_academic_info.id"
    )
