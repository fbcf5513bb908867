# backend/book_exchange/tests/unit/test_audit_service.py

import json
import re
import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from book_exchange.services.auditing import AuditService

pytestmark = pytest.mark.asyncio

# Named arguments of the log_admin_action() database function
LOG_ADMIN_ACTION_ARGS = {
    "_action_type",
    "_action_description",
    "_metadata",
    "_target_match_id",
    "_target_user_id",
}
REQUIRED_ARGS = {"_action_type", "_action_description"}


@pytest.fixture
def session():
    return AsyncMock(spec=AsyncSession)


async def test_call_matches_db_function_signature(session):
    await AuditService(session).log_admin_action("AUTO_MATCHING_RUN", "run")

    statement, params = session.execute.await_args.args
    sql = str(statement)
    named = set(re.findall(r"(_\w+)\s*=>", sql))
    binds = set(re.findall(r":(\w+)", sql))

    assert "log_admin_action" in sql
    assert REQUIRED_ARGS <= named <= LOG_ADMIN_ACTION_ARGS
    assert binds == set(params)


async def test_admin_id_is_kept_in_metadata(session):
    admin_id = uuid.uuid4()

    ok = await AuditService(session).log_admin_action(
        action_type="AUTO_MATCHING_RUN",
        description="Automated matching created 2 matches",
        admin_id=admin_id,
        metadata={"matches_created": 2},
    )

    assert ok is True
    _, params = session.execute.await_args.args
    assert "admin_id" not in params
    assert json.loads(params["metadata"]) == {
        "matches_created": 2,
        "admin_id": str(admin_id),
    }
    session.commit.assert_awaited_once()


async def test_no_metadata_sends_null(session):
    await AuditService(session).log_admin_action("AUTO_MATCHING_RUN", "run")

    _, params = session.execute.await_args.args
    assert params["metadata"] is None


async def test_failure_is_logged_not_raised(session):
    session.execute.side_effect = OperationalError("SELECT log_admin_action", {}, Exception("down"))

    ok = await AuditService(session).log_admin_action("AUTO_MATCHING_RUN", "run")

    assert ok is False
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
