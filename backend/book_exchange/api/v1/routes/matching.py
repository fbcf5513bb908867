# backend/book_exchange/api/v1/routes/matching.py
"""
Trigger endpoint for the automated matching engine.

Called by the admin dashboard button and by the cron trigger. Each call runs
the engine exactly once and reports a summary.
"""
import logging
from typing import Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from ....api.deps import get_audit_service, get_matching_engine_service
from ....schemas.matching import MatchingRunFailure, MatchingRunResponse
from ....services.auditing import AuditService
from ....services.matching import MatchingEngineService

logger = logging.getLogger(__name__)

router = APIRouter()

AUDIT_ACTION_TYPE = "AUTO_MATCHING_RUN"


@router.post(
    "/run-matching-engine",
    response_model=MatchingRunResponse,
    responses={
        409: {"model": MatchingRunFailure},
        500: {"model": MatchingRunFailure},
    },
    summary="Run the automated matching engine once",
)
async def run_matching_engine(
    engine: MatchingEngineService = Depends(get_matching_engine_service),
    audit: AuditService = Depends(get_audit_service),
    x_admin_id: Optional[UUID] = Header(default=None),
) -> Union[MatchingRunResponse, JSONResponse]:
    """
    Pair pending slot 1 and slot 2 students and book exchange time slots.

    Returns `success: true` with `matches_created: 0` when nobody can be
    paired; failures come back as `{success: false, error}`.
    """
    result = await engine.run()

    if not result.success:
        return JSONResponse(
            status_code=result.status_code,
            content=MatchingRunFailure(error=result.error or "Unknown error occurred").model_dump(),
        )

    if result.matches_created > 0:
        await audit.log_admin_action(
            action_type=AUDIT_ACTION_TYPE,
            description=f"Automated matching created {result.matches_created} matches",
            admin_id=x_admin_id,
            metadata=result.summary(),
        )

    return MatchingRunResponse.model_validate(result)
