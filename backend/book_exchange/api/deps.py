# backend/book_exchange/api/deps.py
import logging
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..database import get_db
from ..services.auditing import AuditService
from ..services.matching import MatchingEngineService

logger = logging.getLogger(__name__)


async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a database session."""
    async for session in get_db():
        yield session


async def get_matching_engine_service(
    db: AsyncSession = Depends(db_session),
) -> MatchingEngineService:
    return MatchingEngineService(db, get_settings())


async def get_audit_service(db: AsyncSession = Depends(db_session)) -> AuditService:
    return AuditService(db)
