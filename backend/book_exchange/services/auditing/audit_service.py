# backend/book_exchange/services/auditing/audit_service.py
"""
Service for logging admin actions.
Provides a simple interface to the `log_admin_action` PostgreSQL function.
"""

import json
import logging
from typing import Dict, Any, Optional
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class AuditService:
    """Handles the creation of admin action log entries by calling the DB function."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log_admin_action(
        self,
        action_type: str,
        description: str,
        admin_id: Optional[UUID] = None,
        target_user_id: Optional[UUID] = None,
        target_match_id: Optional[UUID] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Logs an admin action by calling the `log_admin_action` PostgreSQL function.

        Failures are logged and swallowed: an audit entry must never undo the
        action it describes.

        Args:
            action_type: Upper-case action code (e.g. 'AUTO_MATCHING_RUN').
            description: Human-readable description shown in the dashboard.
            admin_id: The admin who triggered the action, if known. The
                database function takes no admin argument, so it is stored
                in the metadata as ``admin_id``.
            metadata: Extra JSON data stored with the entry.
        """
        try:
            logger.debug(f"Logging admin action: admin={admin_id}, type='{action_type}'")
            if admin_id is not None:
                metadata = {**(metadata or {}), "admin_id": str(admin_id)}
            query = text(
                """
                SELECT log_admin_action(
                    _action_type => :action_type,
                    _action_description => :description,
                    _target_user_id => :target_user_id,
                    _target_match_id => :target_match_id,
                    _metadata => CAST(:metadata AS jsonb)
                )
                """
            )
            params = {
                "action_type": action_type,
                "description": description,
                "target_user_id": target_user_id,
                "target_match_id": target_match_id,
                "metadata": json.dumps(metadata, default=str) if metadata else None,
            }
            await self.session.execute(query, params)
            await self.session.commit()
            return True
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Failed to log admin action: {e}", exc_info=True)
            return False
