# backend/book_exchange/services/auditing/__init__.py
"""
Auditing Services Package.

Records admin-visible actions in the admin action log.
"""
from .audit_service import AuditService

__all__ = ["AuditService"]
