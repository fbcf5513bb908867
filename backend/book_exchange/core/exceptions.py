# backend/book_exchange/core/exceptions.py
"""Application-level exceptions used across services.

Each exception carries an explicit ``code`` and ``status_code`` so the HTTP
boundary can translate failures consistently, plus a lightweight ``context``
dict for logs.
"""
from __future__ import annotations

from typing import Optional, Any, Dict
from datetime import datetime, timezone


class AppError(Exception):
    """Base application exception with structured metadata.

    Attributes
    ----------
    message
        Human readable message.
    code
        Machine friendly error code (snake_case).
    status_code
        Suggested HTTP status code for API responses.
    details
        Arbitrary extra data useful for debugging.
    timestamp
        UTC ISO timestamp when the exception was created.
    cause
        Optional underlying exception instance.
    context
        Optional lightweight context dict (ids, phase names, counts).
    """

    code: str = "app_error"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An application error occurred",
        *,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.cause = cause
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}({self.code}): {self.message}"
        if self.context:
            base += f" | context={self.context}"
        if self.cause is not None:
            base += f" | cause={repr(self.cause)}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Return a serializable representation suitable for logs."""
        return {
            "error": {
                "type": self.__class__.__name__,
                "code": self.code,
                "message": self.message,
                "status_code": self.status_code,
                "details": self.details,
                "context": self.context,
                "timestamp": self.timestamp,
            }
        }


class MatchingError(AppError):
    """Generic matching engine failure.

    Base for every error that aborts a matching run. ``phase`` names the
    pipeline stage that failed (term, eligibility, pairing, commit).
    """

    code = "matching_error"
    status_code = 500

    def __init__(
        self,
        message: str = "Matching engine error",
        *,
        phase: Optional[str] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        if phase:
            self.context.setdefault("phase", phase)


class TermResolutionError(MatchingError):
    """The current semester / academic year could not be resolved."""

    code = "term_resolution_error"

    def __init__(self, message: str = "Could not resolve the current term", **kwargs: Any) -> None:
        kwargs.setdefault("phase", "term")
        super().__init__(message, **kwargs)


class EligibilityQueryError(MatchingError):
    """Loading eligible students for a book-slot failed."""

    code = "eligibility_query_error"

    def __init__(
        self,
        message: str = "Failed to load eligible students",
        *,
        slot: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("phase", "eligibility")
        super().__init__(message, **kwargs)
        if slot is not None:
            self.context.setdefault("slot", slot)


class CommitError(MatchingError):
    """Persisting a batch of matches failed.

    ``partial`` is true when the match rows were written before a status or
    capacity update failed.
    """

    code = "commit_error"

    def __init__(
        self,
        message: str = "Failed to commit matches",
        *,
        partial: bool = False,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("phase", "commit")
        super().__init__(message, **kwargs)
        self.partial = partial
        self.context.setdefault("partial", partial)


class MatchingRunInProgressError(MatchingError):
    """Another matching run currently holds the run lock."""

    code = "matching_run_in_progress"
    status_code = 409

    def __init__(
        self, message: str = "Another matching run is already in progress", **kwargs: Any
    ) -> None:
        kwargs.setdefault("phase", "lock")
        super().__init__(message, **kwargs)


__all__ = [
    "AppError",
    "MatchingError",
    "TermResolutionError",
    "EligibilityQueryError",
    "CommitError",
    "MatchingRunInProgressError",
]
