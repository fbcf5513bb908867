# backend/book_exchange/schemas/__init__.py
from .matching import MatchingRunResponse, MatchingRunFailure

__all__ = ["MatchingRunResponse", "MatchingRunFailure"]
