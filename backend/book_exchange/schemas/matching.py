# backend/book_exchange/schemas/matching.py
"""Pydantic v2 schemas for the matching engine endpoint."""

from __future__ import annotations
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

MODEL_CONFIG = ConfigDict(from_attributes=True)

class MatchingRunResponse(BaseModel):
    """Body returned for a successful (possibly empty) matching run."""

    model_config = MODEL_CONFIG

    success: bool = True
    message: str
    matches_created: int = 0
    semester: Optional[str] = None
    academic_year: Optional[str] = None
    exchange_date: Optional[date] = None
    eligible_slot_1: int = 0
    eligible_slot_2: int = 0
    stopped_early: bool = False
    exchange_dates: List[date] = Field(default_factory=list)

class MatchingRunFailure(BaseModel):
    success: bool = False
    error: str
