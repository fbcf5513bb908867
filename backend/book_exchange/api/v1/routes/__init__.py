# backend/book_exchange/api/v1/routes/__init__.py
from fastapi import APIRouter

from .matching import router as matching_router

router = APIRouter()

# The engine keeps the function-style path the admin UI and cron call
router.include_router(matching_router, tags=["Matching Engine"])
