# backend/book_exchange/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn
import logging

from .api.v1.api import api_router
from .database import init_db, db_manager, check_db_health
from .config import get_settings, validate_settings
from .logging_config import LOGGING_CONFIG, request_id_var, new_request_id

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("Starting up the matching engine service...")
    for issue in validate_settings(settings):
        logger.warning(f"Configuration issue: {issue}")

    try:
        await init_db(
            database_url=settings.DATABASE_URL,
            create_tables=settings.DATABASE_CREATE_TABLES,
            **settings.database_config,
        )
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise

    yield

    logger.info("Shutting down the matching engine service...")
    await db_manager.close()


app = FastAPI(
    title="Book Exchange Matching Engine API",
    description="Pairs slot 1 and slot 2 students and schedules book exchanges",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Tag every log line of a request with a short request id."""
    token = request_id_var.set(request.headers.get("x-request-id") or new_request_id())
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch any unhandled exceptions and log them with a full traceback.
    Returns a generic 500 error to the client to avoid leaking details.
    """
    logger.error(
        f"Unhandled exception for request {request.method} {request.url}: {exc}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "An internal server error occurred."},
    )


app.include_router(api_router, prefix=settings.API_PREFIX)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-admin-id"],
)


@app.get("/")
async def root():
    """Root endpoint providing basic API information."""
    return {
        "message": "Book Exchange Matching Engine API",
        "version": settings.APP_VERSION,
        "status": "active",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint to verify service and database connectivity."""
    db_health = await check_db_health()
    return {
        "status": "healthy" if db_health["status"] == "healthy" else "unhealthy",
        "service": "matching-engine",
        "database": db_health,
    }


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_config=LOGGING_CONFIG,
    )
