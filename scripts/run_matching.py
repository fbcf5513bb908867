#!/usr/bin/env python3
# scripts/run_matching.py
"""
Run the book exchange matching engine once, outside the HTTP service.

Intended for cron: prints the run summary as JSON and exits non-zero when
the run fails.

    python scripts/run_matching.py --env-file backend/.env
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Allow running from a source checkout without installing the package
sys.path.append(str(Path(__file__).parent.parent / "backend"))

from book_exchange.config import get_settings, setup_logging, validate_settings
from book_exchange.database import db_manager, init_db
from book_exchange.services.matching import MatchingEngineService

logger = logging.getLogger("book_exchange.scripts.run_matching")


async def run_once(database_url: Optional[str] = None) -> int:
    settings = get_settings()
    await init_db(
        database_url=database_url or settings.DATABASE_URL,
        schema=settings.DATABASE_SCHEMA,
        pool_size=1,
        max_overflow=0,
    )
    try:
        async with db_manager.get_session() as session:
            result = await MatchingEngineService(session, settings).run()
    finally:
        await db_manager.close()

    if result.success:
        print(json.dumps({"success": True, "message": result.message, **result.summary()}))
        return 0

    print(json.dumps({"success": False, "error": result.error}))
    return 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the matching engine once")
    parser.add_argument(
        "--env-file",
        default=str(Path(__file__).parent.parent / "backend" / ".env"),
        help="Environment file to load before reading settings",
    )
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    args = parser.parse_args()

    env_path = Path(args.env_file)
    if env_path.exists():
        load_dotenv(env_path)

    settings = get_settings()
    setup_logging(settings)
    for issue in validate_settings(settings):
        logger.warning(f"Configuration issue: {issue}")

    return asyncio.run(run_once(args.database_url))


if __name__ == "__main__":
    sys.exit(main())
