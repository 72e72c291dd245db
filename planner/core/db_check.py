import asyncio
import logging
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from planner.db.session import Database

logger = logging.getLogger(__name__)


async def wait_for_db(database: Database, retries=5, delay=2.0):
    for i in range(retries):
        try:
            async with database.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Planner : Database connected")
            return
        except (SQLAlchemyError, OSError):
            logger.warning("Planner : Database not ready | [ %s/%s ] -> retrying...", i + 1, retries)
            await asyncio.sleep(delay)

    raise RuntimeError("Database unreachable after retries")
