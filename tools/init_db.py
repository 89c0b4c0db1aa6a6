"""
Drop and recreate the mentorship engine schema in the database named by
DATABASE_URL.

Usage:
    DATABASE_URL=postgresql+asyncpg://... python tools/init_db.py
"""

import asyncio

from mentorship_engine.common.database import Database, load_entities
from mentorship_engine.common.logger import get_logger

logger = get_logger()


async def reset_database():
    for name in load_entities():
        logger.info("Loaded entity module %s", name)

    db = Database()
    try:
        logger.info("Recreating schema on %s...", db.get_engine().url.host or "local")
        await db.create_schema(reset=True)
    finally:
        await db.close()
    logger.info("Database reset complete.")


def main():
    asyncio.run(reset_database())


if __name__ == "__main__":
    main()
