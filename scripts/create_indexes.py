"""
MongoDB Index Creation Script

Run this to create all indexes the API relies on. The application also applies
them at startup; the script is for preparing a database ahead of a deployment.

Usage:
    python scripts/create_indexes.py [--db-name NAME]
"""

import sys
from pathlib import Path

# Add parent directory to Python path to allow importing from root
sys.path.insert(0, str(Path(__file__).parent.parent))

import argparse
import asyncio

from motor.motor_asyncio import AsyncIOMotorClient

from config import settings
from logging_config import logger
from services.indexes import ensure_indexes

parser = argparse.ArgumentParser(description="Create MongoDB indexes.")
parser.add_argument("--db-name", default=settings.DB_NAME, help="Database to create indexes in.")
args = parser.parse_args()


async def create_indexes():
    """Create all necessary indexes for optimal query performance"""
    client = AsyncIOMotorClient(settings.DB_URL, tz_aware=True)
    db = client[args.db_name]

    logger.info(f"Starting index creation for database: {args.db_name}...")
    try:
        await ensure_indexes(db)
        logger.info("✅ All indexes created successfully!")
        for collection_name in ["users", "matches", "ratings"]:
            indexes = await db[collection_name].index_information()
            logger.info(f"{collection_name}: {len(indexes)} indexes")
    except Exception as e:
        logger.error(f"❌ Error creating indexes: {str(e)}")
        raise
    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(create_indexes())
