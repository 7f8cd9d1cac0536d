"""
Database initialization script for the accounts service

Run once (or after a fresh deploy) to create the users indexes:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path
import os
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING
import logging

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


MONGODB_URL = os.getenv("MONGODB_URL")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME")

if not MONGODB_URL or not MONGODB_DB_NAME:
    raise ValueError("MONGODB_URL and MONGODB_DB_NAME must be set in .env file")


async def create_indexes():
    """Create the unique indexes that back mobile/email uniqueness"""

    logger.info(f"Connecting to MongoDB: {MONGODB_DB_NAME}")
    client = AsyncIOMotorClient(MONGODB_URL)
    db = client[MONGODB_DB_NAME]

    try:
        await client.admin.command('ping')
        logger.info("Connected successfully")

        users = db.users

        await users.create_index(
            [("mobile", ASCENDING)],
            unique=True,
            name="mobile_unique"
        )
        logger.info("  mobile index created (unique)")

        await users.create_index(
            [("email", ASCENDING)],
            unique=True,
            name="email_unique"
        )
        logger.info("  email index created (unique)")

        await users.create_index(
            [("created_at", ASCENDING)],
            name="created_at_idx"
        )
        logger.info("  created_at index created")

        indexes = await users.index_information()
        for idx_name in indexes.keys():
            if idx_name != "_id_":
                logger.info(f"    {idx_name}")

        logger.info(f"Current users: {await users.count_documents({})}")
        logger.info("Database initialization complete")

    except Exception as e:
        logger.error(f"Error: {e}")
        raise

    finally:
        client.close()


async def main():
    logger.info("=" * 60)
    logger.info("  Accounts Database Setup")
    logger.info("=" * 60)

    await create_indexes()


if __name__ == "__main__":
    asyncio.run(main())
