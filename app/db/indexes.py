"""
app/db/indexes.py

Purpose: Database index management

- Unique indexes backing the mobile/email uniqueness invariant
- Idempotent, safe to run on every startup
"""

from app.db.mongo import get_users_collection
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = get_users_collection()

        logger.info("Creating database indexes...")

        await users.create_index("mobile", unique=True, name="mobile_unique")
        logger.debug("Created unique index on users.mobile")

        await users.create_index("email", unique=True, name="email_unique")
        logger.debug("Created unique index on users.email")

        # Index on created_at for analytics
        await users.create_index("created_at", name="created_at_idx")
        logger.debug("Created index on users.created_at")

        user_indexes = await users.index_information()
        logger.info(f"Index summary: Users={len(user_indexes)}")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    """
    Run this script directly to create indexes manually.
    """
    import asyncio
    from app.db.mongo import connect_to_mongo, close_mongo_connection

    async def main():
        await connect_to_mongo()
        await create_indexes()
        await close_mongo_connection()

    asyncio.run(main())
