"""
profilehub/db/indexes.py

Purpose: Database index management

- Unique index on uniqueSlug (the authority on slug uniqueness)
- Index on createdAt for listing/analytics
"""

from pymongo import ASCENDING, DESCENDING
from profilehub.core.logging import get_logger

logger = get_logger(__name__)

UNIQUE_SLUG_INDEX = "unique_slug_unique"


async def create_indexes(users):
    """
    Creates the users collection indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        logger.info("Creating database indexes...")
        
        await users.create_index(
            [("uniqueSlug", ASCENDING)],
            unique=True,
            name=UNIQUE_SLUG_INDEX
        )
        logger.debug("Created unique index on users.uniqueSlug")
        
        await users.create_index(
            [("createdAt", DESCENDING)],
            name="created_at_idx"
        )
        logger.debug("Created index on users.createdAt")
        
        user_indexes = await users.index_information()
        logger.info(f"✅ Database indexes ready: {sorted(user_indexes.keys())}")
        
    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise

