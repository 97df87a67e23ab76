import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from profilehub.core.config import settings
from profilehub.db.mongo import connect_to_mongo, close_mongo_connection, get_users_collection
from profilehub.db.indexes import UNIQUE_SLUG_INDEX

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def check_indexes():
    client = await connect_to_mongo(settings.MONGODB_URL, settings.MONGODB_DB_NAME)
    users = get_users_collection(client, settings.MONGODB_DB_NAME, settings.MONGODB_USERS_COLLECTION)
    
    try:
        indexes = await users.index_information()
        logger.info(f"Existing indexes: {list(indexes.keys())}")
        
        if UNIQUE_SLUG_INDEX in indexes and indexes[UNIQUE_SLUG_INDEX].get("unique"):
            logger.info(f"✅ '{UNIQUE_SLUG_INDEX}' exists and is unique.")
        else:
            logger.error(f"❌ '{UNIQUE_SLUG_INDEX}' is missing! Duplicate slugs are possible under concurrency.")
            
    except Exception as e:
        logger.error(f"Error checking index: {e}")
        raise
    finally:
        await close_mongo_connection(client)

if __name__ == "__main__":
    asyncio.run(check_indexes())
