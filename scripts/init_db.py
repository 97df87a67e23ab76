"""
Database initialization script

Run once to create the users collection indexes:
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
import logging

from profilehub.db.indexes import create_indexes

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


MONGODB_URL = os.getenv("MONGODB_URL")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME")
MONGODB_USERS_COLLECTION = os.getenv("MONGODB_USERS_COLLECTION", "users")

if not MONGODB_URL or not MONGODB_DB_NAME:
    raise ValueError("❌ MONGODB_URL and MONGODB_DB_NAME must be set in .env file")


async def main():
    """Main initialization"""
    logger.info("=" * 60)
    logger.info("  ProfileHub Database Setup")
    logger.info("=" * 60 + "\n")
    
    logger.info(f"🔌 Connecting to MongoDB: {MONGODB_DB_NAME}")
    client = AsyncIOMotorClient(MONGODB_URL)
    users = client[MONGODB_DB_NAME][MONGODB_USERS_COLLECTION]
    
    try:
        await client.admin.command('ping')
        logger.info("✅ Connected successfully\n")
        
        await create_indexes(users)
        
        indexes = await users.index_information()
        logger.info(f"\n  {MONGODB_USERS_COLLECTION}:")
        for idx_name in indexes.keys():
            if idx_name != "_id_":
                logger.info(f"    ✅ {idx_name}")
        
        count = await users.count_documents({})
        logger.info(f"\n📊 Current users: {count}")
        logger.info("\n✅ Database initialization complete!")
        
    except Exception as e:
        logger.error(f"\n❌ Error: {e}")
        raise
    
    finally:
        client.close()
    
    logger.info("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
