"""
profilehub/db/mongo.py

Purpose: MongoDB connection setup

- Initializes Motor client with connection pooling
- Single collection: users (one document per profile)
- Fail-fast connect on startup, health checks
- Proper connection lifecycle management
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError
from profilehub.core.logging import get_logger

logger = get_logger(__name__)


async def connect_to_mongo(mongodb_url: str, db_name: str) -> AsyncIOMotorClient:
    """
    Establishes connection to MongoDB.
    Called during application startup. There is no retry: an unreachable
    database aborts startup.
    
    Args:
        mongodb_url: MongoDB connection URI
        db_name: Database name (for logging)
    
    Returns:
        Connected AsyncIOMotorClient
    
    Raises:
        ConnectionError: If the server cannot be reached
    """
    logger.info("Attempting to connect to MongoDB")
    
    # Fix URL encoding for special characters
    mongodb_url = mongodb_url.replace("%%", "%25")
    
    client = AsyncIOMotorClient(
        mongodb_url,
        maxPoolSize=50,
        minPoolSize=0,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
    )
    
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        client.close()
        logger.critical(f"MongoDB connection error: {e}")
        raise ConnectionError("Could not establish MongoDB connection") from e
    
    logger.info(f"✅ Successfully connected to MongoDB: {db_name}")
    return client


async def close_mongo_connection(client: AsyncIOMotorClient):
    """
    Closes the MongoDB connection.
    Called during application shutdown.
    """
    if client:
        logger.info("Closing MongoDB connection")
        client.close()
        logger.info("MongoDB connection closed")


async def check_database_health(client) -> bool:
    """
    Checks if the database connection is healthy.
    
    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        if client is None:
            logger.error("MongoDB client not initialized")
            return False
        
        await client.admin.command("ping")
        return True
        
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


def get_users_collection(
    client: AsyncIOMotorClient,
    db_name: str,
    collection_name: str = "users"
) -> AsyncIOMotorCollection:
    """
    Returns the users collection.
    
    Document Fields:
    - username: str
    - uniqueSlug: str (unique)
    - url: str (profile link, base URL + slug)
    - image: str (single image mode)
    - images: list[str] (multiple image mode, at most 7)
    - secret: str (delete mode, 4 digits)
    - createdAt: datetime
    """
    if client is None:
        raise RuntimeError(
            "Database not initialized. Call connect_to_mongo() during startup."
        )
    return client[db_name][collection_name]
