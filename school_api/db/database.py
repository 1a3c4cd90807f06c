# school_api/db/database.py
import motor.motor_asyncio
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure

from school_api.core.config import settings

logger = logging.getLogger(__name__)

# --- MongoDB Collection Names ---
USER_COLLECTION = "users"
SCHOOL_COLLECTION = "schools"
CLASSROOM_COLLECTION = "classrooms"
STUDENT_COLLECTION = "students"

EXPECTED_COLLECTIONS = [USER_COLLECTION, SCHOOL_COLLECTION, CLASSROOM_COLLECTION, STUDENT_COLLECTION]

# Indexes the uniqueness rules rely on as a backstop for the pre-check queries
INDEXES = {
    USER_COLLECTION: [
        ([("email", ASCENDING)], {"name": "idx_user_email", "unique": True}),
    ],
    SCHOOL_COLLECTION: [
        ([("name", ASCENDING)], {"name": "idx_school_name", "unique": True}),
        ([("created_at", DESCENDING)], {"name": "idx_school_created_at"}),
    ],
    CLASSROOM_COLLECTION: [
        ([("name", ASCENDING), ("school", ASCENDING)], {"name": "idx_classroom_name_school", "unique": True}),
        ([("school", ASCENDING), ("created_at", DESCENDING)], {"name": "idx_classroom_school_created_at"}),
    ],
    STUDENT_COLLECTION: [
        ([("school", ASCENDING)], {"name": "idx_student_school"}),
        ([("classroom", ASCENDING)], {"name": "idx_student_classroom"}),
    ],
}

# Module-level client and database, set by connect_to_mongo()
_client: Optional[motor.motor_asyncio.AsyncIOMotorClient] = None
_db: Optional[motor.motor_asyncio.AsyncIOMotorDatabase] = None

async def connect_to_mongo() -> bool:
    """
    Establishes the MongoDB connection using settings from school_api.core.config.

    Returns:
        bool: True if connection successful, False otherwise.
    """
    global _client, _db

    if _db is not None:
        logger.info("Database connection already established.")
        return True

    if not settings.MONGODB_URL:
        logger.error("FATAL ERROR: MONGODB_URL is not configured.")
        return False

    logger.info(f"Attempting to connect to MongoDB database: '{settings.DB_NAME}'...")
    try:
        _client = motor.motor_asyncio.AsyncIOMotorClient(
            settings.MONGODB_URL,
            tls=settings.MONGODB_TLS,
            serverSelectionTimeoutMS=10000,
            maxPoolSize=10,
            uuidRepresentation='standard',
            tz_aware=True,
            appname=settings.PROJECT_NAME,
        )
        # Ping the server to verify connection before proceeding
        await _client.admin.command('ping')
        logger.info("MongoDB server ping successful.")

        _db = _client[settings.DB_NAME]
        logger.info(f"Successfully connected to MongoDB database: '{settings.DB_NAME}'")
        return True

    except Exception as e:
        logger.error(f"ERROR: Could not connect to MongoDB: {e}", exc_info=True)
        _client = None
        _db = None
        return False

async def close_mongo_connection():
    """Closes the MongoDB connection and resets state."""
    global _client, _db
    if _client:
        logger.info("Closing MongoDB connection...")
        _client.close()
        logger.info("MongoDB connection closed.")
        _client = None
        _db = None
    else:
        logger.info("No active MongoDB connection to close.")

def get_database() -> Optional[motor.motor_asyncio.AsyncIOMotorDatabase]:
    """
    Returns the database instance.
    Relies on connect_to_mongo() being called successfully at app startup.
    """
    if _db is None:
        logger.warning("Warning: Database instance is not initialized! Check connection.")
    return _db

async def ensure_indexes(db: motor.motor_asyncio.AsyncIOMotorDatabase) -> None:
    """Creates the indexes listed in INDEXES. Existing identical indexes are a no-op."""
    for collection_name, indexes in INDEXES.items():
        collection = db.get_collection(collection_name)
        for keys, options in indexes:
            try:
                await collection.create_index(keys, **options)
                logger.info(f"Index '{options['name']}' on {collection_name} ensured.")
            except OperationFailure as e:
                if e.code in (85, 86):  # IndexOptionsConflict / IndexKeySpecsConflict
                    logger.warning(
                        f"Index '{options['name']}' on {collection_name} conflicts with an existing index "
                        f"and was left unchanged. Error details: {e.details}"
                    )
                else:
                    logger.error(f"Database OperationFailure while creating index '{options['name']}': {e}", exc_info=True)
                    raise

async def check_database_health() -> Dict[str, Any]:
    """
    Performs a health check on the database connection and returns detailed status information.

    Returns:
        Dict containing status, connection details, collection info, errors, timestamp.
    """
    health_info = {
        "status": "OK",
        "connected": False,
        "collections": [],
        "expected_collections": EXPECTED_COLLECTIONS,
        "missing_collections": [],
        "error": None,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

    try:
        db_instance = get_database()
        if db_instance is None:
            health_info.update({
                "status": "ERROR",
                "error": "Database instance not initialized (connection likely failed on startup)"
            })
            return health_info

        await db_instance.client.admin.command('ping')
        health_info["connected"] = True

        collections = await db_instance.list_collection_names()
        health_info["collections"] = collections

        # Collections are created lazily on first insert
        missing = [col for col in EXPECTED_COLLECTIONS if col not in collections]
        if missing:
            health_info["missing_collections"] = missing
            health_info["status"] = "WARNING"
            logger.warning(f"Database health check WARNING: Missing expected collections: {missing}")

        return health_info

    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        health_info.update({
            "status": "ERROR",
            "connected": False,
            "error": str(e)
        })
        return health_info
