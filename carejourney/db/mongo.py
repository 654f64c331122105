"""
carejourney/db/mongo.py

Purpose: MongoDB connection setup

- Initializes Motor client with connection pooling
- One collection per record type (users, posts, schedules, reports, files)
- Health checks and retry logic
- Proper connection lifecycle management
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from typing import Optional
import asyncio
from carejourney.core.config import settings
from carejourney.core.logging import get_logger

logger = get_logger(__name__)

# Collection names
USERS = "users"
EMAIL_VERIFICATION_TOKENS = "email_verification_tokens"
PASSWORD_RESET_TOKENS = "password_reset_tokens"
POSTS = "posts"
APPOINTMENTS = "appointments"
MEDICATIONS = "medications"
POST_REPORTS = "post_reports"
REPLY_REPORTS = "reply_reports"
FILES = "files"

# Global MongoDB client
_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def connect_to_mongo():
    """
    Establishes connection to MongoDB with retry logic.
    Called during application startup.
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    max_retries = 3
    retry_delay = 2

    for attempt in range(1, max_retries + 1):
        try:
            logger.info(
                f"Attempting to connect to MongoDB (attempt {attempt}/{max_retries})"
            )

            _client = AsyncIOMotorClient(
                settings.MONGODB_URL,
                maxPoolSize=50,
                minPoolSize=5,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                retryWrites=True,
                retryReads=True,
            )

            _database = _client[settings.MONGODB_DB_NAME]

            # Verify connection
            await _client.admin.command("ping")

            logger.info(
                f"✅ Successfully connected to MongoDB: {settings.MONGODB_DB_NAME}"
            )
            return

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(
                f"Failed to connect to MongoDB (attempt {attempt}/{max_retries}): {e}"
            )
            if _client is not None:
                _client.close()
            _client = None
            _database = None

            if attempt < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.critical("Failed to connect to MongoDB after all retries")
                raise ConnectionError("Could not establish MongoDB connection") from e


async def close_mongo_connection():
    """
    Closes the MongoDB connection.
    Called during application shutdown.
    """
    global _client, _database

    if _client:
        logger.info("Closing MongoDB connection")
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


async def check_database_health() -> bool:
    """
    Checks if the database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        if _client is None:
            logger.error("MongoDB client not initialized")
            return False

        await _client.admin.command("ping")
        return True

    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


def get_database() -> AsyncIOMotorDatabase:
    """
    Returns the MongoDB database instance.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _database is None:
        raise RuntimeError(
            "Database not initialized. Call connect_to_mongo() during startup."
        )
    return _database


def get_collection(name: str):
    return get_database()[name]


def get_users_collection():
    """
    Returns the users collection.

    Fields:
    - name, email (unique), password (bcrypt hash), verified
    - avatar: {url, publicId} | None
    - tokens: list[str] (bearer tokens currently signed in)
    - followers, followings: list[ObjectId]
    - gender, birthDate, userType, cancerType, diagnosisDate, stage, country
    - expoPushToken, createdAt, updatedAt
    """
    return get_collection(USERS)


def get_email_verification_tokens_collection():
    return get_collection(EMAIL_VERIFICATION_TOKENS)


def get_password_reset_tokens_collection():
    return get_collection(PASSWORD_RESET_TOKENS)


def get_posts_collection():
    """
    Returns the posts collection.

    Likes and replies are embedded:
    - likes: list[{_id, userId, createdAt}]
    - replies: list[{_id, owner, description, likes, createdAt}]
    """
    return get_collection(POSTS)


def get_appointments_collection():
    return get_collection(APPOINTMENTS)


def get_medications_collection():
    return get_collection(MEDICATIONS)


def get_post_reports_collection():
    return get_collection(POST_REPORTS)


def get_reply_reports_collection():
    return get_collection(REPLY_REPORTS)


def get_files_collection():
    return get_collection(FILES)
