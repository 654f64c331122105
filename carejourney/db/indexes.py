"""
carejourney/db/indexes.py

Purpose: Database index management

- Creates unique and performance indexes
- Ensures fast lookups and data integrity
- TTL indexes for one-time token cleanup
"""

from pymongo import ASCENDING, DESCENDING

from carejourney.core.config import settings
from carejourney.core.logging import get_logger
from carejourney.db.mongo import (
    get_users_collection,
    get_email_verification_tokens_collection,
    get_password_reset_tokens_collection,
    get_posts_collection,
    get_appointments_collection,
    get_medications_collection,
    get_post_reports_collection,
    get_reply_reports_collection,
    get_files_collection,
)

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        logger.info("Creating database indexes...")

        # ==============================================
        # USERS
        # ==============================================
        users = get_users_collection()
        await users.create_index("email", unique=True, name="email_unique")
        await users.create_index("tokens", name="tokens_idx")
        logger.debug("Created indexes on users")

        # ==============================================
        # ONE-TIME TOKENS (expire after an hour)
        # ==============================================
        ttl = settings.VERIFICATION_TOKEN_TTL_SECONDS
        for collection in (
            get_email_verification_tokens_collection(),
            get_password_reset_tokens_collection(),
        ):
            await collection.create_index("owner", name="owner_idx")
            await collection.create_index(
                "createdAt",
                name="created_at_ttl",
                expireAfterSeconds=ttl
            )
        logger.debug(f"Created TTL indexes on one-time tokens ({ttl}s)")

        # ==============================================
        # POSTS
        # ==============================================
        posts = get_posts_collection()
        await posts.create_index(
            [("forumType", ASCENDING), ("createdAt", DESCENDING)],
            name="forum_recent_idx"
        )
        await posts.create_index(
            [("owner", ASCENDING), ("createdAt", DESCENDING)],
            name="owner_recent_idx"
        )
        logger.debug("Created indexes on posts")

        # ==============================================
        # SCHEDULES
        # ==============================================
        await get_appointments_collection().create_index(
            [("owner", ASCENDING), ("date", ASCENDING)],
            name="owner_date_idx"
        )
        await get_medications_collection().create_index(
            [("owner", ASCENDING), ("createdAt", DESCENDING)],
            name="owner_recent_idx"
        )
        logger.debug("Created indexes on schedules")

        # ==============================================
        # REPORTS & FILES
        # ==============================================
        await get_post_reports_collection().create_index("postId", name="post_idx")
        await get_reply_reports_collection().create_index(
            [("postId", ASCENDING), ("replyId", ASCENDING)],
            name="post_reply_idx"
        )
        await get_files_collection().create_index(
            [("owner", ASCENDING), ("folderName", ASCENDING)],
            name="owner_folder_idx"
        )

        logger.info("✅ All database indexes created successfully")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise
