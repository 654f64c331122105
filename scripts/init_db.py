"""
Database initialization script - collections and indexes for CareJourney

Run once (or after adding indexes) to create them:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

import logging

from carejourney.core.config import settings
from carejourney.db import mongo
from carejourney.db.indexes import create_indexes

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

COLLECTIONS = [
    mongo.USERS,
    mongo.EMAIL_VERIFICATION_TOKENS,
    mongo.PASSWORD_RESET_TOKENS,
    mongo.POSTS,
    mongo.APPOINTMENTS,
    mongo.MEDICATIONS,
    mongo.POST_REPORTS,
    mongo.REPLY_REPORTS,
    mongo.FILES,
]


async def main():
    """Main initialization"""
    logger.info("=" * 60)
    logger.info("  CareJourney Database Setup")
    logger.info("=" * 60 + "\n")

    logger.info(f"🔌 Connecting to MongoDB: {settings.MONGODB_DB_NAME}")
    await mongo.connect_to_mongo()

    try:
        await create_indexes()

        # ==================== VERIFICATION ====================
        logger.info("\n🔍 Verifying indexes...")
        db = mongo.get_database()
        for collection_name in COLLECTIONS:
            indexes = await db[collection_name].index_information()
            logger.info(f"\n  {collection_name}:")
            for idx_name in indexes.keys():
                if idx_name != "_id_":
                    logger.info(f"    ✅ {idx_name}")

        # ==================== STATS ====================
        logger.info("\n📊 Current documents:")
        for collection_name in COLLECTIONS:
            count = await db[collection_name].count_documents({})
            logger.info(f"  {collection_name}: {count}")

        logger.info("\n✅ Database initialization complete!")

    except Exception as e:
        logger.error(f"\n❌ Error: {e}")
        raise

    finally:
        await mongo.close_mongo_connection()

    logger.info("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
