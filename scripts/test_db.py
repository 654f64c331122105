"""
Quick check of the MongoDB connection and collection contents

Run: python scripts/test_db.py
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

import logging

from carejourney.db import mongo

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def check_connection():
    """Ping MongoDB and print per-collection document counts."""
    print("=" * 60)
    print("  MongoDB Connection Test")
    print("=" * 60 + "\n")

    try:
        logger.info("🔌 Connecting to MongoDB...")
        await mongo.connect_to_mongo()

        if not await mongo.check_database_health():
            raise RuntimeError("Ping failed")
        logger.info("✅ Connection successful!\n")

        db = mongo.get_database()
        collections = await db.list_collection_names()
        logger.info(f"📦 Collections: {collections if collections else '(none yet)'}\n")

        logger.info("📊 Statistics:")
        for name in sorted(collections):
            logger.info(f"   {name}: {await db[name].count_documents({})}")

        unverified = await db[mongo.USERS].count_documents({"verified": False})
        logger.info(f"   unverified users: {unverified}\n")

        logger.info("✅ All checks passed!")

    except Exception as e:
        logger.error(f"❌ Check failed: {e}")
        raise

    finally:
        await mongo.close_mongo_connection()

    print("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(check_connection())
