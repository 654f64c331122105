"""
carejourney/services/report_service.py

Purpose: Abuse reports on posts and replies

- Check the reported post/reply exists
- Store one report document per submission
"""

from typing import Any, Dict

from bson import ObjectId

from carejourney.core.exceptions import ResourceNotFoundError
from carejourney.core.logging import get_logger
from carejourney.db.mongo import get_post_reports_collection, get_reply_reports_collection
from carejourney.services.post_service import require_post
from carejourney.utils.time_utils import utcnow

logger = get_logger(__name__)


async def add_post_report(owner_id: ObjectId, post_id: ObjectId, description: str) -> Dict[str, Any]:
    await require_post(post_id)

    report = {
        "owner": owner_id,
        "postId": post_id,
        "description": description,
        "createdAt": utcnow(),
    }
    result = await get_post_reports_collection().insert_one(report)
    report["_id"] = result.inserted_id

    logger.warning(
        "Post reported",
        extra={"user_id": str(owner_id), "post_id": str(post_id)}
    )
    return report


async def add_reply_report(
    owner_id: ObjectId,
    post_id: ObjectId,
    reply_id: ObjectId,
    description: str
) -> Dict[str, Any]:
    post = await require_post(post_id)
    if not any(reply.get("_id") == reply_id for reply in post.get("replies", [])):
        raise ResourceNotFoundError("Reply not found!")

    report = {
        "owner": owner_id,
        "postId": post_id,
        "replyId": reply_id,
        "description": description,
        "createdAt": utcnow(),
    }
    result = await get_reply_reports_collection().insert_one(report)
    report["_id"] = result.inserted_id

    logger.warning(
        "Reply reported",
        extra={"user_id": str(owner_id), "post_id": str(post_id), "reply_id": str(reply_id)}
    )
    return report
