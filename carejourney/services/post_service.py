"""
carejourney/services/post_service.py

Purpose: Community forum posts

- Create, update and delete posts (with optional image)
- Forum and per-user listings, newest first
- Embedded likes and replies, toggled per user
- Author population for likes, replies and posts
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId

from carejourney.core.exceptions import AuthorizationError, ResourceNotFoundError
from carejourney.core.logging import get_logger, LogContext
from carejourney.db.mongo import (
    get_posts_collection,
    get_post_reports_collection,
    get_reply_reports_collection,
)
from carejourney.services.storage_service import StorageService, discard_object
from carejourney.services.user_service import get_users_brief
from carejourney.utils.constants import DEFAULT_PAGE_SIZE, NEWEST_FIRST
from carejourney.utils.time_utils import utcnow

logger = get_logger(__name__)


def _new_like(user_id: ObjectId) -> Dict[str, Any]:
    return {"_id": ObjectId(), "userId": user_id, "createdAt": utcnow()}


def _has_liked(likes: List[Dict[str, Any]], user_id: ObjectId) -> bool:
    return any(like.get("userId") == user_id for like in likes)


async def populate_posts(posts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Replaces owner/userId references with compact author records,
    loading every referenced user in a single query.
    """
    ids = set()
    for post in posts:
        ids.add(post.get("owner"))
        ids.update(like.get("userId") for like in post.get("likes", []))
        for reply in post.get("replies", []):
            ids.add(reply.get("owner"))
            ids.update(like.get("userId") for like in reply.get("likes", []))

    authors = await get_users_brief(ids)

    def author(user_id):
        return authors.get(user_id, {"_id": str(user_id), "name": None, "avatar": None, "userType": None})

    def populate_likes(likes):
        return [dict(like, userId=author(like.get("userId"))) for like in likes]

    populated = []
    for post in posts:
        populated.append(dict(
            post,
            owner=author(post.get("owner")),
            likes=populate_likes(post.get("likes", [])),
            replies=[
                dict(reply, owner=author(reply.get("owner")), likes=populate_likes(reply.get("likes", [])))
                for reply in post.get("replies", [])
            ],
        ))
    return populated


async def require_post(post_id: ObjectId) -> Dict[str, Any]:
    post = await get_posts_collection().find_one({"_id": post_id})
    if not post:
        raise ResourceNotFoundError("Post not found!")
    return post


def ensure_owner(post: Dict[str, Any], user_id: ObjectId, owner_id: Optional[ObjectId] = None) -> None:
    """
    Raises AuthorizationError unless user_id (and the claimed owner_id,
    when given) is the post owner.
    """
    if post.get("owner") != user_id or (owner_id is not None and owner_id != post.get("owner")):
        raise AuthorizationError("You are not allowed to change this post!")


async def create_post(
    owner_id: ObjectId,
    description: str,
    forum_type: str,
    image: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    now = utcnow()
    post = {
        "owner": owner_id,
        "description": description,
        "forumType": forum_type,
        "image": image,
        "likes": [],
        "replies": [],
        "createdAt": now,
        "updatedAt": now,
    }
    result = await get_posts_collection().insert_one(post)
    post["_id"] = result.inserted_id

    logger.info(
        f"Post created in forum '{forum_type}'",
        extra={"user_id": str(owner_id), "post_id": str(post["_id"])}
    )
    return (await populate_posts([post]))[0]


async def get_post(post_id: ObjectId) -> Dict[str, Any]:
    post = await require_post(post_id)
    return (await populate_posts([post]))[0]


async def list_posts(
    forum_type: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    page_no: int = 0
) -> List[Dict[str, Any]]:
    """
    Posts of one forum (or all forums), newest first.
    """
    query = {"forumType": forum_type} if forum_type else {}
    cursor = (
        get_posts_collection()
        .find(query)
        .sort(NEWEST_FIRST)
        .skip(page_no * limit)
        .limit(limit)
    )
    return await populate_posts(await cursor.to_list(length=None))


async def list_user_posts(owner_id: ObjectId) -> List[Dict[str, Any]]:
    cursor = get_posts_collection().find({"owner": owner_id}).sort(NEWEST_FIRST)
    return await populate_posts(await cursor.to_list(length=None))


async def update_post(
    post: Dict[str, Any],
    description: str,
    forum_type: str,
    image: Optional[Dict[str, str]],
    storage: StorageService
) -> Dict[str, Any]:
    """
    Rewrites description, forum and image of a post.
    The previous image object is deleted when it is replaced or dropped.
    """
    await get_posts_collection().update_one(
        {"_id": post["_id"]},
        {"$set": {
            "description": description,
            "forumType": forum_type,
            "image": image,
            "updatedAt": utcnow(),
        }}
    )

    old_key = (post.get("image") or {}).get("publicId")
    if old_key != (image or {}).get("publicId"):
        await discard_object(storage, old_key)
    logger.info("Post updated", extra={"post_id": str(post["_id"])})
    return await get_post(post["_id"])


async def delete_post(post: Dict[str, Any], storage: StorageService) -> None:
    """
    Deletes a post, its image object and the reports filed against it.
    """
    await get_posts_collection().delete_one({"_id": post["_id"]})
    await get_post_reports_collection().delete_many({"postId": post["_id"]})
    await get_reply_reports_collection().delete_many({"postId": post["_id"]})
    await discard_object(storage, (post.get("image") or {}).get("publicId"))
    logger.info("Post deleted", extra={"post_id": str(post["_id"])})


async def toggle_post_like(post_id: ObjectId, user_id: ObjectId) -> bool:
    """
    Likes the post, or removes the like if the user already liked it.

    Returns:
        True if the post is now liked by the user
    """
    posts = get_posts_collection()

    with LogContext(user_id=str(user_id), post_id=str(post_id)):
        # Conditional writes: a repeated request cannot add a second like
        result = await posts.update_one(
            {"_id": post_id, "likes.userId": {"$ne": user_id}},
            {"$push": {"likes": _new_like(user_id)}}
        )
        if result.modified_count:
            logger.info("Post liked")
            return True

        result = await posts.update_one(
            {"_id": post_id, "likes.userId": user_id},
            {"$pull": {"likes": {"userId": user_id}}}
        )
        if result.modified_count:
            logger.info("Post like removed")
            return False

        post = await require_post(post_id)
        return _has_liked(post.get("likes", []), user_id)


def _find_reply(post: Dict[str, Any], reply_id: ObjectId) -> Dict[str, Any]:
    for reply in post.get("replies", []):
        if reply.get("_id") == reply_id:
            return reply
    raise ResourceNotFoundError("Reply not found!")


async def add_reply(post_id: ObjectId, user_id: ObjectId, description: str) -> Dict[str, Any]:
    await require_post(post_id)

    reply = {
        "_id": ObjectId(),
        "owner": user_id,
        "description": description,
        "likes": [],
        "createdAt": utcnow(),
    }
    await get_posts_collection().update_one({"_id": post_id}, {"$push": {"replies": reply}})

    logger.info(
        "Reply added",
        extra={"user_id": str(user_id), "post_id": str(post_id), "reply_id": str(reply["_id"])}
    )
    authors = await get_users_brief([user_id])
    return dict(reply, owner=authors.get(user_id))


async def delete_reply(post_id: ObjectId, reply_id: ObjectId, user_id: ObjectId) -> None:
    """
    Deletes a reply; only its author may do so.
    """
    post = await require_post(post_id)
    reply = _find_reply(post, reply_id)
    if reply.get("owner") != user_id:
        raise AuthorizationError("You are not allowed to delete this reply!")

    await get_posts_collection().update_one(
        {"_id": post_id},
        {"$pull": {"replies": {"_id": reply_id}}}
    )
    await get_reply_reports_collection().delete_many({"postId": post_id, "replyId": reply_id})
    logger.info("Reply deleted", extra={"post_id": str(post_id), "reply_id": str(reply_id)})


async def toggle_reply_like(post_id: ObjectId, reply_id: ObjectId, user_id: ObjectId) -> bool:
    """
    Likes a reply, or removes the like if the user already liked it.

    Returns:
        True if the reply is now liked by the user
    """
    posts = get_posts_collection()

    # Only the matched reply's likes are written; sibling replies are untouched
    result = await posts.update_one(
        {"_id": post_id, "replies": {"$elemMatch": {"_id": reply_id, "likes.userId": {"$ne": user_id}}}},
        {"$push": {"replies.$.likes": _new_like(user_id)}}
    )
    liked = bool(result.modified_count)
    if not liked:
        result = await posts.update_one(
            {"_id": post_id, "replies": {"$elemMatch": {"_id": reply_id, "likes.userId": user_id}}},
            {"$pull": {"replies.$.likes": {"userId": user_id}}}
        )
        if not result.modified_count:
            reply = _find_reply(await require_post(post_id), reply_id)
            return _has_liked(reply.get("likes", []), user_id)

    logger.info(
        "Reply liked" if liked else "Reply like removed",
        extra={"user_id": str(user_id), "post_id": str(post_id), "reply_id": str(reply_id)}
    )
    return liked
