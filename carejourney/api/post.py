"""
carejourney/api/post.py

Purpose: Community forum endpoints

- Multipart post creation and update (optional image)
- Forum listing and single post
- Likes and replies
"""

from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile

from carejourney.api.deps import AuthContext, CurrentAuth, Storage
from carejourney.api.uploads import store_image
from carejourney.core.logging import get_logger
from carejourney.schemas.post import ReplyRequest
from carejourney.services import post_service
from carejourney.services.storage_service import StorageService
from carejourney.utils.bson_utils import to_json_compatible
from carejourney.utils.constants import (
    DEFAULT_CANCER_TYPE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    POST_DESCRIPTION_MIN_LENGTH,
    UPLOAD_KIND_POST,
)
from carejourney.utils.validation_utils import parse_object_id, require_min_length

logger = get_logger(__name__)
router = APIRouter()

DESCRIPTION_TOO_SHORT = f"Description must be at least {POST_DESCRIPTION_MIN_LENGTH} characters!"


@router.post("/add-post", status_code=201)
async def add_post(
    description: str = Form(""),
    forumType: str = Form(DEFAULT_CANCER_TYPE),
    image: Optional[UploadFile] = File(None),
    auth: AuthContext = CurrentAuth,
    storage: StorageService = Storage
):
    text = require_min_length(description, POST_DESCRIPTION_MIN_LENGTH, DESCRIPTION_TOO_SHORT)
    forum = forumType.strip() or DEFAULT_CANCER_TYPE

    stored = await store_image(image, auth.user_id, UPLOAD_KIND_POST, storage)
    post = await post_service.create_post(auth.user_id, text, forum, stored)
    return to_json_compatible({"success": True, "post": post})


@router.get("/posts")
async def get_posts(
    forumType: Optional[str] = Query(default=None),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    pageNo: int = Query(default=0, ge=0),
    auth: AuthContext = CurrentAuth
):
    posts = await post_service.list_posts(forumType, limit=limit, page_no=pageNo)
    return to_json_compatible({"posts": posts})


@router.patch("/")
async def update_post(
    postId: str = Query(...),
    ownerId: str = Query(...),
    description: str = Form(""),
    forumType: str = Form(DEFAULT_CANCER_TYPE),
    image: Optional[UploadFile] = File(None),
    auth: AuthContext = CurrentAuth,
    storage: StorageService = Storage
):
    """
    Rewrites a post. The image sent replaces the stored one; a request
    without an image leaves the post without one.
    """
    post_id = parse_object_id(postId, "postId")
    owner_id = parse_object_id(ownerId, "ownerId")

    post = await post_service.require_post(post_id)
    post_service.ensure_owner(post, auth.user_id, owner_id)

    text = require_min_length(description, POST_DESCRIPTION_MIN_LENGTH, DESCRIPTION_TOO_SHORT)
    forum = forumType.strip() or DEFAULT_CANCER_TYPE

    stored = await store_image(image, auth.user_id, UPLOAD_KIND_POST, storage)
    updated = await post_service.update_post(post, text, forum, stored, storage)
    return to_json_compatible({"success": True, "post": updated})


@router.delete("/post-delete")
async def delete_post(
    postId: str = Query(...),
    ownerId: str = Query(...),
    auth: AuthContext = CurrentAuth,
    storage: StorageService = Storage
):
    post_id = parse_object_id(postId, "postId")
    owner_id = parse_object_id(ownerId, "ownerId")

    post = await post_service.require_post(post_id)
    post_service.ensure_owner(post, auth.user_id, owner_id)

    await post_service.delete_post(post, storage)
    return {"success": True}


@router.post("/update-post-favorite")
async def update_post_favorite(postId: str = Query(...), auth: AuthContext = CurrentAuth):
    post_id = parse_object_id(postId, "postId")
    liked = await post_service.toggle_post_like(post_id, auth.user_id)
    return {"success": True, "liked": liked}


@router.post("/add-reply", status_code=201)
async def add_reply(body: ReplyRequest, postId: str = Query(...), auth: AuthContext = CurrentAuth):
    post_id = parse_object_id(postId, "postId")
    reply = await post_service.add_reply(post_id, auth.user_id, body.description)
    return to_json_compatible({"success": True, "reply": reply})


@router.delete("/reply-delete")
async def delete_reply(
    postId: str = Query(...),
    replyId: str = Query(...),
    auth: AuthContext = CurrentAuth
):
    post_id = parse_object_id(postId, "postId")
    reply_id = parse_object_id(replyId, "replyId")
    await post_service.delete_reply(post_id, reply_id, auth.user_id)
    return {"success": True}


@router.post("/update-reply-favorite")
async def update_reply_favorite(
    postId: str = Query(...),
    replyId: str = Query(...),
    auth: AuthContext = CurrentAuth
):
    post_id = parse_object_id(postId, "postId")
    reply_id = parse_object_id(replyId, "replyId")
    liked = await post_service.toggle_reply_like(post_id, reply_id, auth.user_id)
    return {"success": True, "liked": liked}


# Registered last so the literal paths above take precedence
@router.get("/{postId}")
async def get_post(postId: str, auth: AuthContext = CurrentAuth):
    post_id = parse_object_id(postId, "postId")
    post = await post_service.get_post(post_id)
    return to_json_compatible({"post": post})
