"""
carejourney/services/user_service.py

Purpose: User data management

- Create accounts and check credentials
- Track signed-in bearer tokens per user
- Update profile, avatar and push token
- Follow / unfollow and follower listings
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from carejourney.core.exceptions import (
    AuthorizationError,
    ConflictError,
    ResourceNotFoundError,
    ValidationError,
)
from carejourney.core.logging import get_logger, LogContext
from carejourney.core.security import create_access_token, hash_secret, verify_secret
from carejourney.db.mongo import get_users_collection
from carejourney.utils.constants import DEFAULT_CANCER_TYPE, DEFAULT_USER_TYPE
from carejourney.utils.time_utils import utcnow

logger = get_logger(__name__)


def avatar_url(user: Dict[str, Any]) -> Optional[str]:
    avatar = user.get("avatar") or {}
    return avatar.get("url")


def format_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Profile of the signed-in user as returned by sign-in, is-auth and
    profile updates.
    """
    return {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "verified": user.get("verified", False),
        "avatar": avatar_url(user),
        "followers": len(user.get("followers", [])),
        "followings": len(user.get("followings", [])),
        "createdAt": user.get("createdAt"),
        "gender": user.get("gender"),
        "birthDate": user.get("birthDate"),
        "userType": user.get("userType", DEFAULT_USER_TYPE),
        "cancerType": user.get("cancerType", DEFAULT_CANCER_TYPE),
        "diagnosisDate": user.get("diagnosisDate"),
        "stage": user.get("stage", ""),
        "country": user.get("country"),
        "expoPushToken": user.get("expoPushToken"),
    }


def format_public_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Profile of another user; no email, tokens or push token.
    """
    return {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "avatar": avatar_url(user),
        "followers": len(user.get("followers", [])),
        "followings": len(user.get("followings", [])),
        "userType": user.get("userType", DEFAULT_USER_TYPE),
        "cancerType": user.get("cancerType", DEFAULT_CANCER_TYPE),
        "country": user.get("country"),
        "createdAt": user.get("createdAt"),
    }


def format_user_brief(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Compact author record embedded in posts, likes and follower lists.
    """
    avatar = user.get("avatar") or {}
    return {
        "_id": str(user["_id"]),
        "name": user.get("name"),
        "avatar": {"url": avatar.get("url", ""), "publicId": avatar.get("publicId", "")},
        "userType": user.get("userType", DEFAULT_USER_TYPE),
    }


async def create_user(name: str, email: str, password: str) -> Dict[str, Any]:
    """
    Creates an unverified account.

    Raises:
        ConflictError: If the email is already registered
    """
    users = get_users_collection()

    if await users.find_one({"email": email}):
        raise ConflictError("Email is already in use!")

    now = utcnow()
    user = {
        "name": name,
        "email": email,
        "password": hash_secret(password),
        "verified": False,
        "avatar": None,
        "tokens": [],
        "followers": [],
        "followings": [],
        "gender": None,
        "birthDate": None,
        "userType": DEFAULT_USER_TYPE,
        "cancerType": DEFAULT_CANCER_TYPE,
        "diagnosisDate": None,
        "stage": "",
        "country": None,
        "expoPushToken": None,
        "createdAt": now,
        "updatedAt": now,
    }

    try:
        result = await users.insert_one(user)
    except DuplicateKeyError:
        raise ConflictError("Email is already in use!")

    user["_id"] = result.inserted_id
    logger.info("New user created", extra={"user_id": str(user["_id"])})
    return user


async def get_user_by_id(user_id: ObjectId) -> Optional[Dict[str, Any]]:
    return await get_users_collection().find_one({"_id": user_id})


async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    return await get_users_collection().find_one({"email": email.strip().lower()})


async def require_user(user_id: ObjectId, message: str = "User not found!") -> Dict[str, Any]:
    user = await get_user_by_id(user_id)
    if not user:
        raise ResourceNotFoundError(message)
    return user


async def get_user_by_token(user_id: str, token: str) -> Optional[Dict[str, Any]]:
    """
    Finds the user a bearer token belongs to; the token must still be
    listed among the user's signed-in tokens.
    """
    if not ObjectId.is_valid(user_id):
        return None
    return await get_users_collection().find_one({"_id": ObjectId(user_id), "tokens": token})


async def sign_in(email: str, password: str) -> Tuple[Dict[str, Any], str]:
    """
    Checks credentials and issues a new bearer token.

    Returns:
        (user document, token)

    Raises:
        AuthorizationError: If the email is unknown or the password does not match
    """
    user = await get_user_by_email(email)
    if not user or not verify_secret(password, user.get("password")):
        raise AuthorizationError("Email/Password mismatch!")

    token = create_access_token(str(user["_id"]))
    await get_users_collection().update_one(
        {"_id": user["_id"]},
        {"$push": {"tokens": token}}
    )
    user.setdefault("tokens", []).append(token)

    logger.info("User signed in", extra={"user_id": str(user["_id"])})
    return user, token


async def log_out(user_id: ObjectId, token: str, from_all: bool = False) -> None:
    """
    Revokes the current bearer token, or every token of the user.
    """
    update = {"$set": {"tokens": []}} if from_all else {"$pull": {"tokens": token}}
    await get_users_collection().update_one({"_id": user_id}, update)
    logger.info(
        "User signed out" + (" from all devices" if from_all else ""),
        extra={"user_id": str(user_id)}
    )


async def mark_verified(user_id: ObjectId) -> None:
    await get_users_collection().update_one(
        {"_id": user_id},
        {"$set": {"verified": True, "updatedAt": utcnow()}}
    )


async def change_password(user: Dict[str, Any], new_password: str) -> None:
    """
    Replaces the password and signs the user out everywhere.

    Raises:
        ValidationError: If the new password equals the current one
    """
    if verify_secret(new_password, user.get("password")):
        raise ValidationError("The new password must be different!")

    await get_users_collection().update_one(
        {"_id": user["_id"]},
        {"$set": {"password": hash_secret(new_password), "tokens": [], "updatedAt": utcnow()}}
    )
    logger.info("Password changed", extra={"user_id": str(user["_id"])})


async def update_profile(user_id: ObjectId, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Applies the given profile fields and returns the updated document.
    """
    users = get_users_collection()
    with LogContext(user_id=str(user_id)):
        if fields:
            fields = dict(fields, updatedAt=utcnow())
            await users.update_one({"_id": user_id}, {"$set": fields})
            logger.info(f"Profile updated: {', '.join(sorted(fields))}")
    return await require_user(user_id)


async def update_avatar(user_id: ObjectId, avatar: Dict[str, str]) -> Dict[str, Any]:
    return await update_profile(user_id, {"avatar": avatar})


async def update_push_token(user_id: ObjectId, push_token: str) -> None:
    await get_users_collection().update_one(
        {"_id": user_id},
        {"$set": {"expoPushToken": push_token}}
    )


async def toggle_follow(current_user_id: ObjectId, profile_id: ObjectId) -> str:
    """
    Follows the profile, or unfollows it if already followed.

    Returns:
        "added" or "removed"

    Raises:
        ValidationError: When following oneself
        ResourceNotFoundError: If the profile does not exist
    """
    if current_user_id == profile_id:
        raise ValidationError("Invalid request!")

    users = get_users_collection()
    profile = await require_user(profile_id, "Profile not found!")

    if current_user_id in profile.get("followers", []):
        await users.update_one({"_id": profile_id}, {"$pull": {"followers": current_user_id}})
        await users.update_one({"_id": current_user_id}, {"$pull": {"followings": profile_id}})
        status = "removed"
    else:
        await users.update_one({"_id": profile_id}, {"$addToSet": {"followers": current_user_id}})
        await users.update_one({"_id": current_user_id}, {"$addToSet": {"followings": profile_id}})
        status = "added"

    logger.info(
        f"Follow {status}: {profile_id}",
        extra={"user_id": str(current_user_id)}
    )
    return status


async def get_users_brief(user_ids: Iterable[ObjectId]) -> Dict[ObjectId, Dict[str, Any]]:
    """
    Loads compact author records for a set of user ids in one query.
    """
    ids = list({uid for uid in user_ids if uid is not None})
    if not ids:
        return {}
    cursor = get_users_collection().find(
        {"_id": {"$in": ids}},
        {"name": 1, "avatar": 1, "userType": 1}
    )
    users = await cursor.to_list(length=None)
    return {user["_id"]: format_user_brief(user) for user in users}


async def list_follow_users(profile_id: ObjectId, field: str) -> List[Dict[str, Any]]:
    """
    Lists the followers or followings of a profile.

    Args:
        profile_id: Profile whose list is read
        field: "followers" or "followings"
    """
    profile = await require_user(profile_id, "Profile not found!")
    ids = profile.get(field, [])
    briefs = await get_users_brief(ids)
    # Keep the stored order (oldest first)
    return [briefs[uid] for uid in ids if uid in briefs]
