"""
carejourney/services/token_service.py

Purpose: One-time tokens

- Email verification codes (6 digits)
- Password reset tokens
- Stored hashed, one per user, expiring after VERIFICATION_TOKEN_TTL_SECONDS
"""

from typing import Optional, Dict, Any

from bson import ObjectId

from carejourney.core.config import settings
from carejourney.core.logging import get_logger
from carejourney.core.security import (
    generate_otp,
    generate_reset_token,
    hash_secret,
    verify_secret,
)
from carejourney.db.mongo import (
    get_email_verification_tokens_collection,
    get_password_reset_tokens_collection,
)
from carejourney.utils.time_utils import is_token_expired, utcnow

logger = get_logger(__name__)


async def _replace_token(collection, owner: ObjectId, token: str) -> None:
    await collection.delete_many({"owner": owner})
    await collection.insert_one({
        "owner": owner,
        "token": hash_secret(token),
        "createdAt": utcnow(),
    })


async def _find_live_token(collection, owner: ObjectId) -> Optional[Dict[str, Any]]:
    document = await collection.find_one({"owner": owner})
    if document and is_token_expired(document.get("createdAt"), settings.VERIFICATION_TOKEN_TTL_SECONDS):
        await collection.delete_one({"_id": document["_id"]})
        return None
    return document


async def create_email_verification_token(owner: ObjectId) -> str:
    """
    Issues a new verification code, replacing any previous one.

    Returns:
        The plain code (only its hash is stored)
    """
    code = generate_otp()
    await _replace_token(get_email_verification_tokens_collection(), owner, code)
    logger.info("Email verification code issued", extra={"user_id": str(owner)})
    return code


async def consume_email_verification_token(owner: ObjectId, code: str) -> bool:
    """
    Checks a verification code and deletes it when it matches.
    """
    collection = get_email_verification_tokens_collection()
    document = await _find_live_token(collection, owner)
    if not document or not verify_secret(code, document.get("token")):
        return False

    await collection.delete_one({"_id": document["_id"]})
    return True


async def create_password_reset_token(owner: ObjectId) -> str:
    """
    Issues a new password reset token, replacing any previous one.
    """
    token = generate_reset_token()
    await _replace_token(get_password_reset_tokens_collection(), owner, token)
    logger.info("Password reset token issued", extra={"user_id": str(owner)})
    return token


async def is_valid_password_reset_token(owner: ObjectId, token: str) -> bool:
    document = await _find_live_token(get_password_reset_tokens_collection(), owner)
    if not document:
        return False
    return verify_secret(token, document.get("token"))


async def delete_password_reset_token(owner: ObjectId) -> None:
    await get_password_reset_tokens_collection().delete_many({"owner": owner})
