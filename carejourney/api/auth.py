"""
carejourney/api/auth.py

Purpose: Account and session endpoints

- Sign-up with email verification code
- Password reset via one-time token
- Sign-in / sign-out with bearer tokens
- Profile, avatar and push token updates
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from carejourney.api.deps import (
    AuthContext,
    CurrentAuth,
    Storage,
    ensure_pass_reset_token,
    is_valid_pass_reset_token,
)
from carejourney.api.uploads import store_image
from carejourney.core.config import settings
from carejourney.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from carejourney.core.logging import get_logger
from carejourney.schemas.auth import (
    CreateUserRequest,
    EmailRequest,
    PushTokenRequest,
    SignInRequest,
    TokenAndIdRequest,
    UpdatePasswordRequest,
    UpdateProfileRequest,
    UserIdRequest,
)
from carejourney.services import token_service, user_service
from carejourney.services.storage_service import StorageService, discard_object
from carejourney.utils.bson_utils import to_json_compatible
from carejourney.utils.constants import UPLOAD_KIND_PROFILE
from carejourney.utils.validation_utils import parse_object_id

logger = get_logger(__name__)
router = APIRouter()


@router.post("/create", status_code=201)
async def create(body: CreateUserRequest):
    """
    Registers a new account and issues an email verification code.
    """
    user = await user_service.create_user(body.name, body.email, body.password)
    code = await token_service.create_email_verification_token(user["_id"])

    # No mail transport is configured; the code is only visible in development logs
    if settings.is_development:
        logger.info(f"Verification code for {user['email']}: {code}")

    return {"user": {"id": str(user["_id"]), "name": user["name"], "email": user["email"]}}


@router.post("/verify-email")
async def verify_email(body: TokenAndIdRequest):
    user_id = parse_object_id(body.userId, "userId")
    await user_service.require_user(user_id)

    if not await token_service.consume_email_verification_token(user_id, body.token):
        raise AuthorizationError("Invalid token!")

    await user_service.mark_verified(user_id)
    return {"message": "Your email is verified."}


@router.post("/re-verify-email")
async def re_verify_email(body: UserIdRequest):
    user_id = parse_object_id(body.userId, "userId")
    user = await user_service.require_user(user_id)

    if user.get("verified"):
        raise ValidationError("Your account is already verified!")

    code = await token_service.create_email_verification_token(user_id)
    if settings.is_development:
        logger.info(f"Verification code for {user['email']}: {code}")

    return {"message": "Please check your mail inbox."}


@router.post("/forget-password")
async def forget_password(body: EmailRequest):
    user = await user_service.get_user_by_email(body.email)
    if not user:
        raise ResourceNotFoundError("Account not found!")

    token = await token_service.create_password_reset_token(user["_id"])
    reset_link = f"{settings.PASSWORD_RESET_LINK}?token={token}&userId={user['_id']}"
    if settings.is_development:
        logger.info(f"Password reset link for {user['email']}: {reset_link}")

    return {"message": "Check your registered mail."}


@router.post("/verify-pass-reset-token")
async def verify_pass_reset_token(body: TokenAndIdRequest = Depends(is_valid_pass_reset_token)):
    return {"valid": True}


@router.post("/update-password")
async def update_password(body: UpdatePasswordRequest):
    owner = await ensure_pass_reset_token(body.userId, body.token)
    user = await user_service.require_user(owner)

    await user_service.change_password(user, body.password)
    await token_service.delete_password_reset_token(owner)

    return {"message": "Password resets successfully."}


@router.post("/sign-in")
async def sign_in(body: SignInRequest):
    user, token = await user_service.sign_in(body.email, body.password)
    return to_json_compatible({"profile": user_service.format_profile(user), "token": token})


@router.get("/is-auth")
async def is_auth(auth: AuthContext = CurrentAuth):
    return to_json_compatible({"profile": user_service.format_profile(auth.user)})


@router.post("/log-out")
async def log_out(
    fromAll: Optional[str] = Query(default=None),
    auth: AuthContext = CurrentAuth
):
    await user_service.log_out(auth.user_id, auth.token, from_all=fromAll == "yes")
    return {"success": True}


@router.post("/update-profile")
async def update_profile(body: UpdateProfileRequest, auth: AuthContext = CurrentAuth):
    fields = body.model_dump(exclude_unset=True)
    user = await user_service.update_profile(auth.user_id, fields)
    return to_json_compatible({"profile": user_service.format_profile(user)})


@router.post("/update-avatar")
async def update_avatar(
    avatar: UploadFile = File(...),
    auth: AuthContext = CurrentAuth,
    storage: StorageService = Storage
):
    stored = await store_image(avatar, auth.user_id, UPLOAD_KIND_PROFILE, storage)
    if not stored:
        raise ValidationError("Avatar is missing!")

    user = await user_service.update_avatar(auth.user_id, stored)
    previous_key = (auth.user.get("avatar") or {}).get("publicId")
    if previous_key != stored["publicId"]:
        await discard_object(storage, previous_key)
    return to_json_compatible({"profile": user_service.format_profile(user)})


@router.post("/update-push-token")
async def update_push_token(body: PushTokenRequest, auth: AuthContext = CurrentAuth):
    await user_service.update_push_token(auth.user_id, body.expoPushToken)
    return {"success": True}
