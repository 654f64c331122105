"""
carejourney/api/deps.py

Purpose: Request dependencies

- must_auth: verifies the bearer token and loads the user
- is_valid_pass_reset_token: guards password reset endpoints
- Shared storage service injection
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends, Request

from carejourney.core.exceptions import AuthorizationError
from carejourney.core.logging import get_logger
from carejourney.core.security import decode_access_token
from carejourney.schemas.auth import TokenAndIdRequest
from carejourney.services import token_service, user_service
from carejourney.services.storage_service import StorageService, get_storage_service
from carejourney.utils.constants import INVALID_RESET_REQUEST, UNAUTHORIZED_REQUEST
from carejourney.utils.validation_utils import parse_object_id

logger = get_logger(__name__)


@dataclass
class AuthContext:
    """The signed-in user document and the bearer token used for the request."""

    user: Dict[str, Any]
    token: str

    @property
    def user_id(self):
        return self.user["_id"]


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Returns the token following "Bearer ", or None.
    """
    if not authorization:
        return None
    parts = authorization.split("Bearer ", 1)
    if len(parts) != 2:
        return None
    token = parts[1].strip()
    return token or None


async def must_auth(request: Request) -> AuthContext:
    """
    Authenticates the request.

    The token must verify against the signing secret and must still be
    listed among the user's signed-in tokens (log-out removes it).

    Raises:
        AuthorizationError: 403 "Unauthorized request"
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if not token:
        logger.info("Missing bearer token", extra={"path": request.url.path})
        raise AuthorizationError(UNAUTHORIZED_REQUEST)

    user_id = decode_access_token(token)
    if not user_id:
        raise AuthorizationError(UNAUTHORIZED_REQUEST)

    user = await user_service.get_user_by_token(user_id, token)
    if not user:
        logger.info("Revoked or unknown bearer token", extra={"path": request.url.path})
        raise AuthorizationError(UNAUTHORIZED_REQUEST)

    request.state.user = user
    return AuthContext(user=user, token=token)


async def ensure_pass_reset_token(user_id: str, token: str):
    """
    Raises AuthorizationError unless the reset token belongs to user_id.

    Returns:
        The owner's ObjectId
    """
    owner = parse_object_id(user_id, "userId")
    if not await token_service.is_valid_password_reset_token(owner, token):
        raise AuthorizationError(INVALID_RESET_REQUEST)
    return owner


async def is_valid_pass_reset_token(body: TokenAndIdRequest) -> TokenAndIdRequest:
    """
    Dependency form of ensure_pass_reset_token for endpoints whose body
    is exactly {token, userId}.
    """
    await ensure_pass_reset_token(body.userId, body.token)
    return body


def get_storage() -> StorageService:
    return get_storage_service()


CurrentAuth = Depends(must_auth)
Storage = Depends(get_storage)
