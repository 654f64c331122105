"""
carejourney/core/security.py

Purpose: Credential primitives

- Password and one-time token hashing (passlib + bcrypt)
- Bearer token creation and verification (python-jose)
- Random verification codes and reset tokens
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from carejourney.core.config import settings
from carejourney.core.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_BCRYPT_ROUNDS
)


def hash_secret(secret: str) -> str:
    """
    Hash a password or one-time token using bcrypt.

    Args:
        secret: Plain text value

    Returns:
        Hashed value
    """
    return pwd_context.hash(secret)


def verify_secret(plain: str, hashed: Optional[str]) -> bool:
    """
    Verify a plain value against its bcrypt hash.

    Malformed hashes count as a mismatch.
    """
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError) as e:
        logger.warning(f"Secret verification failed: {e}")
        return False


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed bearer token carrying the user id.

    Tokens have no expiry unless JWT_EXPIRE_DAYS (or expires_delta) is set;
    revocation happens by removing the token from the user's token list.
    """
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "userId": str(user_id),
        "iat": now,
        # Two sign-ins within the same second must still produce distinct tokens
        "jti": secrets.token_hex(8),
    }

    if expires_delta is None and settings.JWT_EXPIRE_DAYS:
        expires_delta = timedelta(days=settings.JWT_EXPIRE_DAYS)
    if expires_delta is not None:
        claims["exp"] = now + expires_delta

    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """
    Verify a bearer token and return the user id it carries.

    Returns:
        The userId claim, or None if the token is invalid or expired
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None

    user_id = payload.get("userId")
    if not user_id:
        return None
    return str(user_id)


def generate_otp(length: int = 6) -> str:
    """Numeric code sent to confirm an email address."""
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def generate_reset_token() -> str:
    """Random hex token embedded in a password reset link."""
    return secrets.token_hex(36)
