"""
carejourney/schemas/auth.py

Pydantic models for account, session and profile requests.
Error messages are written for display on the mobile client.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from carejourney.utils.constants import (
    NAME_MIN_LENGTH,
    NAME_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    USER_TYPES,
    GENDERS,
)
from carejourney.utils.validation_utils import (
    is_valid_object_id,
    is_valid_password,
)


_email_adapter = TypeAdapter(EmailStr)


def _check_email(v: Optional[str], missing_message: str = "Email is missing!") -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError(missing_message)
    try:
        v = _email_adapter.validate_python(v)
    except PydanticValidationError:
        raise ValueError("Invalid email!")
    return v.lower()


def _check_password(v: Optional[str]) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("Password is missing!")
    if len(v) < PASSWORD_MIN_LENGTH:
        raise ValueError("Password is too short!")
    if not is_valid_password(v):
        raise ValueError(
            "Password must contain at least one letter, one number, "
            "and one special character (!@#$%^&*)."
        )
    return v


def _check_name(v: Optional[str]) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("Name is missing!")
    if len(v) < NAME_MIN_LENGTH:
        raise ValueError("Name is too short!")
    if len(v) > NAME_MAX_LENGTH:
        raise ValueError("Name is too long!")
    return v


class CreateUserRequest(BaseModel):
    """Request schema for sign-up."""

    name: Optional[str] = Field(default=None, validate_default=True)
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> str:
        return _check_password(v)


class UserIdRequest(BaseModel):
    """Request schema carrying only a user id."""

    userId: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("userId")
    @classmethod
    def validate_user_id(cls, v: Optional[str]) -> str:
        if not v or not is_valid_object_id(v):
            raise ValueError("Invalid userId!")
        return v


class TokenAndIdRequest(UserIdRequest):
    """Request schema for one-time token checks (email verification, password reset)."""

    token: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: Optional[str]) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Invalid token!")
        return v


class UpdatePasswordRequest(TokenAndIdRequest):
    """Request schema for setting a new password with a reset token."""

    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> str:
        return _check_password(v)


class EmailRequest(BaseModel):
    email: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> str:
        return _check_email(v, missing_message="Invalid email!")


class SignInRequest(BaseModel):
    """Request schema for sign-in."""

    email: str = Field(..., description="Registered email")
    password: str = Field(..., description="Plain text password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class CountryInfo(BaseModel):
    cca2: str = ""
    name: str = ""
    flag: str = ""


class UpdateProfileRequest(BaseModel):
    """
    Request schema for profile registration/update.
    Only the fields that are sent are changed.
    """

    name: Optional[str] = None
    gender: Optional[str] = None
    birthDate: Optional[datetime] = None
    userType: Optional[str] = None
    cancerType: Optional[str] = None
    diagnosisDate: Optional[datetime] = None
    stage: Optional[str] = None
    country: Optional[CountryInfo] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_name(v)

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in GENDERS:
            raise ValueError("Invalid gender!")
        return v

    @field_validator("userType")
    @classmethod
    def validate_user_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in USER_TYPES:
            raise ValueError("Invalid user type!")
        return v

    @field_validator("cancerType")
    @classmethod
    def validate_cancer_type(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Cancer type is missing!")
        return v


class PushTokenRequest(BaseModel):
    expoPushToken: str = Field(..., min_length=1, description="Expo push token of the device")
