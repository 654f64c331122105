"""
carejourney/schemas/post.py

Pydantic models for forum post and reply requests.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class ReplyRequest(BaseModel):
    """Request schema for replying to a post."""

    description: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Reply is missing!")
        return v

