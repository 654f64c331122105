"""
carejourney/schemas/report.py

Purpose: Post and reply report payloads
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional

from carejourney.utils.constants import REPORT_DESCRIPTION_MIN_LENGTH
from carejourney.utils.validation_utils import is_valid_object_id


class PostReportRequest(BaseModel):
    """Request schema for reporting a post."""

    description: Optional[str] = Field(default=None, validate_default=True)
    postId: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Please enter the report description!")
        if len(v) < REPORT_DESCRIPTION_MIN_LENGTH:
            raise ValueError(
                f"Report description must be at least {REPORT_DESCRIPTION_MIN_LENGTH} characters!"
            )
        return v

    @field_validator("postId")
    @classmethod
    def validate_post_id(cls, v: Optional[str]) -> str:
        if not v or not is_valid_object_id(v):
            raise ValueError("Invalid postId!")
        return v


class ReplyReportRequest(PostReportRequest):
    """Request schema for reporting a reply under a post."""

    replyId: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("replyId")
    @classmethod
    def validate_reply_id(cls, v: Optional[str]) -> str:
        if not v or not is_valid_object_id(v):
            raise ValueError("Invalid replyId!")
        return v
