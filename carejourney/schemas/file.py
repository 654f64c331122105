"""
carejourney/schemas/file.py

Pydantic models for journal file edits.
"""

from pydantic import BaseModel, field_validator
from typing import Optional


class FileUpdateRequest(BaseModel):
    """Request schema for renaming/describing a journal file."""

    title: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title is required!")
        return v
