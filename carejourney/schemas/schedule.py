"""
carejourney/schemas/schedule.py

Pydantic models for appointment and medication requests.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from carejourney.utils.constants import (
    DEFAULT_REMINDER,
    FREQUENCY_OPTIONS,
    LOCATION_MIN_LENGTH,
    REMINDER_OPTIONS,
    TIMES_PER_DAY_OPTIONS,
    WEEKDAYS,
)


def _check_reminder(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in REMINDER_OPTIONS:
        raise ValueError("Invalid reminder!")
    return v


def _check_location(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if len(v) < LOCATION_MIN_LENGTH:
        raise ValueError(f"Location has to be at least {LOCATION_MIN_LENGTH} characters")
    return v


def _check_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Title is required!")
    return v


class AppointmentRequest(BaseModel):
    """Request schema for a new appointment."""

    title: str = Field(..., description="Appointment title")
    location: str = Field(..., description="Where the appointment takes place")
    date: datetime = Field(..., description="Date and time of the appointment")
    notes: str = Field(default="", description="Free text notes")
    reminder: str = Field(default=DEFAULT_REMINDER, description="Reminder option")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        return _check_location(v)

    @field_validator("reminder")
    @classmethod
    def validate_reminder(cls, v):
        return _check_reminder(v)


class AppointmentUpdateRequest(BaseModel):
    """Partial update of an appointment; absent fields stay unchanged."""

    title: Optional[str] = None
    location: Optional[str] = None
    date: Optional[datetime] = None
    notes: Optional[str] = None
    reminder: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        return _check_location(v)

    @field_validator("reminder")
    @classmethod
    def validate_reminder(cls, v):
        return _check_reminder(v)


class MedicationUpdateRequest(BaseModel):
    """
    Partial update of a medication; absent fields stay unchanged.
    Frequency rules are checked against the merged record.
    """

    name: Optional[str] = None
    frequency: Optional[str] = None
    timesPerDay: Optional[str] = None
    specificDays: Optional[List[str]] = None
    prescriber: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name is required!")
        return v

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in FREQUENCY_OPTIONS:
            raise ValueError("Invalid frequency!")
        return v

    @field_validator("timesPerDay")
    @classmethod
    def validate_times_per_day(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v != "" and v not in TIMES_PER_DAY_OPTIONS:
            raise ValueError("Invalid times per day!")
        return v or None

    @field_validator("specificDays")
    @classmethod
    def validate_specific_days(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        unknown = [day for day in v if day not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Invalid days: {', '.join(unknown)}")
        # Keep week order, drop duplicates
        return [day for day in WEEKDAYS if day in v]
