"""
carejourney/utils/validation_utils.py

Purpose: Input validation

- Password strength rules
- ObjectId parsing
- Text length checks
- Multipart list decoding
"""

import json
import re
from typing import List, Optional, Any

from bson import ObjectId
from bson.errors import InvalidId

from carejourney.core.exceptions import ValidationError


# At least one letter, one digit and one special; only these character classes allowed
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-zA-Z])(?=.*\d)(?=.*[!@#$%^&*])[a-zA-Z\d!@#$%^&*]+$")


def is_valid_password(password: str) -> bool:
    """
    Checks the password character rules (length is checked separately).
    """
    if not password:
        return False
    return bool(PASSWORD_PATTERN.match(password))


def is_valid_object_id(value: Any) -> bool:
    """
    True for 24-hex strings and ObjectId instances.
    """
    if isinstance(value, ObjectId):
        return True
    if not isinstance(value, str):
        return False
    return ObjectId.is_valid(value) and len(value) == 24


def parse_object_id(value: Any, field: str = "id") -> ObjectId:
    """
    Converts a request value to an ObjectId.

    Raises:
        ValidationError: If the value is not a valid ObjectId
    """
    if not is_valid_object_id(value):
        raise ValidationError(f"Invalid {field}!")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid {field}!")


def require_min_length(value: Optional[str], minimum: int, message: str) -> str:
    """
    Trims and checks the minimum length of a text field.

    Returns:
        The trimmed value
    """
    text = (value or "").strip()
    if len(text) < minimum:
        raise ValidationError(message)
    return text


def parse_string_list(value: Any) -> List[str]:
    """
    Decodes a list sent through a multipart form.

    Mobile clients append arrays to FormData as JSON strings, e.g.
    specificDays='["Monday","Friday"]'; a plain comma separated string
    and an already decoded list are accepted too.
    """
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return [str(item) for item in value]
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                raise ValidationError("Invalid list format!")
            if not isinstance(decoded, list):
                raise ValidationError("Invalid list format!")
            return [str(item) for item in decoded]
        return [part.strip() for part in text.split(",") if part.strip()]
    raise ValidationError("Invalid list format!")
