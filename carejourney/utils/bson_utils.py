"""
carejourney/utils/bson_utils.py

Purpose: Document to JSON conversion

- ObjectId values become 24-hex strings
- datetimes become ISO 8601 strings
"""

from datetime import datetime
from typing import Any

from bson import ObjectId


def to_json_compatible(value: Any) -> Any:
    """
    Recursively converts a MongoDB document (or part of one) into
    plain JSON-compatible Python values.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json_compatible(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_compatible(item) for item in value]
    return value
