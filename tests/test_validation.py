from datetime import datetime, timedelta

import pytest
from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError

from carejourney.core.exceptions import ValidationError
from carejourney.schemas.auth import CreateUserRequest
from carejourney.services.schedule_service import apply_frequency_rules
from carejourney.utils.bson_utils import to_json_compatible
from carejourney.utils.time_utils import is_token_expired
from carejourney.utils.validation_utils import (
    is_valid_password,
    parse_object_id,
    parse_string_list,
    require_min_length,
)


@pytest.mark.parametrize("password, valid", [
    ("Passw0rd!", True),
    ("abc123!@", True),
    ("password", False),
    ("12345678!", False),
    ("Passw0rd", False),
    ("Pass w0rd!", False),
])
def test_password_rules(password, valid):
    assert is_valid_password(password) is valid


@pytest.mark.parametrize("email, message", [
    (None, "Email is missing!"),
    ("  ", "Email is missing!"),
    ("jane@example", "Invalid email!"),
    ("jane@b..com", "Invalid email!"),
    ("jane.example.com", "Invalid email!"),
])
def test_sign_up_email_messages(email, message):
    with pytest.raises(PydanticValidationError) as exc_info:
        CreateUserRequest(name="Jane", email=email, password="Passw0rd!")
    assert message in str(exc_info.value)


def test_sign_up_email_is_trimmed_and_lowercased():
    request = CreateUserRequest(name="Jane", email="  Jane@Example.com ", password="Passw0rd!")
    assert request.email == "jane@example.com"


def test_parse_object_id():
    oid = ObjectId()
    assert parse_object_id(str(oid)) == oid
    with pytest.raises(ValidationError) as exc_info:
        parse_object_id("nope", "postId")
    assert exc_info.value.message == "Invalid postId!"


def test_require_min_length_trims():
    assert require_min_length("  hello world  ", 5, "too short") == "hello world"
    with pytest.raises(ValidationError):
        require_min_length("   hi   ", 5, "too short")


@pytest.mark.parametrize("value, expected", [
    (None, []),
    ("", []),
    ('["Monday", "Friday"]', ["Monday", "Friday"]),
    ("Monday, Friday", ["Monday", "Friday"]),
    (["Sunday"], ["Sunday"]),
])
def test_parse_string_list(value, expected):
    assert parse_string_list(value) == expected


def test_parse_string_list_rejects_broken_json():
    with pytest.raises(ValidationError):
        parse_string_list('["Monday"')


def test_token_expiry():
    assert is_token_expired(None)
    assert not is_token_expired(datetime.utcnow(), ttl_seconds=3600)
    assert is_token_expired(datetime.utcnow() - timedelta(hours=2), ttl_seconds=3600)


def test_to_json_compatible():
    oid = ObjectId()
    when = datetime(2024, 5, 2, 10, 30)
    assert to_json_compatible({"_id": oid, "items": [{"at": when}], "n": 1}) == {
        "_id": str(oid),
        "items": [{"at": "2024-05-02T10:30:00"}],
        "n": 1,
    }


def test_frequency_rules():
    assert apply_frequency_rules({"frequency": "As needed", "timesPerDay": "Once a day", "specificDays": ["Monday"]}) == {
        "frequency": "As needed", "timesPerDay": None, "specificDays": [],
    }
    assert apply_frequency_rules({"frequency": "Every day", "specificDays": ["Monday"]}) == {
        "frequency": "Every day", "timesPerDay": "Once a day", "specificDays": [],
    }
    assert apply_frequency_rules({})["frequency"] == "As needed"
    with pytest.raises(ValidationError):
        apply_frequency_rules({"frequency": "Specific days", "specificDays": []})
