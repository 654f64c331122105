import pytest

from carejourney.api.uploads import check_image_type
from carejourney.core.config import settings
from carejourney.core.exceptions import ValidationError
from carejourney.services.storage_service import build_object_key

from helpers import png_file


@pytest.mark.parametrize("content_type", ["image/jpeg", "image/pjpeg", "image/png", "image/webp", "IMAGE/PNG"])
def test_allowed_image_types(content_type):
    assert check_image_type(content_type) == content_type.lower()


@pytest.mark.parametrize("content_type", ["image/gif", "application/pdf", "", None])
def test_rejected_image_types(content_type):
    with pytest.raises(ValidationError) as exc_info:
        check_image_type(content_type)
    assert exc_info.value.message == "Invalid file type. Only JPG, PNG, and WEBP files are allowed."


def test_object_key_layout():
    key = build_object_key("64b7f0c2a1b2c3d4e5f60718", "post")
    owner, name = key.split("/")
    assert owner == "64b7f0c2a1b2c3d4e5f60718"
    kind, millis = name.split("-")
    assert kind == "post"
    assert millis.isdigit() and len(millis) >= 13


def test_invalid_upload_type_is_422(client, signed_in, storage):
    _, headers = signed_in
    response = client.post(
        "/auth/update-avatar",
        headers=headers,
        files={"avatar": png_file(name="cv.pdf", content=b"%PDF-1.4", content_type="application/pdf")}
    )
    assert response.status_code == 422
    assert response.json()["error"] == "Invalid file type. Only JPG, PNG, and WEBP files are allowed."
    storage.upload_image.assert_not_awaited()


def test_oversize_upload_is_413(client, signed_in, storage):
    _, headers = signed_in
    too_big = b"\x89PNG" + b"\x00" * settings.MAX_UPLOAD_SIZE
    response = client.post("/auth/update-avatar", headers=headers, files={"avatar": png_file(content=too_big)})
    assert response.status_code == 413
    storage.upload_image.assert_not_awaited()
