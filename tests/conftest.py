import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("PASSWORD_BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("S3_BUCKET_NAME", "carejourney-test")

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from carejourney.api.deps import get_storage
from carejourney.db import mongo
from carejourney.main import app
from carejourney.services.storage_service import StorageService

from helpers import auth_headers, sign_in, sign_up


@pytest.fixture(autouse=True)
def database():
    """Fresh in-memory MongoDB for every test."""
    client = AsyncMongoMockClient()
    mongo._client = client
    mongo._database = client["carejourney_test"]
    yield mongo._database
    mongo._client = None
    mongo._database = None


@pytest.fixture
def storage():
    fake = MagicMock(spec=StorageService)

    async def upload_image(key, data, content_type, metadata=None):
        return {"url": f"https://cdn.test/{key}", "publicId": key}

    fake.upload_image = AsyncMock(side_effect=upload_image)
    fake.delete_object = AsyncMock(return_value=None)
    return fake


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    # No context manager: the lifespan (real MongoDB connection) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(client):
    """Registers and signs in one user; returns (profile, headers)."""
    sign_up(client)
    body = sign_in(client)
    return body["profile"], auth_headers(body["token"])


@pytest.fixture
def other_user(client):
    sign_up(client, name="Omar", email="omar@example.com")
    body = sign_in(client, email="omar@example.com")
    return body["profile"], auth_headers(body["token"])
