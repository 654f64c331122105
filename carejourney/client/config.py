"""
carejourney/client/config.py

Purpose: Client-side configuration

- Base URL of the CareJourney API
- Location of the persisted key/value store (auth token lives there)
- Request timeout
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Client settings, read from CAREJOURNEY_* environment variables."""

    API_BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Base URL of the CareJourney API"
    )
    TOKEN_FILE: Path = Field(
        default=Path.home() / ".carejourney" / "storage.json",
        description="JSON file used as persistent key/value storage"
    )
    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        description="HTTP timeout in seconds"
    )

    class Config:
        env_prefix = "CAREJOURNEY_"
        env_file = ".env"
        extra = "ignore"


client_settings = ClientSettings()
