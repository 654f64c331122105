"""
carejourney/client/api_client.py

Purpose: HTTP client factory for the CareJourney API

- Builds an httpx.AsyncClient bound to the API base URL
- Adds the stored bearer token when present
- Turns HTTP / network failures into one user-facing message
"""

from typing import Dict, Optional

import httpx

from carejourney.client.config import client_settings
from carejourney.client.storage import Keys, TokenStore

DEFAULT_ERROR_MESSAGE = "Something went wrong!"


async def get_client(
    headers: Optional[Dict[str, str]] = None,
    store: Optional[TokenStore] = None,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """
    Create an API client.

    Without a stored token the client carries no extra headers at all,
    matching an anonymous session. Callers own the client and should
    use it as an async context manager.
    """
    store = store or TokenStore()
    token = store.get(Keys.AUTH_TOKEN)

    client_headers: Dict[str, str] = {}
    if token:
        client_headers = {"Authorization": f"Bearer {token}", **(headers or {})}

    return httpx.AsyncClient(
        base_url=base_url or client_settings.API_BASE_URL,
        headers=client_headers,
        timeout=client_settings.REQUEST_TIMEOUT,
        transport=transport,
    )


def catch_async_error(error: BaseException) -> str:
    """Extract the message shown to the user from a failed request."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"Request failed with status code {error.response.status_code}"

    if isinstance(error, httpx.TimeoutException):
        return "Request timed out, please try again"

    if isinstance(error, httpx.RequestError):
        return "Network error, please check your connection"

    return str(error) or DEFAULT_ERROR_MESSAGE
