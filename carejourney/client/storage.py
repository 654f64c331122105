"""
carejourney/client/storage.py

Purpose: Persistent key/value storage for the client

Backed by a single JSON file. Values are strings, as on the device.
"""

import json
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from carejourney.client.config import client_settings
from carejourney.core.logging import get_logger

logger = get_logger(__name__)


class Keys(str, Enum):
    AUTH_TOKEN = "AUTH_TOKEN"
    VIEWED_ON_BOARDING = "@viewedOnBoarding"
    UPLOAD_FOLDERS_LAYOUT = "UPLOAD_FOLDERS_LAYOUT"
    LAST_HANDLED_NOTIFICATION_ID = "NotificationId"
    USER_LANGUAGE = "USER_LANGUAGE"
    IS_RTL = "IS_RTL"


class TokenStore:
    """
    JSON-file key/value store.
    The file is read on every access so several clients can share it.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else client_settings.TOKEN_FILE

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning(f"Corrupt storage file {self.path}, starting empty")
            return {}

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Readers see the old file or the new one, never a partial write
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(data, tmp)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._load().get(_key(key))

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[_key(key)] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(_key(key), None) is not None:
            self._dump(data)

    def clear(self) -> None:
        self._dump({})


def _key(key) -> str:
    return key.value if isinstance(key, Keys) else str(key)
