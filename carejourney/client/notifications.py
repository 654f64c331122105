"""
carejourney/client/notifications.py

Purpose: User-facing notifications (toast equivalent)

Notifications are logged and kept in a list so a UI (or a test)
can read them back.
"""

from dataclasses import dataclass, field
from typing import List, Literal

from carejourney.core.logging import get_logger

logger = get_logger(__name__)

NotificationType = Literal["Success", "Error"]


@dataclass
class Notification:
    message: str
    type: NotificationType = "Success"


@dataclass
class Notifier:
    history: List[Notification] = field(default_factory=list)

    def notify(self, message: str, type: NotificationType = "Success") -> Notification:
        notification = Notification(message=message, type=type)
        self.history.append(notification)
        if type == "Error":
            logger.warning(f"Notification: {message}")
        else:
            logger.info(f"Notification: {message}")
        return notification

    def error(self, message: str) -> Notification:
        return self.notify(message, "Error")

    @property
    def last(self):
        return self.history[-1] if self.history else None
