"""
Notification Service
Turns caught errors and outcomes into user-visible notices
"""
import logging
from collections import deque
from typing import Callable, Deque, Optional

from marketplace_chat.core.exceptions import ValidationError
from marketplace_chat.models.notification import Notification, NotificationVariant

logger = logging.getLogger(__name__)

ERROR_TITLE = "Erro"
MAX_NOTIFICATIONS = 50


class Notifier:
    """
    Collects notifications for the UI layer.

    The most recent MAX_NOTIFICATIONS are kept in `notifications` and, when
    a listener is given, each one is forwarded to it as well.
    """

    def __init__(
        self,
        listener: Optional[Callable[[Notification], None]] = None,
        max_notifications: int = MAX_NOTIFICATIONS
    ):
        self.listener = listener
        self.notifications: Deque[Notification] = deque(maxlen=max_notifications)

    def notify(
        self,
        title: str,
        description: str,
        variant: NotificationVariant = NotificationVariant.DEFAULT
    ) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.notifications.append(notification)
        if self.listener is not None:
            self.listener(notification)
        return notification

    def notify_error(self, description: str, error: Optional[Exception] = None) -> Notification:
        """Log the failure and record a destructive notice with a generic description"""
        if error is not None:
            logger.error(f"{description}: {error}")
        else:
            logger.error(description)
        return self.notify(ERROR_TITLE, description, NotificationVariant.DESTRUCTIVE)

    def notify_validation(self, error: ValidationError) -> Notification:
        logger.info(f"Rejected action: {error.message}")
        return self.notify("Atenção", error.message, NotificationVariant.DESTRUCTIVE)

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()
