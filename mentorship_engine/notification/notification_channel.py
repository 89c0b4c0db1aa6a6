from abc import ABC, abstractmethod

from mentorship_engine.dto.notification_dto import NotificationDto


class NotificationChannel(ABC):
    """Delivery channel (push, in-app, email) behind the notification worker."""

    @abstractmethod
    async def deliver(self, notification: NotificationDto) -> None:
        """
        Deliver one notification to its recipient.

        Raises:
            Exception: Any failure; the worker retries transient ones.
        """


class LoggingNotificationChannel(NotificationChannel):
    """Channel that writes each notification to the log instead of a user device."""

    def __init__(self, logger):
        self.logger = logger

    async def deliver(self, notification: NotificationDto) -> None:
        self.logger.info(
            "[LoggingNotificationChannel] %s -> user %s: %s",
            notification.type.value,
            notification.recipient_id,
            notification.title,
        )
