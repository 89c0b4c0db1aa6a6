import asyncio

from mentorship_engine.common.constants import (
    DEFAULT_NOTIFICATION_PUBLISH_TIMEOUT_SECONDS,
    NOTIFICATION_QUEUE_KEY,
)
from mentorship_engine.dto.notification_dto import NotificationDto


class NotificationPublisher:
    """
    Pushes notifications onto the Redis outbox consumed by the notification worker.

    Publishing is best-effort: it runs after the triggering transaction has
    committed, is bounded by a timeout, and never raises. A lost notification is
    logged; the state change that produced it stands.
    """

    def __init__(
        self,
        logger,
        redis_client,
        timeout_seconds: float = DEFAULT_NOTIFICATION_PUBLISH_TIMEOUT_SECONDS,
    ):
        """
        Args:
            logger: The logger instance for logging messages.
            redis_client: asyncio Redis client used as the outbox.
            timeout_seconds (float): Upper bound for one publish call.
        """
        self.logger = logger
        self.redis_client = redis_client
        self.timeout_seconds = timeout_seconds

    async def publish(self, notifications: list[NotificationDto]) -> int:
        """
        Queue notifications for delivery.

        Args:
            notifications (list[NotificationDto]): Messages to queue, possibly empty.

        Returns:
            int: Number of notifications queued; 0 when publishing failed.
        """
        if not notifications:
            return 0

        payloads = [notification.model_dump_json() for notification in notifications]
        try:
            await asyncio.wait_for(
                self.redis_client.lpush(NOTIFICATION_QUEUE_KEY, *payloads),
                timeout=self.timeout_seconds,
            )
        except Exception as e:
            self.logger.error(
                "[NotificationPublisher] failed to queue %d notification(s) of types %s: %s",
                len(notifications),
                sorted({n.type.value for n in notifications}),
                e,
            )
            return 0

        self.logger.debug(
            "[NotificationPublisher] queued %d notification(s).", len(notifications)
        )
        return len(notifications)
