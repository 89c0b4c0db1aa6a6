import asyncio

from pydantic import ValidationError

from mentorship_engine.common.constants import (
    NOTIFICATION_DEAD_LETTER_KEY,
    NOTIFICATION_POLL_TIMEOUT_SECONDS,
    NOTIFICATION_PROCESSING_KEY,
    NOTIFICATION_QUEUE_KEY,
)
from mentorship_engine.dto.notification_dto import NotificationDto


class NotificationWorker:
    """
    Drains the Redis notification outbox into the delivery channel.

    Each item is moved atomically from the queue to a processing list before
    delivery and removed only after the channel accepted it, so a crash between
    the two leaves the item in the processing list; `requeue_in_flight` puts such
    items back on start-up. Delivery is therefore at-least-once. Items that keep
    failing after the retry budget are parked in a dead-letter list.
    """

    def __init__(
        self,
        logger,
        redis_client,
        notification_channel,
        retry_utils,
        poll_timeout: float = NOTIFICATION_POLL_TIMEOUT_SECONDS,
    ):
        """
        Args:
            logger: The logger instance for logging messages.
            redis_client: asyncio Redis client holding the outbox lists.
            notification_channel (NotificationChannel): Delivery channel.
            retry_utils (RetryUtils): Provides the retry policy for deliveries.
            poll_timeout (float): Seconds one blocking pop waits for new items.
        """
        self.logger = logger
        self.redis_client = redis_client
        self.notification_channel = notification_channel
        self.retry_utils = retry_utils
        self.poll_timeout = poll_timeout

    async def requeue_in_flight(self) -> int:
        """
        Move items left in the processing list back onto the queue, oldest first.

        Returns:
            int: Number of items requeued.
        """
        requeued = 0
        while await self.redis_client.lmove(
            NOTIFICATION_PROCESSING_KEY, NOTIFICATION_QUEUE_KEY, "LEFT", "RIGHT"
        ):
            requeued += 1

        if requeued:
            self.logger.warning(
                "[NotificationWorker] requeued %d in-flight notification(s).", requeued
            )
        return requeued

    async def _deliver(self, notification: NotificationDto) -> None:
        async for attempt in self.retry_utils.get_async_retry_on_transient:
            with attempt:
                await self.notification_channel.deliver(notification)

    async def process_next(self) -> bool:
        """
        Take one item off the queue and deliver it.

        Returns:
            bool: False when the queue stayed empty for the poll timeout.
        """
        raw = await self.redis_client.blmove(
            NOTIFICATION_QUEUE_KEY,
            NOTIFICATION_PROCESSING_KEY,
            self.poll_timeout,
            "RIGHT",
            "LEFT",
        )
        if raw is None:
            return False

        try:
            notification = NotificationDto.model_validate_json(raw)
            await self._deliver(notification)
        except ValidationError as e:
            self.logger.error(
                "[NotificationWorker] dropping malformed notification to dead letter: %s",
                e,
            )
            await self._park(raw)
            return True
        except Exception as e:
            self.logger.error(
                "[NotificationWorker] delivery of %s to user %s failed after retries: %s",
                notification.type.value,
                notification.recipient_id,
                e,
            )
            await self._park(raw)
            return True

        await self.redis_client.lrem(NOTIFICATION_PROCESSING_KEY, 1, raw)
        return True

    async def _park(self, raw: str) -> None:
        await self.redis_client.lpush(NOTIFICATION_DEAD_LETTER_KEY, raw)
        await self.redis_client.lrem(NOTIFICATION_PROCESSING_KEY, 1, raw)

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """
        Process notifications until `stop_event` is set.

        Redis errors are logged and the loop continues after a short pause.
        """
        stop_event = stop_event or asyncio.Event()
        await self.requeue_in_flight()
        self.logger.info("[NotificationWorker] started.")

        while not stop_event.is_set():
            try:
                await self.process_next()
            except Exception as e:
                self.logger.error("[NotificationWorker] queue access failed: %s", e)
                await asyncio.sleep(self.poll_timeout)

        self.logger.info("[NotificationWorker] stopped.")
