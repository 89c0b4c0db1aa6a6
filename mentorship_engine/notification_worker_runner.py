"""
Entry point of the notification worker process.

Drains the Redis notification outbox into the delivery channel until SIGINT or
SIGTERM is received.

Example usage:
    python -m mentorship_engine.notification_worker_runner
"""

import asyncio
import signal

from mentorship_engine.common.logger import get_logger
from mentorship_engine.common.redis_client import RedisClient
from mentorship_engine.notification.notification_channel import (
    LoggingNotificationChannel,
)
from mentorship_engine.notification.notification_worker import NotificationWorker
from mentorship_engine.utils.retry_utils import RetryUtils


async def main() -> None:
    logger = get_logger()
    redis_client = RedisClient(logger=logger).get_redis_client()
    worker = NotificationWorker(
        logger=logger,
        redis_client=redis_client,
        notification_channel=LoggingNotificationChannel(logger=logger),
        retry_utils=RetryUtils(),
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await worker.run(stop_event)
    finally:
        await redis_client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
