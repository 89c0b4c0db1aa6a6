import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock, call

from mentorship_engine.common.constants import (
    NOTIFICATION_DEAD_LETTER_KEY,
    NOTIFICATION_PROCESSING_KEY,
    NOTIFICATION_QUEUE_KEY,
)
from mentorship_engine.common.mentorship_enums import NotificationType
from mentorship_engine.dto.notification_dto import NotificationDto
from mentorship_engine.notification.notification_worker import NotificationWorker
from mentorship_engine.utils.retry_utils import RetryUtils


class TestNotificationWorker(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.mock_logger = MagicMock()
        self.mock_redis = MagicMock()
        self.mock_redis.blmove = AsyncMock()
        self.mock_redis.lmove = AsyncMock(return_value=None)
        self.mock_redis.lrem = AsyncMock()
        self.mock_redis.lpush = AsyncMock()
        self.mock_channel = MagicMock()
        self.mock_channel.deliver = AsyncMock()

        self.worker = NotificationWorker(
            self.mock_logger,
            self.mock_redis,
            self.mock_channel,
            RetryUtils(attempts=2, min_wait=0, max_wait=0),
            poll_timeout=0,
        )
        self.raw = NotificationDto(
            type=NotificationType.TASKS_ASSIGNED,
            recipient_id=10,
            title="Week 1 Tasks",
            message="3 new task(s) are waiting for you this week.",
        ).model_dump_json()

    async def test_delivered_item_is_acknowledged(self):
        """Test a delivered notification is removed from the processing list."""
        self.mock_redis.blmove.return_value = self.raw

        self.assertTrue(await self.worker.process_next())

        self.mock_channel.deliver.assert_awaited_once()
        delivered = self.mock_channel.deliver.await_args.args[0]
        self.assertEqual(delivered.recipient_id, 10)
        self.mock_redis.lrem.assert_awaited_once_with(
            NOTIFICATION_PROCESSING_KEY, 1, self.raw
        )
        self.mock_redis.lpush.assert_not_awaited()

    async def test_failed_delivery_is_retried_then_parked(self):
        """Test a failing delivery is retried and then moved to the dead letter list."""
        self.mock_redis.blmove.return_value = self.raw
        self.mock_channel.deliver.side_effect = RuntimeError("push gateway down")

        self.assertTrue(await self.worker.process_next())

        self.assertEqual(self.mock_channel.deliver.await_count, 2)
        self.mock_redis.lpush.assert_awaited_once_with(
            NOTIFICATION_DEAD_LETTER_KEY, self.raw
        )
        self.mock_redis.lrem.assert_awaited_once_with(
            NOTIFICATION_PROCESSING_KEY, 1, self.raw
        )

    async def test_value_error_is_not_retried(self):
        """Test a validation failure in the channel is parked without retrying."""
        self.mock_redis.blmove.return_value = self.raw
        self.mock_channel.deliver.side_effect = ValueError("unknown recipient")

        await self.worker.process_next()

        self.mock_channel.deliver.assert_awaited_once()
        self.mock_redis.lpush.assert_awaited_once()

    async def test_malformed_item_is_parked(self):
        """Test an unreadable payload goes straight to the dead letter list."""
        self.mock_redis.blmove.return_value = "not json"

        self.assertTrue(await self.worker.process_next())

        self.mock_channel.deliver.assert_not_awaited()
        self.mock_redis.lpush.assert_awaited_once_with(
            NOTIFICATION_DEAD_LETTER_KEY, "not json"
        )

    async def test_empty_queue(self):
        """Test an empty poll reports that nothing was processed."""
        self.mock_redis.blmove.return_value = None

        self.assertFalse(await self.worker.process_next())
        self.mock_channel.deliver.assert_not_awaited()

    async def test_requeue_in_flight(self):
        """Test items left in the processing list are moved back to the queue."""
        self.mock_redis.lmove.side_effect = ["a", "b", None]

        self.assertEqual(await self.worker.requeue_in_flight(), 2)
        self.mock_redis.lmove.assert_has_awaits(
            [call(NOTIFICATION_PROCESSING_KEY, NOTIFICATION_QUEUE_KEY, "LEFT", "RIGHT")]
            * 3
        )

    async def test_run_survives_redis_errors_until_stopped(self):
        """Test the loop logs queue errors and exits once the stop event is set."""
        stop_event = asyncio.Event()
        polls = []

        async def blmove(*args):
            polls.append(args)
            if len(polls) == 1:
                raise ConnectionError("redis restarting")
            stop_event.set()
            return None

        self.mock_redis.blmove.side_effect = blmove

        await asyncio.wait_for(self.worker.run(stop_event), timeout=1)

        self.assertEqual(len(polls), 2)
        self.mock_logger.error.assert_called_once()


if __name__ == "__main__":
    unittest.main()
