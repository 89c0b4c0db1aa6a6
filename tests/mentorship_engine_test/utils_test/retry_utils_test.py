import unittest
from unittest.mock import AsyncMock

from mentorship_engine.common.mentorship_errors import PreconditionFailedError
from mentorship_engine.utils.retry_utils import RetryUtils


class TestRetryUtils(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.retry_utils = RetryUtils(attempts=3, min_wait=0, max_wait=0)

    async def _run(self, operation):
        async for attempt in self.retry_utils.get_async_retry_on_transient:
            with attempt:
                return await operation()

    async def test_transient_error_is_retried(self):
        operation = AsyncMock(side_effect=[ConnectionError("down"), "delivered"])

        self.assertEqual(await self._run(operation), "delivered")
        self.assertEqual(operation.await_count, 2)

    async def test_last_error_is_reraised(self):
        operation = AsyncMock(side_effect=ConnectionError("down"))

        with self.assertRaises(ConnectionError):
            await self._run(operation)
        self.assertEqual(operation.await_count, 3)

    async def test_business_errors_are_not_retried(self):
        for error in (ValueError("bad payload"), PreconditionFailedError("closed")):
            with self.subTest(error=type(error).__name__):
                operation = AsyncMock(side_effect=error)

                with self.assertRaises(type(error)):
                    await self._run(operation)
                operation.assert_awaited_once()

    def test_each_call_returns_a_fresh_instance(self):
        self.assertIsNot(
            self.retry_utils.get_async_retry_on_transient,
            self.retry_utils.get_async_retry_on_transient,
        )


if __name__ == "__main__":
    unittest.main()
