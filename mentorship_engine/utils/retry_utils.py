from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from mentorship_engine.common.mentorship_errors import MentorshipEngineError


def _is_transient(error: BaseException) -> bool:
    """Validation and business-rule failures are never worth retrying."""
    return not isinstance(error, (ValueError, MentorshipEngineError))


class RetryUtils:
    """
    A utility class that provides pre-configured Tenacity retry instances.
    """

    def __init__(self, attempts: int = 3, min_wait: float = 1, max_wait: float = 3):
        self._attempts = attempts
        self._min_wait = min_wait
        self._max_wait = max_wait

    @property
    def get_async_retry_on_transient(self) -> AsyncRetrying:
        """
        Returns a Tenacity AsyncRetrying instance configured for transient errors.

        Retries up to `attempts` times with exponential backoff, excluding
        `ValueError` and engine errors, and re-raises the last error.
        A fresh instance is returned per call so concurrent deliveries do not
        share retry statistics.
        """
        return AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=1, min=self._min_wait, max=self._max_wait),
            reraise=True,
        )
