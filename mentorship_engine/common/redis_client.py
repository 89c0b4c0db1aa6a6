import os
from dataclasses import dataclass

from redis.asyncio import Redis

from mentorship_engine.common.environment_constants import (
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_SSL,
)

_TRUTHY = ("true", "1", "yes")


class RedisClientError(Exception):
    """The outbox client could not be constructed from its settings."""


@dataclass(frozen=True)
class RedisSettings:
    host: str
    port: int
    password: str | None = None
    ssl: bool = True

    @classmethod
    def from_env(cls) -> "RedisSettings":
        """
        Read the connection settings of the notification outbox.

        REDIS_SSL defaults to on; REDIS_PASSWORD is optional.

        Raises:
            ValueError: REDIS_HOST or REDIS_PORT is unset, or the port is not a number.
        """
        for name in (REDIS_HOST, REDIS_PORT):
            if not os.environ.get(name):
                raise ValueError(f"Please set environment variable: {name}.")
        try:
            port = int(os.environ[REDIS_PORT])
        except ValueError:
            raise ValueError(f"{REDIS_PORT} must be an integer.")

        return cls(
            host=os.environ[REDIS_HOST],
            port=port,
            password=os.environ.get(REDIS_PASSWORD),
            ssl=os.environ.get(REDIS_SSL, "true").lower() in _TRUTHY,
        )


class RedisClient:
    """
    Holds the asyncio Redis client backing the notification outbox.

    redis-py connects on the first command, so building the client never
    blocks start-up; the publisher and the worker deal with an unreachable
    server themselves.
    """

    def __init__(self, logger, settings: RedisSettings | None = None):
        """
        Args:
            logger: Logger instance.
            settings (RedisSettings | None): Read from the environment when omitted.

        Raises:
            ValueError: The environment lacks the host or the port.
            RedisClientError: redis-py rejected the settings.
        """
        self.logger = logger
        try:
            self.settings = settings or RedisSettings.from_env()
        except ValueError as e:
            logger.error("[RedisClient] invalid outbox configuration: %s", e)
            raise

        try:
            self._redis_client = Redis(
                host=self.settings.host,
                port=self.settings.port,
                password=self.settings.password,
                ssl=self.settings.ssl,
                decode_responses=True,
            )
        except Exception as e:
            logger.error("[RedisClient] cannot build the outbox client: %s", e)
            raise RedisClientError("Failed to create Redis client.") from e

        logger.info(
            "[RedisClient] outbox at %s:%s (ssl=%s).",
            self.settings.host,
            self.settings.port,
            self.settings.ssl,
        )

    def get_redis_client(self) -> Redis:
        return self._redis_client
