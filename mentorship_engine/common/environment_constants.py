DATABASE_URL = "DATABASE_URL"
LOG_LEVEL = "LOG_LEVEL"
ENV = "ENV"

REDIS_HOST = "REDIS_HOST"
REDIS_PORT = "REDIS_PORT"
REDIS_PASSWORD = "REDIS_PASSWORD"
REDIS_SSL = "REDIS_SSL"

MATCHING_CHUNK_SIZE = "MATCHING_CHUNK_SIZE"
NOTIFICATION_PUBLISH_TIMEOUT_SECONDS = "NOTIFICATION_PUBLISH_TIMEOUT_SECONDS"
