from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field
from mentorship_engine.common.mentorship_enums import NotificationType


class NotificationDto(BaseModel):
    """
    A user-facing message queued for the delivery channel.

    Serialized with snake_case keys: it only travels between the API process
    and the notification worker through the Redis outbox.
    """

    model_config = ConfigDict(frozen=True)

    type: NotificationType
    recipient_id: int
    title: str
    message: str
    payload: dict = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
