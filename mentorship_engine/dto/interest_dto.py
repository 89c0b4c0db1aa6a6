from datetime import datetime
from pydantic import Field
from mentorship_engine.common.mentorship_enums import InterestStatus, ParticipantRole
from mentorship_engine.dto.base_dto import BaseDto, BaseRequestDto


class InterestDto(BaseDto):
    interest_id: int
    cycle_id: int
    user_id: int
    role: ParticipantRole
    status: InterestStatus
    message: str | None = None
    updated_at: datetime | None = None


class InterestCreateDto(BaseRequestDto):
    role: ParticipantRole
    message: str | None = Field(default=None, max_length=500)
