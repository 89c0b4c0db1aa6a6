from datetime import datetime
from pydantic import Field
from mentorship_engine.common.mentorship_enums import MentorshipStatus, ScoreSource
from mentorship_engine.dto.base_dto import BaseDto, BaseRequestDto


class MentorshipDto(BaseDto):
    mentorship_id: int
    match_id: int
    cycle_id: int
    mentor_id: int
    mentee_id: int
    status: MentorshipStatus
    goals: str | None = None
    sessions_completed: int
    engagement_score: float | None = None
    satisfaction_score: float | None = None
    score_source: ScoreSource | None = None
    certificate_id: int | None = None
    cancel_reason: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None


class MentorshipCancelDto(BaseRequestDto):
    reason: str = Field(min_length=1, max_length=500)
