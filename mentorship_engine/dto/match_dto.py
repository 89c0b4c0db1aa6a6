from datetime import datetime
from mentorship_engine.common.mentorship_enums import MatchStatus
from mentorship_engine.dto.base_dto import BaseDto
from mentorship_engine.dto.profile_dto import MentorProfileDto


class MatchDto(BaseDto):
    match_id: int
    cycle_id: int
    mentor_id: int
    mentee_id: int
    match_score: float | None = None
    skill_match: float | None = None
    industry_relevance: float | None = None
    availability_match: float | None = None
    communication_match: float | None = None
    personality_fit: float | None = None
    status: MatchStatus
    mentor_approved: bool
    mentee_approved: bool
    is_manual: bool
    matched_at: datetime | None = None


class MatchResultDto(BaseDto):
    """A match produced by a matching run; `is_new` is False for a reused row."""

    match: MatchDto
    is_new: bool


class ApprovalResultDto(BaseDto):
    match_id: int
    success: bool
    status: MatchStatus | None = None
    mentorship_id: int | None = None
    error: str | None = None


class MentorSuggestionDto(BaseDto):
    """A ranked mentor for one mentee; nothing is persisted."""

    mentor: MentorProfileDto
    match_score: float
    skill_match: float
    industry_relevance: float
    availability_match: float
    communication_match: float
    personality_fit: float
