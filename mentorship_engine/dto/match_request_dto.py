from pydantic import Field
from mentorship_engine.common.constants import DEFAULT_MIN_MATCH_SCORE, MAX_MATCH_SCORE
from mentorship_engine.dto.base_dto import BaseRequestDto


class MatchingRequestDto(BaseRequestDto):
    min_score: float = Field(default=DEFAULT_MIN_MATCH_SCORE, ge=0, le=MAX_MATCH_SCORE)
    auto_approve: bool = False


class ApproveMatchesRequestDto(BaseRequestDto):
    match_ids: list[int] = Field(min_length=1)


class AssignmentCreateDto(BaseRequestDto):
    cycle_id: int
    mentor_id: int
    mentee_id: int
    goals: str | None = None
