from typing import Annotated
from pydantic import Field
from mentorship_engine.common.mentorship_enums import EvaluationType
from mentorship_engine.dto.base_dto import BaseRequestDto

Rating = Annotated[int, Field(ge=1, le=5)]


class EvaluationCreateDto(BaseRequestDto):
    type: EvaluationType
    engagement_rating: Rating | None = None
    progress_rating: Rating | None = None
    satisfaction_rating: Rating | None = None
    skill_improvement: Rating | None = None
    feedback: str | None = None
    challenges: str | None = None
    recommendations: str | None = None
