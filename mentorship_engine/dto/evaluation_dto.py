from datetime import datetime
from mentorship_engine.common.mentorship_enums import EvaluationType
from mentorship_engine.dto.base_dto import BaseDto


class EvaluationDto(BaseDto):
    evaluation_id: int
    mentorship_id: int
    program_id: int | None = None
    type: EvaluationType
    evaluator_id: int
    is_mentor: bool
    engagement_rating: int | None = None
    progress_rating: int | None = None
    satisfaction_rating: int | None = None
    skill_improvement: int | None = None
    feedback: str | None = None
    challenges: str | None = None
    recommendations: str | None = None
    submitted_at: datetime


class CertificateDto(BaseDto):
    certificate_id: int
    mentorship_id: int
    certificate_number: str
    issued_at: datetime
