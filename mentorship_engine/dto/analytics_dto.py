from mentorship_engine.common.mentorship_enums import MentorshipStatus
from mentorship_engine.dto.base_dto import BaseDto
from mentorship_engine.dto.profile_dto import MenteeProfileDto, MentorProfileDto
from mentorship_engine.dto.program_dto import ProgressDto


class AvailabilityDto(BaseDto):
    mentors: list[MentorProfileDto]
    mentees: list[MenteeProfileDto]


class MentorshipProgressDto(BaseDto):
    mentorship_id: int
    cycle_id: int
    mentor_id: int
    mentee_id: int
    status: MentorshipStatus
    current_week: int | None = None
    tasks_completed: int = 0
    total_tasks: int = 0
    sessions_completed: int = 0
    latest_progress: ProgressDto | None = None


class MentorshipAnalyticsDto(BaseDto):
    cycle_id: int | None = None
    total_matches: int
    matches_by_status: dict[str, int]
    total_mentorships: int
    mentorships_by_status: dict[str, int]
    average_match_score: float | None = None
    average_engagement_score: float | None = None
    average_satisfaction_score: float | None = None
    certificates_issued: int
    completion_rate: float
