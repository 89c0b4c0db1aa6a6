from pydantic import Field
from mentorship_engine.common.mentorship_enums import ExperienceLevel
from mentorship_engine.dto.base_dto import BaseDto, BaseRequestDto


class AvailabilityWindowDto(BaseRequestDto):
    days: list[str] = Field(default_factory=list)
    time_blocks: list[str] = Field(default_factory=list)


class MentorProfileDto(BaseDto):
    user_id: int
    company: str | None = None
    industry: str | None = None
    years_of_experience: int | None = None
    themes: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    communication_mediums: list[str] = Field(default_factory=list)
    availability: dict | None = None
    weekly_availability: int | None = None
    max_mentees: int
    current_mentees: int
    total_mentees: int
    is_verified: bool
    is_active: bool


class MenteeProfileDto(BaseDto):
    user_id: int
    field_of_interest: str | None = None
    experience_level: ExperienceLevel | None = None
    career_goals: str | None = None
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    learning_preference: list[str] = Field(default_factory=list)
    availability: dict | None = None
    commitment_agreed: bool
