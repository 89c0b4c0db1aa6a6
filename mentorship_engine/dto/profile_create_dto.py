from pydantic import Field
from mentorship_engine.common.mentorship_enums import (
    CommunicationMedium,
    ExperienceLevel,
    MentorshipTheme,
)
from mentorship_engine.dto.base_dto import BaseRequestDto
from mentorship_engine.dto.profile_dto import AvailabilityWindowDto


class MentorProfileCreateDto(BaseRequestDto):
    company: str | None = Field(default=None, max_length=200)
    industry: str | None = Field(default=None, max_length=200)
    years_of_experience: int | None = Field(default=None, ge=0)
    themes: list[MentorshipTheme] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    communication_mediums: list[CommunicationMedium] = Field(default_factory=list)
    availability: AvailabilityWindowDto | None = None
    weekly_availability: int | None = Field(default=None, ge=0)
    max_mentees: int = Field(default=3, ge=1)
    is_active: bool = True


class MenteeProfileCreateDto(BaseRequestDto):
    field_of_interest: str | None = Field(default=None, max_length=200)
    experience_level: ExperienceLevel | None = None
    career_goals: str | None = None
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    learning_preference: list[CommunicationMedium] = Field(default_factory=list)
    availability: AvailabilityWindowDto | None = None
    commitment_agreed: bool = False
