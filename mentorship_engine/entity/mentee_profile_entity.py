from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base, JsonType, enum_column_type
from mentorship_engine.common.mentorship_enums import ExperienceLevel


class MenteeProfileEntity(Base):
    __tablename__ = "mentee_profile"

    mentee_profile_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    field_of_interest: Mapped[str | None] = mapped_column(String(200))
    experience_level: Mapped[ExperienceLevel | None] = mapped_column(
        enum_column_type(ExperienceLevel, "experience_level_enum")
    )
    career_goals: Mapped[str | None] = mapped_column(Text)
    skills: Mapped[list[str]] = mapped_column(JsonType, default=list)
    interests: Mapped[list[str]] = mapped_column(JsonType, default=list)
    learning_preference: Mapped[list[str]] = mapped_column(JsonType, default=list)
    availability: Mapped[dict | None] = mapped_column(JsonType)
    commitment_agreed: Mapped[bool] = mapped_column(Boolean, default=False)
