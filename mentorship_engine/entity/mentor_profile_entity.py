from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base, JsonType


class MentorProfileEntity(Base):
    __tablename__ = "mentor_profile"

    mentor_profile_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, unique=True, index=True)
    company: Mapped[str | None] = mapped_column(String(200))
    industry: Mapped[str | None] = mapped_column(String(200))
    years_of_experience: Mapped[int | None] = mapped_column(Integer)
    # Lists of MentorshipTheme / CommunicationMedium values and free-text tags.
    themes: Mapped[list[str]] = mapped_column(JsonType, default=list)
    skills: Mapped[list[str]] = mapped_column(JsonType, default=list)
    interests: Mapped[list[str]] = mapped_column(JsonType, default=list)
    communication_mediums: Mapped[list[str]] = mapped_column(JsonType, default=list)
    # {"days": [...], "timeBlocks": [...]}
    availability: Mapped[dict | None] = mapped_column(JsonType)
    weekly_availability: Mapped[int | None] = mapped_column(Integer)
    max_mentees: Mapped[int] = mapped_column(Integer, default=3)
    current_mentees: Mapped[int] = mapped_column(Integer, default=0)
    total_mentees: Mapped[int] = mapped_column(Integer, default=0)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    __table_args__ = (
        CheckConstraint(
            "current_mentees >= 0 AND current_mentees <= max_mentees",
            name="check_mentor_capacity",
        ),
    )
