from datetime import datetime, timezone
from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base, enum_column_type
from mentorship_engine.common.mentorship_enums import MentorshipStatus, ScoreSource


class MentorshipEntity(Base):
    __tablename__ = "mentorship"

    mentorship_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("mentorship_match.match_id"), unique=True
    )
    cycle_id: Mapped[int] = mapped_column(
        ForeignKey("mentorship_cycle.cycle_id"), index=True
    )
    mentor_id: Mapped[int] = mapped_column(Integer, index=True)
    mentee_id: Mapped[int] = mapped_column(Integer, index=True)
    status: Mapped[MentorshipStatus] = mapped_column(
        enum_column_type(MentorshipStatus, "mentorship_status_enum"),
        default=MentorshipStatus.PENDING,
    )
    goals: Mapped[str | None] = mapped_column(Text)
    sessions_completed: Mapped[int] = mapped_column(Integer, default=0)
    engagement_score: Mapped[float | None] = mapped_column(Float)
    satisfaction_score: Mapped[float | None] = mapped_column(Float)
    score_source: Mapped[ScoreSource | None] = mapped_column(
        enum_column_type(ScoreSource, "score_source_enum")
    )
    certificate_id: Mapped[int | None] = mapped_column(Integer, unique=True)
    cancel_reason: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
