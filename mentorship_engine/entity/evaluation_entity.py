from datetime import datetime, timezone
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base, enum_column_type
from mentorship_engine.common.mentorship_enums import EvaluationType


class EvaluationEntity(Base):
    __tablename__ = "mentorship_evaluation"

    evaluation_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    mentorship_id: Mapped[int] = mapped_column(
        ForeignKey("mentorship.mentorship_id", ondelete="CASCADE"), index=True
    )
    program_id: Mapped[int | None] = mapped_column(
        ForeignKey("mentorship_program.program_id", ondelete="CASCADE")
    )
    type: Mapped[EvaluationType] = mapped_column(
        enum_column_type(EvaluationType, "evaluation_type_enum")
    )
    evaluator_id: Mapped[int] = mapped_column(Integer)
    is_mentor: Mapped[bool] = mapped_column(Boolean)
    engagement_rating: Mapped[int | None] = mapped_column(Integer)
    progress_rating: Mapped[int | None] = mapped_column(Integer)
    satisfaction_rating: Mapped[int | None] = mapped_column(Integer)
    skill_improvement: Mapped[int | None] = mapped_column(Integer)
    feedback: Mapped[str | None] = mapped_column(Text)
    challenges: Mapped[str | None] = mapped_column(Text)
    recommendations: Mapped[str | None] = mapped_column(Text)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (UniqueConstraint("mentorship_id", "type", "evaluator_id"),)
