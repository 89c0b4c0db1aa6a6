from sqlalchemy import Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base


class ProgressEntity(Base):
    __tablename__ = "mentorship_progress"

    progress_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    mentorship_id: Mapped[int] = mapped_column(
        ForeignKey("mentorship.mentorship_id", ondelete="CASCADE"), index=True
    )
    program_id: Mapped[int] = mapped_column(
        ForeignKey("mentorship_program.program_id", ondelete="CASCADE")
    )
    week: Mapped[int] = mapped_column(Integer)
    tasks_completed: Mapped[int] = mapped_column(Integer, default=0)
    total_tasks: Mapped[int] = mapped_column(Integer, default=0)
    engagement_score: Mapped[float] = mapped_column(Float, default=0.0)
    skill_improvement: Mapped[float | None] = mapped_column(Float)

    __table_args__ = (UniqueConstraint("mentorship_id", "week"),)
