from datetime import datetime
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base, enum_column_type
from mentorship_engine.common.mentorship_enums import ProgramStatus


class ProgramEntity(Base):
    __tablename__ = "mentorship_program"

    program_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    mentorship_id: Mapped[int] = mapped_column(
        ForeignKey("mentorship.mentorship_id", ondelete="CASCADE"), index=True
    )
    cycle_id: Mapped[int] = mapped_column(ForeignKey("mentorship_cycle.cycle_id"))
    week: Mapped[int] = mapped_column(Integer, default=1)
    status: Mapped[ProgramStatus] = mapped_column(
        enum_column_type(ProgramStatus, "program_status_enum"),
        default=ProgramStatus.ACTIVE,
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("mentorship_id", "cycle_id"),
        CheckConstraint("week >= 1", name="check_program_week"),
    )
