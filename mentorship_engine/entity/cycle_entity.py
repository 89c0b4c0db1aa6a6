from datetime import date, datetime, timezone
from sqlalchemy import CheckConstraint, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base, enum_column_type
from mentorship_engine.common.mentorship_enums import CycleStatus


class CycleEntity(Base):
    __tablename__ = "mentorship_cycle"

    cycle_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)
    status: Mapped[CycleStatus] = mapped_column(
        enum_column_type(CycleStatus, "cycle_status_enum"),
        default=CycleStatus.UPCOMING,
    )
    max_mentorships: Mapped[int] = mapped_column(Integer)
    # Live (pending or approved) matches holding a place under max_mentorships.
    reserved_mentorships: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )
    launched_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="check_cycle_window"),
        CheckConstraint("max_mentorships >= 1", name="check_cycle_capacity"),
        CheckConstraint(
            "reserved_mentorships >= 0 AND reserved_mentorships <= max_mentorships",
            name="check_cycle_reserved",
        ),
    )
