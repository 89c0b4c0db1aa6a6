from datetime import datetime, timezone
from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base, enum_column_type
from mentorship_engine.common.mentorship_enums import InterestStatus, ParticipantRole


class InterestEntity(Base):
    __tablename__ = "mentorship_cycle_interest"

    interest_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cycle_id: Mapped[int] = mapped_column(
        ForeignKey("mentorship_cycle.cycle_id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[int] = mapped_column(Integer)
    role: Mapped[ParticipantRole] = mapped_column(
        enum_column_type(ParticipantRole, "participant_role_enum")
    )
    status: Mapped[InterestStatus] = mapped_column(
        enum_column_type(InterestStatus, "interest_status_enum"),
        default=InterestStatus.INTERESTED,
    )
    message: Mapped[str | None] = mapped_column(String(500))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (UniqueConstraint("cycle_id", "user_id"),)
