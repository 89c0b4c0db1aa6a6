from datetime import datetime, timezone
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column
from mentorship_engine.common.base import Base, enum_column_type
from mentorship_engine.common.mentorship_enums import MatchStatus

_LIVE_MATCH = text("status <> 'rejected'")


class MatchEntity(Base):
    __tablename__ = "mentorship_match"

    match_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cycle_id: Mapped[int] = mapped_column(
        ForeignKey("mentorship_cycle.cycle_id"), index=True
    )
    mentor_id: Mapped[int] = mapped_column(Integer, index=True)
    mentee_id: Mapped[int] = mapped_column(Integer, index=True)

    # Sub-scores are NULL for manual assignments, which bypass scoring.
    match_score: Mapped[float | None] = mapped_column(Float)
    skill_match: Mapped[float | None] = mapped_column(Float)
    industry_relevance: Mapped[float | None] = mapped_column(Float)
    availability_match: Mapped[float | None] = mapped_column(Float)
    communication_match: Mapped[float | None] = mapped_column(Float)
    personality_fit: Mapped[float | None] = mapped_column(Float)

    status: Mapped[MatchStatus] = mapped_column(
        enum_column_type(MatchStatus, "match_status_enum"),
        default=MatchStatus.PENDING,
    )
    mentor_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    mentee_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    is_manual: Mapped[bool] = mapped_column(Boolean, default=False)
    matched_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        CheckConstraint("mentor_id <> mentee_id", name="check_match_different_ids"),
        UniqueConstraint("mentor_id", "mentee_id", "cycle_id"),
        Index(
            "uq_match_live_mentee_per_cycle",
            "cycle_id",
            "mentee_id",
            unique=True,
            postgresql_where=_LIVE_MATCH,
            sqlite_where=_LIVE_MATCH,
        ),
    )
