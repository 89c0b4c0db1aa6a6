from collections import Counter
from statistics import mean

from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_enums import MentorshipStatus
from mentorship_engine.dto.analytics_dto import (
    MentorshipAnalyticsDto,
    MentorshipProgressDto,
)
from mentorship_engine.dto.program_dto import ProgressDto


def _rounded_mean(values) -> float | None:
    values = [v for v in values if v is not None]
    return round(mean(values), 2) if values else None


class AnalyticsService:
    """Read-only aggregations over matches, mentorships, programs and progress."""

    def __init__(
        self,
        match_repository,
        mentorship_repository,
        program_repository,
        task_repository,
        progress_repository,
    ):
        self.match_repository = match_repository
        self.mentorship_repository = mentorship_repository
        self.program_repository = program_repository
        self.task_repository = task_repository
        self.progress_repository = progress_repository

    async def get_mentorship_progress(
        self, session: AsyncSession, cycle_id: int | None = None
    ) -> list[MentorshipProgressDto]:
        """
        Summarize the progress of every mentorship, optionally within one cycle.

        Returns:
            list[MentorshipProgressDto]: Current program week, task counts and the
                latest weekly snapshot of each mentorship, ordered by id.
        """
        mentorships = await self.mentorship_repository.get_mentorships(
            session=session, cycle_id=cycle_id
        )
        ids = [m.mentorship_id for m in mentorships]
        programs = await self.program_repository.get_programs_by_mentorship_ids(
            session=session, mentorship_ids=ids
        )
        # Programs come ordered by id, so the latest one per mentorship wins.
        current_week = {p.mentorship_id: p.week for p in programs}
        task_counts = await self.task_repository.count_tasks_by_mentorship(
            session=session, mentorship_ids=ids
        )
        latest = await self.progress_repository.get_latest_by_mentorship_ids(
            session=session, mentorship_ids=ids
        )

        summaries = []
        for mentorship in mentorships:
            completed, total = task_counts.get(mentorship.mentorship_id, (0, 0))
            snapshot = latest.get(mentorship.mentorship_id)
            summaries.append(
                MentorshipProgressDto(
                    mentorship_id=mentorship.mentorship_id,
                    cycle_id=mentorship.cycle_id,
                    mentor_id=mentorship.mentor_id,
                    mentee_id=mentorship.mentee_id,
                    status=mentorship.status,
                    current_week=current_week.get(mentorship.mentorship_id),
                    tasks_completed=completed,
                    total_tasks=total,
                    sessions_completed=mentorship.sessions_completed,
                    latest_progress=ProgressDto.model_validate(snapshot)
                    if snapshot
                    else None,
                )
            )
        return summaries

    async def get_mentorship_analytics(
        self, session: AsyncSession, cycle_id: int | None = None
    ) -> MentorshipAnalyticsDto:
        """
        Aggregate match and mentorship outcomes, optionally within one cycle.

        The completion rate is the share of mentorships that reached COMPLETED,
        in percent.
        """
        matches = await self.match_repository.get_matches(
            session=session, cycle_id=cycle_id
        )
        mentorships = await self.mentorship_repository.get_mentorships(
            session=session, cycle_id=cycle_id
        )
        mentorship_counts = Counter(m.status.value for m in mentorships)
        completed = mentorship_counts.get(MentorshipStatus.COMPLETED.value, 0)

        return MentorshipAnalyticsDto(
            cycle_id=cycle_id,
            total_matches=len(matches),
            matches_by_status=dict(Counter(m.status.value for m in matches)),
            total_mentorships=len(mentorships),
            mentorships_by_status=dict(mentorship_counts),
            average_match_score=_rounded_mean(m.match_score for m in matches),
            average_engagement_score=_rounded_mean(
                m.engagement_score for m in mentorships
            ),
            average_satisfaction_score=_rounded_mean(
                m.satisfaction_score for m in mentorships
            ),
            certificates_issued=sum(
                1 for m in mentorships if m.certificate_id is not None
            ),
            completion_rate=round(100 * completed / len(mentorships), 2)
            if mentorships
            else 0.0,
        )
