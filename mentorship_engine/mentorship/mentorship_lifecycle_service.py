from datetime import datetime, timezone
from statistics import mean

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_enums import (
    EvaluationType,
    MentorshipStatus,
    NotificationType,
    ScoreSource,
)
from mentorship_engine.common.mentorship_errors import (
    ConflictError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.common.state_transitions import (
    MENTORSHIP_TRANSITIONS,
    ensure_transition,
    source_statuses,
)
from mentorship_engine.dto.mentorship_dto import MentorshipDto
from mentorship_engine.dto.notification_dto import NotificationDto
from mentorship_engine.entity.mentorship_entity import MentorshipEntity
from mentorship_engine.notification import notification_messages


def _mean_rating(evaluations, attribute: str) -> float | None:
    ratings = [
        getattr(evaluation, attribute)
        for evaluation in evaluations
        if getattr(evaluation, attribute) is not None
    ]
    return round(mean(ratings), 2) if ratings else None


def _completion_scores(final, mid_program) -> tuple[dict, ScoreSource | None]:
    """
    Derive the completion scores, one rating attribute at a time.

    An attribute no FINAL evaluation rated takes the MID_PROGRAM mean instead.
    The source is MID_PROGRAM as soon as one score came from the fallback.
    """
    scores, sources = {}, set()
    for rating, score in (
        ("engagement_rating", "engagement_score"),
        ("satisfaction_rating", "satisfaction_score"),
    ):
        scores[score] = None
        for source, evaluations in (
            (ScoreSource.FINAL, final),
            (ScoreSource.MID_PROGRAM, mid_program),
        ):
            value = _mean_rating(evaluations, rating)
            if value is not None:
                scores[score] = value
                sources.add(source)
                break

    if ScoreSource.MID_PROGRAM in sources:
        return scores, ScoreSource.MID_PROGRAM
    return scores, ScoreSource.FINAL if sources else None


class MentorshipLifecycleService:
    """
    State machine of a mentorship: pending -> active -> completed | cancelled.

    Every status write is a conditional update restricted to the legal source
    states, so a request that lost a race gets a ConflictError instead of
    overwriting the winner. The mentor's capacity slot, reserved when the match
    was created, is released when the mentorship completes or is cancelled.
    """

    def __init__(
        self,
        logger,
        mentorship_repository,
        mentee_profile_repository,
        mentor_profile_repository,
        evaluation_repository,
        program_service,
        notification_publisher,
    ):
        """
        Initializes the MentorshipLifecycleService with required dependencies.

        Args:
            logger: The logger instance for logging messages.
            mentorship_repository (MentorshipRepository): Mentorship persistence.
            mentee_profile_repository (MenteeProfileRepository): Source of default goals.
            mentor_profile_repository (MentorProfileRepository): Capacity counters.
            evaluation_repository (EvaluationRepository): Ratings used at completion.
            program_service (ProgramService): Opens and closes programs.
            notification_publisher (NotificationPublisher): Outbox for user messages.
        """
        self.logger = logger
        self.mentorship_repository = mentorship_repository
        self.mentee_profile_repository = mentee_profile_repository
        self.mentor_profile_repository = mentor_profile_repository
        self.evaluation_repository = evaluation_repository
        self.program_service = program_service
        self.notification_publisher = notification_publisher

    async def _get_mentorship(
        self, session: AsyncSession, mentorship_id: int, refresh: bool = False
    ) -> MentorshipEntity:
        mentorship = await self.mentorship_repository.get_mentorship_by_id(
            session=session, mentorship_id=mentorship_id, refresh=refresh
        )
        if not mentorship:
            raise NotFoundError("Mentorship", mentorship_id)
        return mentorship

    async def _activate(
        self, session: AsyncSession, mentorship: MentorshipEntity, now: datetime
    ) -> list[NotificationDto]:
        """Move a pending mentorship to active and make sure it has a program."""
        if not await self.mentorship_repository.update_status(
            session=session,
            mentorship_id=mentorship.mentorship_id,
            sources=source_statuses(MENTORSHIP_TRANSITIONS, MentorshipStatus.ACTIVE),
            target=MentorshipStatus.ACTIVE,
            started_at=now,
        ):
            raise ConflictError(
                f"Mentorship {mentorship.mentorship_id} changed status concurrently."
            )

        notifications = notification_messages.mentorship_status_changed(
            mentorship, NotificationType.MENTORSHIP_STARTED
        )
        if not await self.program_service.has_program(session, mentorship.mentorship_id):
            _, tasks = await self.program_service.build_program(session, mentorship, now)
            notifications += notification_messages.tasks_assigned(
                mentorship, week=1, task_count=len(tasks)
            )
        return notifications

    async def _release_mentor_slot(self, session: AsyncSession, mentorship) -> None:
        if not await self.mentor_profile_repository.release_slot(
            session=session, user_id=mentorship.mentor_id
        ):
            self.logger.warning(
                "[MentorshipLifecycleService] mentor %s held no slot to release for mentorship %s.",
                mentorship.mentor_id,
                mentorship.mentorship_id,
            )

    async def instantiate_from_match(
        self,
        session: AsyncSession,
        match,
        activate: bool = False,
        goals: str | None = None,
    ) -> tuple[MentorshipEntity, list[NotificationDto]]:
        """
        Stage the mentorship of an approved match. Does not commit.

        The unique `match_id` column guarantees at most one mentorship per match;
        a second attempt fails with ConflictError.

        Args:
            session (AsyncSession): Active database async session.
            match (MatchEntity): The approved match.
            activate (bool): Start the mentorship and open its program right away.
            goals (str | None): Goals of the mentorship; defaults to the mentee's
                career goals.

        Returns:
            tuple[MentorshipEntity, list[NotificationDto]]: The mentorship and the
                notifications to publish after commit.
        """
        if goals is None:
            mentee = await self.mentee_profile_repository.get_by_user_id(
                session=session, user_id=match.mentee_id
            )
            goals = mentee.career_goals if mentee else None

        try:
            mentorship = await self.mentorship_repository.insert_mentorship(
                session=session,
                entity=MentorshipEntity(
                    match_id=match.match_id,
                    mentor_id=match.mentor_id,
                    mentee_id=match.mentee_id,
                    cycle_id=match.cycle_id,
                    status=MentorshipStatus.PENDING,
                    goals=goals,
                    sessions_completed=0,
                ),
            )
        except IntegrityError as e:
            raise ConflictError(
                f"Match {match.match_id} already has a mentorship."
            ) from e

        notifications = notification_messages.mentorship_status_changed(
            mentorship, NotificationType.MATCH_APPROVED
        )
        if activate:
            notifications += await self._activate(
                session, mentorship, datetime.now(timezone.utc)
            )
            mentorship = await self._get_mentorship(
                session, mentorship.mentorship_id, refresh=True
            )

        self.logger.info(
            "[MentorshipLifecycleService] mentorship %s created from match %s (%s).",
            mentorship.mentorship_id,
            match.match_id,
            mentorship.status.value,
        )
        return mentorship, notifications

    async def get_mentorship(
        self, session: AsyncSession, mentorship_id: int
    ) -> MentorshipDto:
        mentorship = await self._get_mentorship(session, mentorship_id)
        return MentorshipDto.model_validate(mentorship)

    async def list_mentorships(
        self,
        session: AsyncSession,
        cycle_id: int | None = None,
        status: MentorshipStatus | None = None,
        mentor_id: int | None = None,
        mentee_id: int | None = None,
        participant_id: int | None = None,
    ) -> list[MentorshipDto]:
        """List mentorships matching every given filter, oldest first."""
        mentorships = await self.mentorship_repository.get_mentorships(
            session=session,
            cycle_id=cycle_id,
            statuses=[status] if status else None,
            mentor_id=mentor_id,
            mentee_id=mentee_id,
            participant_id=participant_id,
        )
        return [MentorshipDto.model_validate(m) for m in mentorships]

    async def start(self, session: AsyncSession, mentorship_id: int) -> MentorshipDto:
        """
        Start a pending mentorship and open its week-1 program if it has none.

        Raises:
            NotFoundError: Unknown mentorship.
            PreconditionFailedError: The mentorship is not pending.
            ConflictError: A concurrent request changed its status first.
        """
        mentorship = await self._get_mentorship(session, mentorship_id)
        ensure_transition(
            MENTORSHIP_TRANSITIONS,
            mentorship.status,
            MentorshipStatus.ACTIVE,
            "Mentorship",
        )

        notifications = await self._activate(
            session, mentorship, datetime.now(timezone.utc)
        )
        await session.commit()

        await self.notification_publisher.publish(notifications)
        mentorship = await self._get_mentorship(session, mentorship_id, refresh=True)
        return MentorshipDto.model_validate(mentorship)

    async def record_session(
        self, session: AsyncSession, mentorship_id: int
    ) -> MentorshipDto:
        """
        Count one more completed session on an active mentorship.

        Raises:
            NotFoundError: Unknown mentorship.
            PreconditionFailedError: The mentorship is not active.
        """
        mentorship = await self._get_mentorship(session, mentorship_id)
        if mentorship.status != MentorshipStatus.ACTIVE:
            raise PreconditionFailedError(
                f"Mentorship {mentorship_id} is {mentorship.status.value}; "
                "sessions can only be recorded while it is active."
            )
        if not await self.mentorship_repository.increment_sessions(
            session=session, mentorship_id=mentorship_id
        ):
            raise ConflictError(
                f"Mentorship {mentorship_id} changed status concurrently."
            )
        await session.commit()

        mentorship = await self._get_mentorship(session, mentorship_id, refresh=True)
        return MentorshipDto.model_validate(mentorship)

    async def complete(self, session: AsyncSession, mentorship_id: int) -> MentorshipDto:
        """
        Complete an active mentorship.

        Engagement and satisfaction scores are the means of the FINAL evaluation
        ratings. A score no FINAL evaluation rated falls back to the MID_PROGRAM
        ratings and `score_source` records the fallback; without either, the
        score stays empty. Open programs are closed and the mentor's slot is
        released.

        Raises:
            NotFoundError: Unknown mentorship.
            PreconditionFailedError: The mentorship is not active.
            ConflictError: A concurrent request changed its status first.
        """
        mentorship = await self._get_mentorship(session, mentorship_id)
        ensure_transition(
            MENTORSHIP_TRANSITIONS,
            mentorship.status,
            MentorshipStatus.COMPLETED,
            "Mentorship",
        )

        final = await self.evaluation_repository.get_evaluations(
            session=session,
            mentorship_id=mentorship_id,
            evaluation_type=EvaluationType.FINAL,
        )
        mid_program = await self.evaluation_repository.get_evaluations(
            session=session,
            mentorship_id=mentorship_id,
            evaluation_type=EvaluationType.MID_PROGRAM,
        )
        scores, score_source = _completion_scores(final, mid_program)
        if score_source != ScoreSource.FINAL:
            self.logger.warning(
                "[MentorshipLifecycleService] mentorship %s lacks final ratings; "
                "scores taken from %d mid-program evaluation(s): %s.",
                mentorship_id,
                len(mid_program),
                scores,
            )

        now = datetime.now(timezone.utc)
        if not await self.mentorship_repository.update_status(
            session=session,
            mentorship_id=mentorship_id,
            sources=source_statuses(MENTORSHIP_TRANSITIONS, MentorshipStatus.COMPLETED),
            target=MentorshipStatus.COMPLETED,
            score_source=score_source,
            **scores,
            completed_at=now,
        ):
            raise ConflictError(
                f"Mentorship {mentorship_id} changed status concurrently."
            )

        await self.program_service.close_programs(session, mentorship_id, now)
        await self._release_mentor_slot(session, mentorship)
        await session.commit()

        self.logger.info(
            "[MentorshipLifecycleService] mentorship %s completed.", mentorship_id
        )
        await self.notification_publisher.publish(
            notification_messages.mentorship_status_changed(
                mentorship, NotificationType.MENTORSHIP_COMPLETED
            )
        )
        mentorship = await self._get_mentorship(session, mentorship_id, refresh=True)
        return MentorshipDto.model_validate(mentorship)

    async def cancel(
        self, session: AsyncSession, mentorship_id: int, reason: str
    ) -> MentorshipDto:
        """
        Cancel a pending or active mentorship.

        Raises:
            NotFoundError: Unknown mentorship.
            PreconditionFailedError: The mentorship is already completed or cancelled.
            ConflictError: A concurrent request changed its status first.
        """
        mentorship = await self._get_mentorship(session, mentorship_id)
        ensure_transition(
            MENTORSHIP_TRANSITIONS,
            mentorship.status,
            MentorshipStatus.CANCELLED,
            "Mentorship",
        )

        now = datetime.now(timezone.utc)
        if not await self.mentorship_repository.update_status(
            session=session,
            mentorship_id=mentorship_id,
            sources=source_statuses(MENTORSHIP_TRANSITIONS, MentorshipStatus.CANCELLED),
            target=MentorshipStatus.CANCELLED,
            cancel_reason=reason,
            cancelled_at=now,
        ):
            raise ConflictError(
                f"Mentorship {mentorship_id} changed status concurrently."
            )

        await self.program_service.close_programs(session, mentorship_id, now)
        await self._release_mentor_slot(session, mentorship)
        await session.commit()

        self.logger.info(
            "[MentorshipLifecycleService] mentorship %s cancelled: %s",
            mentorship_id,
            reason,
        )
        await self.notification_publisher.publish(
            notification_messages.mentorship_status_changed(
                mentorship, NotificationType.MENTORSHIP_CANCELLED
            )
        )
        mentorship = await self._get_mentorship(session, mentorship_id, refresh=True)
        return MentorshipDto.model_validate(mentorship)
