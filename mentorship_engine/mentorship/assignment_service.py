from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_enums import CycleStatus, MatchStatus
from mentorship_engine.common.mentorship_errors import (
    CapacityExceededError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.dto.analytics_dto import AvailabilityDto
from mentorship_engine.dto.mentorship_dto import MentorshipDto
from mentorship_engine.dto.profile_dto import MenteeProfileDto, MentorProfileDto
from mentorship_engine.entity.match_entity import MatchEntity


class AssignmentService:
    """Manual pairing of a mentor and a mentee, bypassing scoring."""

    def __init__(
        self,
        logger,
        cycle_repository,
        interest_repository,
        mentor_profile_repository,
        mentee_profile_repository,
        match_repository,
        mentorship_lifecycle_service,
        notification_publisher,
    ):
        self.logger = logger
        self.cycle_repository = cycle_repository
        self.interest_repository = interest_repository
        self.mentor_profile_repository = mentor_profile_repository
        self.mentee_profile_repository = mentee_profile_repository
        self.match_repository = match_repository
        self.mentorship_lifecycle_service = mentorship_lifecycle_service
        self.notification_publisher = notification_publisher

    async def _get_open_cycle(self, session: AsyncSession, cycle_id: int):
        cycle = await self.cycle_repository.get_cycle_by_id(
            session=session, cycle_id=cycle_id
        )
        if not cycle:
            raise NotFoundError("Cycle", cycle_id)
        if cycle.status == CycleStatus.COMPLETED:
            raise PreconditionFailedError(f"Cycle {cycle_id} is completed.")
        return cycle

    async def get_available_mentors_and_mentees(
        self, session: AsyncSession, cycle_id: int | None = None
    ) -> AvailabilityDto:
        """
        List the mentors with free capacity and the committed mentees.

        With a cycle, users who withdrew from it and mentees already holding a
        live match in it are left out.
        """
        withdrawn, matched = set(), set()
        if cycle_id is not None:
            await self._get_open_cycle(session, cycle_id)
            withdrawn = await self.interest_repository.get_withdrawn_user_ids(
                session=session, cycle_id=cycle_id
            )
            matched = await self.match_repository.get_live_mentee_ids(
                session=session, cycle_id=cycle_id
            )

        mentors = await self.mentor_profile_repository.get_available_mentors(
            session=session, excluded_user_ids=withdrawn
        )
        mentees = await self.mentee_profile_repository.get_committed_mentees(
            session=session, excluded_user_ids=withdrawn | matched
        )
        return AvailabilityDto(
            mentors=[MentorProfileDto.model_validate(m) for m in mentors],
            mentees=[MenteeProfileDto.model_validate(m) for m in mentees],
        )

    async def assign(
        self,
        session: AsyncSession,
        cycle_id: int,
        mentor_id: int,
        mentee_id: int,
        goals: str | None = None,
    ) -> MentorshipDto:
        """
        Pair a mentor and a mentee directly: an approved manual match, an active
        mentorship and its week-1 program are created in one unit of work.

        Args:
            session (AsyncSession): Active database async session.
            cycle_id (int): Target cycle.
            mentor_id (int): Mentor user id.
            mentee_id (int): Mentee user id.
            goals (str | None): Mentorship goals; defaults to the mentee's career goals.

        Returns:
            MentorshipDto: The new mentorship.

        Raises:
            ValueError: Mentor and mentee are the same user.
            NotFoundError: Unknown cycle or profile.
            PreconditionFailedError: Cycle completed, mentor inactive or mentee
                uncommitted.
            DuplicateError: The pair already has a match, or the mentee already
                holds a live match in the cycle.
            CapacityExceededError: The mentor or the cycle is full.
            ConflictError: A concurrent request created a conflicting match.
        """
        if mentor_id == mentee_id:
            raise ValueError("A user cannot mentor themselves.")

        cycle = await self._get_open_cycle(session, cycle_id)
        mentor = await self.mentor_profile_repository.get_by_user_id(
            session=session, user_id=mentor_id
        )
        if not mentor:
            raise NotFoundError("Mentor profile", mentor_id)
        mentee = await self.mentee_profile_repository.get_by_user_id(
            session=session, user_id=mentee_id
        )
        if not mentee:
            raise NotFoundError("Mentee profile", mentee_id)
        if not mentor.is_active:
            raise PreconditionFailedError(f"Mentor {mentor_id} is not active.")
        if not mentee.commitment_agreed:
            raise PreconditionFailedError(
                f"Mentee {mentee_id} has not agreed to the program commitment."
            )

        if await self.match_repository.get_by_pair(
            session=session, mentor_id=mentor_id, mentee_id=mentee_id, cycle_id=cycle_id
        ):
            raise DuplicateError(
                f"Mentor {mentor_id} and mentee {mentee_id} already have a match "
                f"in cycle {cycle_id}."
            )
        if mentee_id in await self.match_repository.get_live_mentee_ids(
            session=session, cycle_id=cycle_id
        ):
            raise DuplicateError(
                f"Mentee {mentee_id} already holds a live match in cycle {cycle_id}."
            )
        # Both reservations are undone by the caller's rollback if anything below fails.
        if not await self.cycle_repository.reserve_mentorship(
            session=session, cycle_id=cycle_id
        ):
            raise CapacityExceededError(
                f"Cycle {cycle_id} reached its limit of {cycle.max_mentorships} mentorships."
            )
        if not await self.mentor_profile_repository.reserve_slot(
            session=session, user_id=mentor_id
        ):
            raise CapacityExceededError(f"Mentor {mentor_id} has no free capacity.")

        try:
            match = await self.match_repository.insert_match(
                session=session,
                entity=MatchEntity(
                    cycle_id=cycle_id,
                    mentor_id=mentor_id,
                    mentee_id=mentee_id,
                    status=MatchStatus.APPROVED,
                    mentor_approved=True,
                    mentee_approved=True,
                    is_manual=True,
                    matched_at=datetime.now(timezone.utc),
                ),
            )
        except IntegrityError as e:
            raise ConflictError(
                f"A concurrent request matched mentee {mentee_id} in cycle {cycle_id}."
            ) from e

        mentorship, notifications = (
            await self.mentorship_lifecycle_service.instantiate_from_match(
                session=session, match=match, activate=True, goals=goals
            )
        )
        await session.commit()

        self.logger.info(
            "[AssignmentService] manually assigned mentor %s to mentee %s in cycle %s.",
            mentor_id,
            mentee_id,
            cycle_id,
        )
        await self.notification_publisher.publish(notifications)
        return MentorshipDto.model_validate(mentorship)
