from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_enums import InterestStatus, ParticipantRole
from mentorship_engine.common.mentorship_errors import NotFoundError
from mentorship_engine.notification import notification_messages


class OnboardingService:
    """Sends onboarding instructions to mentors or mentees."""

    def __init__(
        self,
        logger,
        cycle_repository,
        interest_repository,
        mentor_profile_repository,
        mentee_profile_repository,
        notification_publisher,
    ):
        self.logger = logger
        self.cycle_repository = cycle_repository
        self.interest_repository = interest_repository
        self.mentor_profile_repository = mentor_profile_repository
        self.mentee_profile_repository = mentee_profile_repository
        self.notification_publisher = notification_publisher

    async def _resolve_recipients(
        self, session: AsyncSession, target_role: ParticipantRole, cycle_id: int | None
    ) -> list[int]:
        if cycle_id is not None:
            cycle = await self.cycle_repository.get_cycle_by_id(
                session=session, cycle_id=cycle_id
            )
            if not cycle:
                raise NotFoundError("Cycle", cycle_id)
            interests = await self.interest_repository.get_interests_by_cycle(
                session=session,
                cycle_id=cycle_id,
                role=target_role,
                status=InterestStatus.INTERESTED,
            )
            return [interest.user_id for interest in interests]

        repository = (
            self.mentor_profile_repository
            if target_role == ParticipantRole.MENTOR
            else self.mentee_profile_repository
        )
        profiles = await repository.get_all_profiles(session=session)
        return [profile.user_id for profile in profiles]

    async def send_onboarding_notifications(
        self,
        session: AsyncSession,
        target_role: ParticipantRole,
        cycle_id: int | None = None,
    ) -> dict:
        """
        Queue onboarding notifications for every user of a role.

        Args:
            session (AsyncSession): Active database async session.
            target_role (ParticipantRole): Mentors or mentees.
            cycle_id (int | None): Restrict recipients to the users interested in
                this cycle; without it every profile of the role is notified.

        Returns:
            dict: `recipients` found and notifications `queued`.

        Raises:
            NotFoundError: Unknown cycle.
        """
        recipients = await self._resolve_recipients(session, target_role, cycle_id)
        queued = await self.notification_publisher.publish(
            notification_messages.onboarding(recipients, target_role, cycle_id)
        )
        self.logger.info(
            "[OnboardingService] onboarding for %s (cycle %s): %d/%d queued.",
            target_role.value,
            cycle_id,
            queued,
            len(recipients),
        )
        return {"recipients": len(recipients), "queued": queued}
