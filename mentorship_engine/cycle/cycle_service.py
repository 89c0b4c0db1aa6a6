from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_enums import CycleStatus, InterestStatus
from mentorship_engine.common.mentorship_errors import (
    ConflictError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.common.state_transitions import (
    CYCLE_TRANSITIONS,
    ensure_transition,
    source_statuses,
)
from mentorship_engine.dto.cycle_create_dto import CycleCreateDto
from mentorship_engine.dto.cycle_dto import CycleDto
from mentorship_engine.entity.cycle_entity import CycleEntity
from mentorship_engine.notification import notification_messages


class CycleService:
    """Service for managing mentorship cycles: upcoming -> active -> completed."""

    def __init__(
        self,
        logger,
        cycle_repository,
        interest_repository,
        match_repository,
        mentorship_repository,
        notification_publisher,
    ):
        """
        Initializes the CycleService with required dependencies.

        Args:
            logger: The logger instance for logging messages.
            cycle_repository (CycleRepository): Cycle persistence.
            interest_repository (InterestRepository): Interest holders notified at launch.
            match_repository (MatchRepository): Dependents checked before deletion.
            mentorship_repository (MentorshipRepository): Dependents checked before deletion.
            notification_publisher (NotificationPublisher): Outbox for user messages.
        """
        self.logger = logger
        self.cycle_repository = cycle_repository
        self.interest_repository = interest_repository
        self.match_repository = match_repository
        self.mentorship_repository = mentorship_repository
        self.notification_publisher = notification_publisher

    async def _get_cycle(
        self, session: AsyncSession, cycle_id: int, refresh: bool = False
    ) -> CycleEntity:
        cycle = await self.cycle_repository.get_cycle_by_id(
            session=session, cycle_id=cycle_id, refresh=refresh
        )
        if not cycle:
            raise NotFoundError("Cycle", cycle_id)
        return cycle

    async def create_cycle(
        self, session: AsyncSession, cycle_data: CycleCreateDto
    ) -> CycleDto:
        """
        Create an upcoming cycle.

        Args:
            session (AsyncSession): Active database async session.
            cycle_data (CycleCreateDto): Validated cycle fields.

        Returns:
            CycleDto: The created cycle.
        """
        cycle = await self.cycle_repository.upsert_cycle(
            session=session,
            entity=CycleEntity(
                name=cycle_data.name,
                description=cycle_data.description,
                start_date=cycle_data.start_date,
                end_date=cycle_data.end_date,
                max_mentorships=cycle_data.max_mentorships,
                status=CycleStatus.UPCOMING,
            ),
        )
        await session.commit()

        self.logger.info(
            "[CycleService] cycle %s '%s' created.", cycle.cycle_id, cycle.name
        )
        return CycleDto.model_validate(cycle)

    async def list_cycles(self, session: AsyncSession) -> list[CycleDto]:
        cycles = await self.cycle_repository.get_all_cycles(session=session)
        return [CycleDto.model_validate(cycle) for cycle in cycles]

    async def get_cycle(self, session: AsyncSession, cycle_id: int) -> CycleDto:
        return CycleDto.model_validate(await self._get_cycle(session, cycle_id))

    async def delete_cycle(self, session: AsyncSession, cycle_id: int) -> None:
        """
        Delete a cycle that has no matches and no mentorships.

        Raises:
            NotFoundError: Unknown cycle.
            PreconditionFailedError: The cycle still has dependents.
        """
        await self._get_cycle(session, cycle_id)
        matches = await self.match_repository.count_matches(
            session=session, cycle_id=cycle_id
        )
        mentorships = await self.mentorship_repository.count_mentorships(
            session=session, cycle_id=cycle_id
        )
        if matches or mentorships:
            raise PreconditionFailedError(
                f"Cycle {cycle_id} has {matches} match(es) and {mentorships} "
                "mentorship(s); it cannot be deleted."
            )

        await self.cycle_repository.delete_cycle(session=session, cycle_id=cycle_id)
        await session.commit()
        self.logger.info("[CycleService] cycle %s deleted.", cycle_id)

    async def _transition(
        self, session: AsyncSession, cycle_id: int, target: CycleStatus, **values
    ) -> CycleEntity:
        cycle = await self._get_cycle(session, cycle_id)
        ensure_transition(CYCLE_TRANSITIONS, cycle.status, target, "Cycle")
        if not await self.cycle_repository.update_status(
            session=session,
            cycle_id=cycle_id,
            sources=source_statuses(CYCLE_TRANSITIONS, target),
            target=target,
            **values,
        ):
            raise ConflictError(f"Cycle {cycle_id} changed status concurrently.")
        return cycle

    async def launch(self, session: AsyncSession, cycle_id: int) -> CycleDto:
        """
        Open an upcoming cycle and notify everyone who declared interest in it.

        Raises:
            NotFoundError: Unknown cycle.
            PreconditionFailedError: The cycle is not upcoming.
            ConflictError: A concurrent request launched it first.
        """
        await self._transition(
            session,
            cycle_id,
            CycleStatus.ACTIVE,
            launched_at=datetime.now(timezone.utc),
        )
        interests = await self.interest_repository.get_interests_by_cycle(
            session=session, cycle_id=cycle_id, status=InterestStatus.INTERESTED
        )
        await session.commit()

        cycle = await self._get_cycle(session, cycle_id, refresh=True)
        queued = await self.notification_publisher.publish(
            notification_messages.cycle_launched(
                cycle, [interest.user_id for interest in interests]
            )
        )
        self.logger.info(
            "[CycleService] cycle %s launched; %d of %d interest holder(s) notified.",
            cycle_id,
            queued,
            len(interests),
        )
        return CycleDto.model_validate(cycle)

    async def complete_cycle(self, session: AsyncSession, cycle_id: int) -> CycleDto:
        """
        Close an active cycle. Mentorships already running are left untouched.

        Raises:
            NotFoundError: Unknown cycle.
            PreconditionFailedError: The cycle is not active.
        """
        await self._transition(
            session,
            cycle_id,
            CycleStatus.COMPLETED,
            completed_at=datetime.now(timezone.utc),
        )
        await session.commit()

        self.logger.info("[CycleService] cycle %s completed.", cycle_id)
        cycle = await self._get_cycle(session, cycle_id, refresh=True)
        return CycleDto.model_validate(cycle)
