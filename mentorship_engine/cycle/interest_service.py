from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_enums import (
    CycleStatus,
    InterestStatus,
    ParticipantRole,
)
from mentorship_engine.common.mentorship_errors import (
    ConflictError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.common.state_transitions import INTEREST_TRANSITIONS, can_transition
from mentorship_engine.dto.interest_dto import InterestCreateDto, InterestDto
from mentorship_engine.entity.interest_entity import InterestEntity


class InterestService:
    """Records which users intend to take part in a cycle, and in which role."""

    def __init__(self, logger, cycle_repository, interest_repository):
        self.logger = logger
        self.cycle_repository = cycle_repository
        self.interest_repository = interest_repository

    async def _get_cycle(self, session: AsyncSession, cycle_id: int):
        cycle = await self.cycle_repository.get_cycle_by_id(
            session=session, cycle_id=cycle_id
        )
        if not cycle:
            raise NotFoundError("Cycle", cycle_id)
        return cycle

    async def declare_interest(
        self,
        session: AsyncSession,
        cycle_id: int,
        user_id: int,
        interest_data: InterestCreateDto,
    ) -> InterestDto:
        """
        Declare or renew a user's interest in a cycle.

        A previous declaration of the same user, withdrawn or not, is updated in
        place with the new role and message.

        Raises:
            NotFoundError: Unknown cycle.
            PreconditionFailedError: The cycle is completed.
            ConflictError: A concurrent declaration by the same user won.
        """
        cycle = await self._get_cycle(session, cycle_id)
        if cycle.status == CycleStatus.COMPLETED:
            raise PreconditionFailedError(
                f"Cycle {cycle_id} is completed; interest can no longer be declared."
            )

        interest = await self.interest_repository.get_by_cycle_and_user(
            session=session, cycle_id=cycle_id, user_id=user_id
        )
        if interest is None:
            interest = InterestEntity(cycle_id=cycle_id, user_id=user_id)
        interest.role = interest_data.role
        interest.message = interest_data.message
        interest.status = InterestStatus.INTERESTED
        interest.updated_at = datetime.now(timezone.utc)

        try:
            interest = await self.interest_repository.upsert_interest(
                session=session, entity=interest
            )
        except IntegrityError as e:
            raise ConflictError(
                f"User {user_id} declared interest in cycle {cycle_id} concurrently."
            ) from e
        await session.commit()

        self.logger.info(
            "[InterestService] user %s interested in cycle %s as %s.",
            user_id,
            cycle_id,
            interest.role.value,
        )
        return InterestDto.model_validate(interest)

    async def withdraw_interest(
        self, session: AsyncSession, cycle_id: int, user_id: int
    ) -> InterestDto:
        """
        Withdraw a user's interest. Withdrawing twice is a no-op.

        Raises:
            NotFoundError: The user never declared interest in the cycle.
        """
        interest = await self.interest_repository.get_by_cycle_and_user(
            session=session, cycle_id=cycle_id, user_id=user_id
        )
        if not interest:
            raise NotFoundError("Interest", f"{cycle_id}/{user_id}")
        if not can_transition(
            INTEREST_TRANSITIONS, interest.status, InterestStatus.WITHDRAWN
        ):
            return InterestDto.model_validate(interest)

        interest.status = InterestStatus.WITHDRAWN
        interest.updated_at = datetime.now(timezone.utc)
        interest = await self.interest_repository.upsert_interest(
            session=session, entity=interest
        )
        await session.commit()

        self.logger.info(
            "[InterestService] user %s withdrew from cycle %s.", user_id, cycle_id
        )
        return InterestDto.model_validate(interest)

    async def list_interests(
        self,
        session: AsyncSession,
        cycle_id: int,
        role: ParticipantRole | None = None,
    ) -> list[InterestDto]:
        await self._get_cycle(session, cycle_id)
        interests = await self.interest_repository.get_interests_by_cycle(
            session=session, cycle_id=cycle_id, role=role
        )
        return [InterestDto.model_validate(interest) for interest in interests]
