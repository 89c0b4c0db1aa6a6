from mentorship_engine.entity.interest_entity import InterestEntity
from mentorship_engine.common.mentorship_enums import InterestStatus, ParticipantRole
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


class InterestRepository:
    """
    Repository for handling database operations related to InterestEntity.
    """

    async def get_by_cycle_and_user(
        self, session: AsyncSession, cycle_id: int, user_id: int
    ) -> InterestEntity | None:
        """
        Retrieve the interest a user declared in a cycle.

        Args:
            session (AsyncSession): The active async database session.
            cycle_id (int): Cycle id.
            user_id (int): User id.

        Returns:
            InterestEntity | None: The matching interest or None.
        """
        result = await session.execute(
            select(InterestEntity).where(
                InterestEntity.cycle_id == cycle_id,
                InterestEntity.user_id == user_id,
            )
        )

        return result.scalars().one_or_none()

    async def get_interests_by_cycle(
        self,
        session: AsyncSession,
        cycle_id: int,
        role: ParticipantRole | None = None,
        status: InterestStatus | None = None,
    ) -> list[InterestEntity]:
        """
        Retrieve the interests of a cycle, optionally filtered by role and status.

        Returns:
            list[InterestEntity]: Interests ordered by user id.
        """
        stmt = select(InterestEntity).where(InterestEntity.cycle_id == cycle_id)
        if role is not None:
            stmt = stmt.where(InterestEntity.role == role)
        if status is not None:
            stmt = stmt.where(InterestEntity.status == status)
        result = await session.execute(stmt.order_by(InterestEntity.user_id))

        return list(result.scalars().all())

    async def get_withdrawn_user_ids(
        self, session: AsyncSession, cycle_id: int
    ) -> set[int]:
        """Return the ids of users who withdrew from the cycle."""
        result = await session.execute(
            select(InterestEntity.user_id).where(
                InterestEntity.cycle_id == cycle_id,
                InterestEntity.status == InterestStatus.WITHDRAWN,
            )
        )

        return set(result.scalars().all())

    async def upsert_interest(
        self, session: AsyncSession, entity: InterestEntity
    ) -> InterestEntity:
        """
        Inserts or updates an InterestEntity in the database.

        Returns:
            InterestEntity: The merged entity instance synchronized with the session.
        """
        merged_entity = await session.merge(entity)
        await session.flush()

        return merged_entity
