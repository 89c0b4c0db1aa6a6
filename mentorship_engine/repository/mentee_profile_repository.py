from mentorship_engine.entity.mentee_profile_entity import MenteeProfileEntity
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


class MenteeProfileRepository:
    """
    Repository for handling database operations related to MenteeProfileEntity.
    """

    async def get_by_user_id(
        self, session: AsyncSession, user_id: int
    ) -> MenteeProfileEntity | None:
        """Retrieve the MenteeProfileEntity for a given user ID (1:1 relationship)."""
        result = await session.execute(
            select(MenteeProfileEntity).where(MenteeProfileEntity.user_id == user_id)
        )

        return result.scalars().one_or_none()

    async def get_all_by_user_ids(
        self, session: AsyncSession, user_ids: list[int]
    ) -> list[MenteeProfileEntity]:
        if not user_ids:
            return []

        result = await session.execute(
            select(MenteeProfileEntity).where(MenteeProfileEntity.user_id.in_(user_ids))
        )
        return list(result.scalars().all())

    async def get_all_profiles(self, session: AsyncSession) -> list[MenteeProfileEntity]:
        result = await session.execute(
            select(MenteeProfileEntity).order_by(MenteeProfileEntity.user_id)
        )
        return list(result.scalars().all())

    async def get_committed_mentees(
        self, session: AsyncSession, excluded_user_ids: set[int] | None = None
    ) -> list[MenteeProfileEntity]:
        """
        Retrieve mentees who agreed to the commitment and named a field of interest.

        Args:
            session (AsyncSession): The active async database session.
            excluded_user_ids (set[int] | None): Users to leave out of the pool.

        Returns:
            list[MenteeProfileEntity]: Profiles ordered by user id.
        """
        stmt = select(MenteeProfileEntity).where(
            MenteeProfileEntity.commitment_agreed.is_(True),
            MenteeProfileEntity.field_of_interest.is_not(None),
            MenteeProfileEntity.field_of_interest != "",
        )
        if excluded_user_ids:
            stmt = stmt.where(MenteeProfileEntity.user_id.not_in(excluded_user_ids))
        result = await session.execute(stmt.order_by(MenteeProfileEntity.user_id))

        return list(result.scalars().all())

    async def upsert_profile(
        self, session: AsyncSession, entity: MenteeProfileEntity
    ) -> MenteeProfileEntity:
        """
        Inserts or updates a MenteeProfileEntity in the database.

        Returns:
            MenteeProfileEntity: The merged entity instance synchronized with the session.
        """
        merged_entity = await session.merge(entity)
        await session.flush()

        return merged_entity
