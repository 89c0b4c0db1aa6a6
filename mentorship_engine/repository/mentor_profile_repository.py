from mentorship_engine.entity.mentor_profile_entity import MentorProfileEntity
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession


class MentorProfileRepository:
    """
    Repository for handling database operations related to MentorProfileEntity.

    `current_mentees` is the single source of truth for a mentor's load. It is
    only ever changed through `reserve_slot` and `release_slot`, both of which
    are conditional updates guarded by the capacity check constraint.
    """

    async def get_by_user_id(
        self, session: AsyncSession, user_id: int, refresh: bool = False
    ) -> MentorProfileEntity | None:
        """
        Retrieve a mentor profile by user id.

        Args:
            session (AsyncSession): The active async database session.
            user_id (int): The mentor's user id.
            refresh (bool): Reload the row even if the instance is already in the
                session identity map.

        Returns:
            MentorProfileEntity | None: The matching profile or None.
        """
        stmt = select(MentorProfileEntity).where(MentorProfileEntity.user_id == user_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)

        return result.scalars().one_or_none()

    async def get_all_by_user_ids(
        self, session: AsyncSession, user_ids: list[int]
    ) -> list[MentorProfileEntity]:
        if not user_ids:
            return []

        result = await session.execute(
            select(MentorProfileEntity).where(MentorProfileEntity.user_id.in_(user_ids))
        )
        return list(result.scalars().all())

    async def get_all_profiles(self, session: AsyncSession) -> list[MentorProfileEntity]:
        result = await session.execute(
            select(MentorProfileEntity).order_by(MentorProfileEntity.user_id)
        )
        return list(result.scalars().all())

    async def get_available_mentors(
        self, session: AsyncSession, excluded_user_ids: set[int] | None = None
    ) -> list[MentorProfileEntity]:
        """
        Retrieve active, verified mentors with at least one free slot.

        Args:
            session (AsyncSession): The active async database session.
            excluded_user_ids (set[int] | None): Users to leave out of the pool.

        Returns:
            list[MentorProfileEntity]: Profiles ordered by user id, re-read from the
                database so capacity figures are current.
        """
        stmt = select(MentorProfileEntity).where(
            MentorProfileEntity.is_active.is_(True),
            MentorProfileEntity.is_verified.is_(True),
            MentorProfileEntity.current_mentees < MentorProfileEntity.max_mentees,
        )
        if excluded_user_ids:
            stmt = stmt.where(MentorProfileEntity.user_id.not_in(excluded_user_ids))
        result = await session.execute(
            stmt.order_by(MentorProfileEntity.user_id).execution_options(
                populate_existing=True
            )
        )

        return list(result.scalars().all())

    async def upsert_profile(
        self, session: AsyncSession, entity: MentorProfileEntity
    ) -> MentorProfileEntity:
        """
        Inserts or updates a MentorProfileEntity in the database.

        Returns:
            MentorProfileEntity: The merged entity instance synchronized with the session.
        """
        merged_entity = await session.merge(entity)
        await session.flush()

        return merged_entity

    async def reserve_slot(self, session: AsyncSession, user_id: int) -> bool:
        """
        Atomically take one slot of the mentor's capacity.

        The increment only applies while `current_mentees < max_mentees` and the
        mentor is active, so two concurrent reservations can never overfill it.

        Returns:
            bool: True when a slot was reserved, False when the mentor is full,
                inactive or unknown.
        """
        result = await session.execute(
            update(MentorProfileEntity)
            .where(
                MentorProfileEntity.user_id == user_id,
                MentorProfileEntity.is_active.is_(True),
                MentorProfileEntity.current_mentees < MentorProfileEntity.max_mentees,
            )
            .values(
                current_mentees=MentorProfileEntity.current_mentees + 1,
                total_mentees=MentorProfileEntity.total_mentees + 1,
            )
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def release_slot(
        self, session: AsyncSession, user_id: int, revoke_total: bool = False
    ) -> bool:
        """
        Atomically give back one slot of the mentor's capacity.

        Args:
            session (AsyncSession): The active async database session.
            user_id (int): The mentor's user id.
            revoke_total (bool): Also undo the lifetime counter, used when the
                reservation never turned into a mentorship.

        Returns:
            bool: True when a slot was released, False when nothing was held.
        """
        values = {"current_mentees": MentorProfileEntity.current_mentees - 1}
        if revoke_total:
            values["total_mentees"] = MentorProfileEntity.total_mentees - 1
        result = await session.execute(
            update(MentorProfileEntity)
            .where(
                MentorProfileEntity.user_id == user_id,
                MentorProfileEntity.current_mentees > 0,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1
