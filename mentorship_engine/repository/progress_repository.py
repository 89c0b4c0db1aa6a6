from mentorship_engine.entity.progress_entity import ProgressEntity
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


class ProgressRepository:
    """
    Repository for handling database operations related to ProgressEntity.
    """

    async def get_by_mentorship_and_week(
        self, session: AsyncSession, mentorship_id: int, week: int
    ) -> ProgressEntity | None:
        result = await session.execute(
            select(ProgressEntity)
            .where(
                ProgressEntity.mentorship_id == mentorship_id,
                ProgressEntity.week == week,
            )
            .execution_options(populate_existing=True)
        )

        return result.scalars().one_or_none()

    async def get_progress_by_mentorship(
        self, session: AsyncSession, mentorship_id: int
    ) -> list[ProgressEntity]:
        result = await session.execute(
            select(ProgressEntity)
            .where(ProgressEntity.mentorship_id == mentorship_id)
            .order_by(ProgressEntity.week)
        )

        return list(result.scalars().all())

    async def get_latest_by_mentorship_ids(
        self, session: AsyncSession, mentorship_ids: list[int]
    ) -> dict[int, ProgressEntity]:
        """
        Retrieve the most recent weekly snapshot of each mentorship.

        Returns:
            dict[int, ProgressEntity]: mentorship_id -> snapshot of its highest week.
        """
        if not mentorship_ids:
            return {}

        latest_week = (
            select(
                ProgressEntity.mentorship_id,
                func.max(ProgressEntity.week).label("week"),
            )
            .where(ProgressEntity.mentorship_id.in_(mentorship_ids))
            .group_by(ProgressEntity.mentorship_id)
            .subquery()
        )
        result = await session.execute(
            select(ProgressEntity).join(
                latest_week,
                (ProgressEntity.mentorship_id == latest_week.c.mentorship_id)
                & (ProgressEntity.week == latest_week.c.week),
            )
        )

        return {entity.mentorship_id: entity for entity in result.scalars().all()}

    async def upsert_progress(
        self, session: AsyncSession, entity: ProgressEntity
    ) -> ProgressEntity:
        """
        Insert or replace the snapshot of one (mentorship, week).

        An existing row for the same week keeps its id and has every value
        overwritten, so recomputing never accumulates.

        Args:
            session (AsyncSession): Active async database session.
            entity (ProgressEntity): The snapshot, without a progress id.

        Returns:
            ProgressEntity: The merged entity instance synchronized with the session.
        """
        existing = await self.get_by_mentorship_and_week(
            session, entity.mentorship_id, entity.week
        )
        if existing is not None:
            entity.progress_id = existing.progress_id
        merged_entity = await session.merge(entity)
        await session.flush()

        return merged_entity
