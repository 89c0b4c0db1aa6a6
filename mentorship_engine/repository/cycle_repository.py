from mentorship_engine.entity.cycle_entity import CycleEntity
from mentorship_engine.common.mentorship_enums import CycleStatus
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession


class CycleRepository:
    """
    Repository for handling database operations related to CycleEntity.
    """

    async def get_cycle_by_id(
        self, session: AsyncSession, cycle_id: int, refresh: bool = False
    ) -> CycleEntity | None:
        """
        Retrieve a cycle by its id.

        Args:
            session (AsyncSession): The active async database session.
            cycle_id (int): The cycle id.
            refresh (bool): Overwrite an already loaded instance with the row as
                stored, used after a conditional update.

        Returns:
            CycleEntity | None: The matching cycle or None.
        """
        stmt = select(CycleEntity).where(CycleEntity.cycle_id == cycle_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)

        return result.scalars().one_or_none()

    async def get_all_cycles(self, session: AsyncSession) -> list[CycleEntity]:
        """Retrieve every cycle, newest start date first."""
        result = await session.execute(
            select(CycleEntity).order_by(
                CycleEntity.start_date.desc(), CycleEntity.cycle_id.desc()
            )
        )

        return list(result.scalars().all())

    async def upsert_cycle(
        self, session: AsyncSession, entity: CycleEntity
    ) -> CycleEntity:
        """
        Inserts or updates a CycleEntity in the database.

        Args:
            session (AsyncSession): Active async database session.
            entity (CycleEntity): The cycle to persist.

        Returns:
            CycleEntity: The merged entity instance synchronized with the session.
        """
        merged_entity = await session.merge(entity)
        await session.flush()

        return merged_entity

    async def update_status(
        self,
        session: AsyncSession,
        cycle_id: int,
        sources: list[CycleStatus],
        target: CycleStatus,
        **values,
    ) -> bool:
        """
        Move a cycle to `target` only if it is currently in one of `sources`.

        Returns:
            bool: True when the row was updated, False when another writer moved
                it first or the cycle does not exist.
        """
        result = await session.execute(
            update(CycleEntity)
            .where(CycleEntity.cycle_id == cycle_id, CycleEntity.status.in_(sources))
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def reserve_mentorship(self, session: AsyncSession, cycle_id: int) -> bool:
        """
        Atomically take one place under the cycle's `max_mentorships` ceiling.

        The increment only applies while `reserved_mentorships < max_mentorships`,
        so concurrent matching runs and assignments can never overfill the cycle.

        Returns:
            bool: True when a place was reserved, False when the cycle is full or
                unknown.
        """
        result = await session.execute(
            update(CycleEntity)
            .where(
                CycleEntity.cycle_id == cycle_id,
                CycleEntity.reserved_mentorships < CycleEntity.max_mentorships,
            )
            .values(reserved_mentorships=CycleEntity.reserved_mentorships + 1)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def release_mentorship(self, session: AsyncSession, cycle_id: int) -> bool:
        """Give back one place of the cycle ceiling; False when nothing was held."""
        result = await session.execute(
            update(CycleEntity)
            .where(
                CycleEntity.cycle_id == cycle_id,
                CycleEntity.reserved_mentorships > 0,
            )
            .values(reserved_mentorships=CycleEntity.reserved_mentorships - 1)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def delete_cycle(self, session: AsyncSession, cycle_id: int) -> bool:
        """Delete a cycle row; interests are removed by the foreign key cascade."""
        result = await session.execute(
            delete(CycleEntity)
            .where(CycleEntity.cycle_id == cycle_id)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1
