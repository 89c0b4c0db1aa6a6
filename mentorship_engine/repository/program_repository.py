from mentorship_engine.entity.program_entity import ProgramEntity
from mentorship_engine.common.mentorship_enums import ProgramStatus
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession


class ProgramRepository:
    """
    Repository for handling database operations related to ProgramEntity.
    """

    async def get_program_by_id(
        self, session: AsyncSession, program_id: int, refresh: bool = False
    ) -> ProgramEntity | None:
        stmt = select(ProgramEntity).where(ProgramEntity.program_id == program_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)

        return result.scalars().one_or_none()

    async def get_programs_by_mentorship_ids(
        self,
        session: AsyncSession,
        mentorship_ids: list[int],
        status: ProgramStatus | None = None,
    ) -> list[ProgramEntity]:
        """
        Retrieve the programs of several mentorships.

        Args:
            session (AsyncSession): The active async database session.
            mentorship_ids (list[int]): Mentorship ids to look up.
            status (ProgramStatus | None): Optional status filter.

        Returns:
            list[ProgramEntity]: Programs ordered by id; empty when no ids are given.
        """
        if not mentorship_ids:
            return []

        stmt = select(ProgramEntity).where(
            ProgramEntity.mentorship_id.in_(mentorship_ids)
        )
        if status is not None:
            stmt = stmt.where(ProgramEntity.status == status)
        result = await session.execute(
            stmt.order_by(ProgramEntity.program_id).execution_options(
                populate_existing=True
            )
        )

        return list(result.scalars().all())

    async def insert_program(
        self, session: AsyncSession, entity: ProgramEntity
    ) -> ProgramEntity:
        """
        Insert a new program and flush it so the id is assigned.

        Raises:
            sqlalchemy.exc.IntegrityError: When the mentorship already has a program
                for the cycle.
        """
        session.add(entity)
        await session.flush()

        return entity

    async def advance_week(self, session: AsyncSession, program_id: int) -> bool:
        """
        Increment the week counter of an active program.

        Returns:
            bool: False when the program is completed or unknown.
        """
        result = await session.execute(
            update(ProgramEntity)
            .where(
                ProgramEntity.program_id == program_id,
                ProgramEntity.status == ProgramStatus.ACTIVE,
            )
            .values(week=ProgramEntity.week + 1)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def update_status(
        self,
        session: AsyncSession,
        program_id: int,
        sources: list[ProgramStatus],
        target: ProgramStatus,
        **values,
    ) -> bool:
        result = await session.execute(
            update(ProgramEntity)
            .where(
                ProgramEntity.program_id == program_id,
                ProgramEntity.status.in_(sources),
            )
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1
