from mentorship_engine.entity.mentorship_entity import MentorshipEntity
from mentorship_engine.common.mentorship_enums import MentorshipStatus
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession


class MentorshipRepository:
    """
    Repository for handling database operations related to MentorshipEntity.
    """

    async def get_mentorship_by_id(
        self, session: AsyncSession, mentorship_id: int, refresh: bool = False
    ) -> MentorshipEntity | None:
        """
        Retrieve a mentorship by its id.

        Args:
            session (AsyncSession): The active async database session.
            mentorship_id (int): The mentorship id.
            refresh (bool): Reload the row even if it is already in the session.

        Returns:
            MentorshipEntity | None: The matching mentorship or None.
        """
        stmt = select(MentorshipEntity).where(
            MentorshipEntity.mentorship_id == mentorship_id
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)

        return result.scalars().one_or_none()

    async def get_by_match_id(
        self, session: AsyncSession, match_id: int
    ) -> MentorshipEntity | None:
        result = await session.execute(
            select(MentorshipEntity).where(MentorshipEntity.match_id == match_id)
        )

        return result.scalars().one_or_none()

    async def get_mentorships(
        self,
        session: AsyncSession,
        cycle_id: int | None = None,
        statuses: list[MentorshipStatus] | None = None,
        mentor_id: int | None = None,
        mentee_id: int | None = None,
        participant_id: int | None = None,
    ) -> list[MentorshipEntity]:
        """
        Retrieve mentorships ordered by id.

        Args:
            session (AsyncSession): The active async database session.
            cycle_id (int | None): Restrict to one cycle.
            statuses (list[MentorshipStatus] | None): Restrict to these statuses.
            mentor_id (int | None): Restrict to one mentor.
            mentee_id (int | None): Restrict to one mentee.
            participant_id (int | None): Restrict to mentorships this user takes
                part in, on either side.

        Returns:
            list[MentorshipEntity]: The mentorships matching every given filter.
        """
        stmt = select(MentorshipEntity)
        if cycle_id is not None:
            stmt = stmt.where(MentorshipEntity.cycle_id == cycle_id)
        if statuses:
            stmt = stmt.where(MentorshipEntity.status.in_(statuses))
        if mentor_id is not None:
            stmt = stmt.where(MentorshipEntity.mentor_id == mentor_id)
        if mentee_id is not None:
            stmt = stmt.where(MentorshipEntity.mentee_id == mentee_id)
        if participant_id is not None:
            stmt = stmt.where(
                or_(
                    MentorshipEntity.mentor_id == participant_id,
                    MentorshipEntity.mentee_id == participant_id,
                )
            )
        result = await session.execute(stmt.order_by(MentorshipEntity.mentorship_id))

        return list(result.scalars().all())

    async def count_mentorships(self, session: AsyncSession, cycle_id: int) -> int:
        result = await session.execute(
            select(func.count(MentorshipEntity.mentorship_id)).where(
                MentorshipEntity.cycle_id == cycle_id
            )
        )

        return result.scalar_one()

    async def insert_mentorship(
        self, session: AsyncSession, entity: MentorshipEntity
    ) -> MentorshipEntity:
        """
        Insert a new mentorship and flush it so the id is assigned.

        Raises:
            sqlalchemy.exc.IntegrityError: When the match already has a mentorship.
        """
        session.add(entity)
        await session.flush()

        return entity

    async def update_status(
        self,
        session: AsyncSession,
        mentorship_id: int,
        sources: list[MentorshipStatus],
        target: MentorshipStatus,
        **values,
    ) -> bool:
        """
        Move a mentorship to `target` only if it is currently in one of `sources`.

        Returns:
            bool: True when the row was updated.
        """
        result = await session.execute(
            update(MentorshipEntity)
            .where(
                MentorshipEntity.mentorship_id == mentorship_id,
                MentorshipEntity.status.in_(sources),
            )
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def increment_sessions(self, session: AsyncSession, mentorship_id: int) -> bool:
        """Add one completed session to an active mentorship."""
        result = await session.execute(
            update(MentorshipEntity)
            .where(
                MentorshipEntity.mentorship_id == mentorship_id,
                MentorshipEntity.status == MentorshipStatus.ACTIVE,
            )
            .values(sessions_completed=MentorshipEntity.sessions_completed + 1)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def link_certificate(
        self, session: AsyncSession, mentorship_id: int, certificate_id: int
    ) -> bool:
        """
        Attach a certificate to a completed mentorship that has none yet.

        Returns:
            bool: False when another certificate was linked first.
        """
        result = await session.execute(
            update(MentorshipEntity)
            .where(
                MentorshipEntity.mentorship_id == mentorship_id,
                MentorshipEntity.status == MentorshipStatus.COMPLETED,
                MentorshipEntity.certificate_id.is_(None),
            )
            .values(certificate_id=certificate_id)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1
