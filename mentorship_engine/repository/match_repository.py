from mentorship_engine.entity.match_entity import MatchEntity
from mentorship_engine.common.mentorship_enums import MatchStatus
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

LIVE_MATCH_STATUSES = (MatchStatus.PENDING, MatchStatus.APPROVED)


class MatchRepository:
    """
    Repository for handling database operations related to MatchEntity.
    """

    async def get_match_by_id(
        self, session: AsyncSession, match_id: int, refresh: bool = False
    ) -> MatchEntity | None:
        """
        Retrieve a match by its id.

        Args:
            session (AsyncSession): The active async database session.
            match_id (int): The match id.
            refresh (bool): Reload the row even if it is already in the session.

        Returns:
            MatchEntity | None: The matching match or None.
        """
        stmt = select(MatchEntity).where(MatchEntity.match_id == match_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)

        return result.scalars().one_or_none()

    async def get_by_pair(
        self, session: AsyncSession, mentor_id: int, mentee_id: int, cycle_id: int
    ) -> MatchEntity | None:
        """Retrieve the match of a mentor and mentee in a cycle, whatever its status."""
        result = await session.execute(
            select(MatchEntity).where(
                MatchEntity.mentor_id == mentor_id,
                MatchEntity.mentee_id == mentee_id,
                MatchEntity.cycle_id == cycle_id,
            )
        )

        return result.scalars().one_or_none()

    async def get_matches(
        self,
        session: AsyncSession,
        cycle_id: int | None = None,
        statuses: list[MatchStatus] | None = None,
    ) -> list[MatchEntity]:
        """
        Retrieve matches, optionally restricted to a cycle and a set of statuses.

        Returns:
            list[MatchEntity]: Matches ordered by id.
        """
        stmt = select(MatchEntity)
        if cycle_id is not None:
            stmt = stmt.where(MatchEntity.cycle_id == cycle_id)
        if statuses:
            stmt = stmt.where(MatchEntity.status.in_(statuses))
        result = await session.execute(stmt.order_by(MatchEntity.match_id))

        return list(result.scalars().all())

    async def get_live_mentee_ids(self, session: AsyncSession, cycle_id: int) -> set[int]:
        """Return the mentees holding a pending or approved match in the cycle."""
        result = await session.execute(
            select(MatchEntity.mentee_id).where(
                MatchEntity.cycle_id == cycle_id,
                MatchEntity.status.in_(LIVE_MATCH_STATUSES),
            )
        )

        return set(result.scalars().all())

    async def get_rejected_pairs(
        self, session: AsyncSession, cycle_id: int
    ) -> set[tuple[int, int]]:
        """Return the (mentor_id, mentee_id) pairs rejected in the cycle."""
        result = await session.execute(
            select(MatchEntity.mentor_id, MatchEntity.mentee_id).where(
                MatchEntity.cycle_id == cycle_id,
                MatchEntity.status == MatchStatus.REJECTED,
            )
        )

        return {(row.mentor_id, row.mentee_id) for row in result.all()}

    async def count_matches(
        self, session: AsyncSession, cycle_id: int, live_only: bool = False
    ) -> int:
        """Count the matches of a cycle, or only the pending and approved ones."""
        stmt = select(func.count(MatchEntity.match_id)).where(
            MatchEntity.cycle_id == cycle_id
        )
        if live_only:
            stmt = stmt.where(MatchEntity.status.in_(LIVE_MATCH_STATUSES))
        result = await session.execute(stmt)

        return result.scalar_one()

    async def insert_match(
        self, session: AsyncSession, entity: MatchEntity
    ) -> MatchEntity:
        """
        Insert a new match and flush it so the id is assigned.

        Raises:
            sqlalchemy.exc.IntegrityError: When the pair already has a match in the
                cycle or the mentee already holds a live match there.
        """
        session.add(entity)
        await session.flush()

        return entity

    async def set_approval_flag(
        self, session: AsyncSession, match_id: int, is_mentor: bool
    ) -> bool:
        """
        Record one side's approval on a pending match.

        Returns:
            bool: True when the flag was written, False when the match is no longer
                pending.
        """
        flag = "mentor_approved" if is_mentor else "mentee_approved"
        result = await session.execute(
            update(MatchEntity)
            .where(
                MatchEntity.match_id == match_id,
                MatchEntity.status == MatchStatus.PENDING,
            )
            .values({flag: True})
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def approve_if_both_agreed(
        self, session: AsyncSession, match_id: int, matched_at
    ) -> bool:
        """
        Flip a pending match to approved once both sides have agreed.

        Exactly one caller can win this update for a given match; the winner is
        the one that instantiates the mentorship.

        Returns:
            bool: True when this call performed the transition.
        """
        result = await session.execute(
            update(MatchEntity)
            .where(
                MatchEntity.match_id == match_id,
                MatchEntity.status == MatchStatus.PENDING,
                MatchEntity.mentor_approved.is_(True),
                MatchEntity.mentee_approved.is_(True),
            )
            .values(status=MatchStatus.APPROVED, matched_at=matched_at)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1

    async def update_status(
        self,
        session: AsyncSession,
        match_id: int,
        sources: list[MatchStatus],
        target: MatchStatus,
        **values,
    ) -> bool:
        """Move a match to `target` only if it is currently in one of `sources`."""
        result = await session.execute(
            update(MatchEntity)
            .where(MatchEntity.match_id == match_id, MatchEntity.status.in_(sources))
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1
