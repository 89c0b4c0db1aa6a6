from datetime import datetime

from mentorship_engine.entity.evaluation_entity import EvaluationEntity
from mentorship_engine.common.mentorship_enums import EvaluationType
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


class EvaluationRepository:
    """
    Repository for handling database operations related to EvaluationEntity.
    """

    async def get_by_evaluator(
        self,
        session: AsyncSession,
        mentorship_id: int,
        evaluation_type: EvaluationType,
        evaluator_id: int,
    ) -> EvaluationEntity | None:
        """Retrieve the evaluation one evaluator submitted at a checkpoint."""
        result = await session.execute(
            select(EvaluationEntity).where(
                EvaluationEntity.mentorship_id == mentorship_id,
                EvaluationEntity.type == evaluation_type,
                EvaluationEntity.evaluator_id == evaluator_id,
            )
        )

        return result.scalars().one_or_none()

    async def get_evaluations(
        self,
        session: AsyncSession,
        mentorship_id: int,
        evaluation_type: EvaluationType | None = None,
    ) -> list[EvaluationEntity]:
        stmt = select(EvaluationEntity).where(
            EvaluationEntity.mentorship_id == mentorship_id
        )
        if evaluation_type is not None:
            stmt = stmt.where(EvaluationEntity.type == evaluation_type)
        result = await session.execute(stmt.order_by(EvaluationEntity.evaluation_id))

        return list(result.scalars().all())

    async def get_average_skill_improvement(
        self,
        session: AsyncSession,
        mentorship_id: int,
        submitted_before: datetime | None = None,
    ) -> float | None:
        """
        Mean `skill_improvement` rating over the evaluations of a mentorship.

        Args:
            session (AsyncSession): The active async database session.
            mentorship_id (int): The evaluated mentorship.
            submitted_before (datetime | None): Only count evaluations submitted
                strictly before this instant.

        Returns:
            float | None: The mean, or None when no counted evaluation rated it.
        """
        stmt = select(func.avg(EvaluationEntity.skill_improvement)).where(
            EvaluationEntity.mentorship_id == mentorship_id
        )
        if submitted_before is not None:
            stmt = stmt.where(EvaluationEntity.submitted_at < submitted_before)
        result = await session.execute(stmt)
        average = result.scalar_one_or_none()

        return float(average) if average is not None else None

    async def insert_evaluation(
        self, session: AsyncSession, entity: EvaluationEntity
    ) -> EvaluationEntity:
        """
        Insert a new evaluation.

        Raises:
            sqlalchemy.exc.IntegrityError: When the evaluator already submitted this
                checkpoint.
        """
        session.add(entity)
        await session.flush()

        return entity
