from mentorship_engine.entity.task_entity import TaskEntity
from mentorship_engine.common.mentorship_enums import TaskStatus
from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession


class TaskRepository:
    """
    Repository for handling database operations related to TaskEntity.
    """

    async def get_task_by_id(
        self, session: AsyncSession, task_id: int, refresh: bool = False
    ) -> TaskEntity | None:
        stmt = select(TaskEntity).where(TaskEntity.task_id == task_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await session.execute(stmt)

        return result.scalars().one_or_none()

    async def get_tasks(
        self, session: AsyncSession, mentorship_id: int, week: int | None = None
    ) -> list[TaskEntity]:
        """Retrieve the tasks of a mentorship ordered by week and id."""
        stmt = select(TaskEntity).where(TaskEntity.mentorship_id == mentorship_id)
        if week is not None:
            stmt = stmt.where(TaskEntity.week == week)
        result = await session.execute(
            stmt.order_by(TaskEntity.week, TaskEntity.task_id)
        )

        return list(result.scalars().all())

    async def insert_tasks(
        self, session: AsyncSession, entities: list[TaskEntity]
    ) -> list[TaskEntity]:
        """Insert several tasks in one flush."""
        session.add_all(entities)
        await session.flush()

        return entities

    async def count_tasks(
        self, session: AsyncSession, mentorship_id: int, week: int
    ) -> tuple[int, int]:
        """
        Count the tasks of one (mentorship, week).

        Returns:
            tuple[int, int]: (completed, total).
        """
        result = await session.execute(
            select(
                func.count(
                    case((TaskEntity.status == TaskStatus.COMPLETED, TaskEntity.task_id))
                ),
                func.count(TaskEntity.task_id),
            ).where(TaskEntity.mentorship_id == mentorship_id, TaskEntity.week == week)
        )
        completed, total = result.one()

        return completed, total

    async def count_tasks_by_mentorship(
        self, session: AsyncSession, mentorship_ids: list[int]
    ) -> dict[int, tuple[int, int]]:
        """
        Count completed and total tasks per mentorship.

        Returns:
            dict[int, tuple[int, int]]: mentorship_id -> (completed, total); ids
                without tasks are absent.
        """
        if not mentorship_ids:
            return {}

        result = await session.execute(
            select(
                TaskEntity.mentorship_id,
                func.count(
                    case((TaskEntity.status == TaskStatus.COMPLETED, TaskEntity.task_id))
                ),
                func.count(TaskEntity.task_id),
            )
            .where(TaskEntity.mentorship_id.in_(mentorship_ids))
            .group_by(TaskEntity.mentorship_id)
        )

        return {row[0]: (row[1], row[2]) for row in result.all()}

    async def update_status(
        self,
        session: AsyncSession,
        task_id: int,
        sources: list[TaskStatus],
        target: TaskStatus,
        **values,
    ) -> bool:
        """Move a task to `target` only if it is currently in one of `sources`."""
        result = await session.execute(
            update(TaskEntity)
            .where(TaskEntity.task_id == task_id, TaskEntity.status.in_(sources))
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )

        return result.rowcount == 1
