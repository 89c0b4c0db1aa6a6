from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.constants import DAYS_PER_PROGRAM_WEEK, WEEKLY_TASK_TEMPLATES
from mentorship_engine.common.mentorship_enums import ProgramStatus, TaskStatus
from mentorship_engine.common.mentorship_errors import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.common.state_transitions import (
    MENTORSHIP_TRANSITIONS,
    PROGRAM_TRANSITIONS,
    TASK_TRANSITIONS,
    ensure_transition,
    is_terminal,
    source_statuses,
)
from mentorship_engine.dto.program_dto import ProgramDto, ProgressDto, TaskDto
from mentorship_engine.dto.task_create_dto import TaskCreateDto
from mentorship_engine.entity.program_entity import ProgramEntity
from mentorship_engine.entity.progress_entity import ProgressEntity
from mentorship_engine.entity.task_entity import TaskEntity
from mentorship_engine.notification import notification_messages


class ProgramService:
    """
    Drives the week-indexed program of a mentorship: weekly task generation,
    task status changes and per-week progress snapshots.

    Methods named `build_*`/`close_*` only stage changes in the caller's unit of
    work; every other public method commits.
    """

    def __init__(
        self,
        logger,
        program_repository,
        task_repository,
        progress_repository,
        evaluation_repository,
        mentorship_repository,
        notification_publisher,
    ):
        """
        Initializes the ProgramService with required dependencies.

        Args:
            logger: The logger instance for logging messages.
            program_repository (ProgramRepository): Program persistence.
            task_repository (TaskRepository): Task persistence.
            progress_repository (ProgressRepository): Progress snapshot persistence.
            evaluation_repository (EvaluationRepository): Source of skill ratings.
            mentorship_repository (MentorshipRepository): Owning mentorships.
            notification_publisher (NotificationPublisher): Outbox for user messages.
        """
        self.logger = logger
        self.program_repository = program_repository
        self.task_repository = task_repository
        self.progress_repository = progress_repository
        self.evaluation_repository = evaluation_repository
        self.mentorship_repository = mentorship_repository
        self.notification_publisher = notification_publisher

    async def _get_mentorship(self, session: AsyncSession, mentorship_id: int):
        mentorship = await self.mentorship_repository.get_mentorship_by_id(
            session=session, mentorship_id=mentorship_id
        )
        if not mentorship:
            raise NotFoundError("Mentorship", mentorship_id)
        return mentorship

    async def _get_program(
        self, session: AsyncSession, program_id: int, refresh: bool = False
    ) -> ProgramEntity:
        program = await self.program_repository.get_program_by_id(
            session=session, program_id=program_id, refresh=refresh
        )
        if not program:
            raise NotFoundError("Program", program_id)
        return program

    async def _get_task(
        self, session: AsyncSession, task_id: int, refresh: bool = False
    ) -> TaskEntity:
        task = await self.task_repository.get_task_by_id(
            session=session, task_id=task_id, refresh=refresh
        )
        if not task:
            raise NotFoundError("Task", task_id)
        return task

    async def _generate_weekly_tasks(
        self, session: AsyncSession, program: ProgramEntity, week: int
    ) -> list[TaskEntity]:
        due_date = program.started_at + timedelta(days=DAYS_PER_PROGRAM_WEEK * week)
        tasks = [
            TaskEntity(
                mentorship_id=program.mentorship_id,
                program_id=program.program_id,
                week=week,
                title=title.format(week=week),
                description=description.format(week=week),
                type=task_type,
                status=TaskStatus.PENDING,
                is_generated=True,
                due_date=due_date,
            )
            for task_type, title, description in WEEKLY_TASK_TEMPLATES
        ]
        return await self.task_repository.insert_tasks(session=session, entities=tasks)

    async def build_program(
        self, session: AsyncSession, mentorship, started_at: datetime
    ) -> tuple[ProgramEntity, list[TaskEntity]]:
        """
        Stage a week-1 program and its generated tasks for a mentorship.

        Does not commit.

        Raises:
            ConflictError: If the mentorship already has a program for its cycle.
        """
        program = ProgramEntity(
            mentorship_id=mentorship.mentorship_id,
            cycle_id=mentorship.cycle_id,
            week=1,
            status=ProgramStatus.ACTIVE,
            started_at=started_at,
        )
        try:
            program = await self.program_repository.insert_program(
                session=session, entity=program
            )
        except IntegrityError as e:
            raise ConflictError(
                f"Mentorship {mentorship.mentorship_id} already has a program."
            ) from e

        tasks = await self._generate_weekly_tasks(session, program, week=1)
        self.logger.info(
            "[ProgramService] program %s created for mentorship %s with %d task(s).",
            program.program_id,
            mentorship.mentorship_id,
            len(tasks),
        )
        return program, tasks

    async def close_programs(
        self, session: AsyncSession, mentorship_id: int, completed_at: datetime
    ) -> int:
        """
        Complete every active program of a mentorship. Does not commit.

        Returns:
            int: Number of programs closed.
        """
        programs = await self.program_repository.get_programs_by_mentorship_ids(
            session=session,
            mentorship_ids=[mentorship_id],
            status=ProgramStatus.ACTIVE,
        )
        closed = 0
        for program in programs:
            if await self.program_repository.update_status(
                session=session,
                program_id=program.program_id,
                sources=source_statuses(PROGRAM_TRANSITIONS, ProgramStatus.COMPLETED),
                target=ProgramStatus.COMPLETED,
                completed_at=completed_at,
            ):
                closed += 1
        return closed

    async def has_program(self, session: AsyncSession, mentorship_id: int) -> bool:
        programs = await self.program_repository.get_programs_by_mentorship_ids(
            session=session, mentorship_ids=[mentorship_id]
        )
        return bool(programs)

    async def create_program(
        self, session: AsyncSession, mentorship_id: int, cycle_id: int
    ) -> ProgramDto:
        """
        Open the week-1 program of a mentorship.

        Args:
            session (AsyncSession): Active database async session.
            mentorship_id (int): Owning mentorship.
            cycle_id (int): Cycle of the mentorship.

        Returns:
            ProgramDto: The created program.

        Raises:
            NotFoundError: Unknown mentorship.
            PreconditionFailedError: The mentorship is finished or belongs to
                another cycle.
            DuplicateError: The mentorship already has a program.
        """
        mentorship = await self._get_mentorship(session, mentorship_id)
        if is_terminal(MENTORSHIP_TRANSITIONS, mentorship.status):
            raise PreconditionFailedError(
                f"Mentorship {mentorship_id} is {mentorship.status.value}; "
                "programs can only be opened for live mentorships."
            )
        if mentorship.cycle_id != cycle_id:
            raise PreconditionFailedError(
                f"Mentorship {mentorship_id} does not belong to cycle {cycle_id}."
            )
        if await self.has_program(session, mentorship_id):
            raise DuplicateError(f"Mentorship {mentorship_id} already has a program.")

        program, tasks = await self.build_program(
            session, mentorship, datetime.now(timezone.utc)
        )
        await session.commit()

        await self.notification_publisher.publish(
            notification_messages.tasks_assigned(mentorship, week=1, task_count=len(tasks))
        )
        return ProgramDto.model_validate(program)

    async def snapshot_progress(
        self, session: AsyncSession, mentorship_id: int, program_id: int, week: int
    ) -> ProgressEntity:
        """
        Recompute and upsert the progress row of one (mentorship, week).

        Does not commit. The result depends only on the stored tasks and on the
        evaluations submitted before the week ended, so repeated calls write
        identical values and later evaluations never rewrite a past week.
        """
        program = await self._get_program(session, program_id)
        week_ends_at = program.started_at + timedelta(days=DAYS_PER_PROGRAM_WEEK * week)

        completed, total = await self.task_repository.count_tasks(
            session=session, mentorship_id=mentorship_id, week=week
        )
        engagement = round(100 * completed / total, 2) if total else 0.0
        skill_improvement = (
            await self.evaluation_repository.get_average_skill_improvement(
                session=session,
                mentorship_id=mentorship_id,
                submitted_before=week_ends_at,
            )
        )
        if skill_improvement is not None:
            skill_improvement = round(skill_improvement, 2)

        try:
            return await self.progress_repository.upsert_progress(
                session=session,
                entity=ProgressEntity(
                    mentorship_id=mentorship_id,
                    program_id=program_id,
                    week=week,
                    tasks_completed=completed,
                    total_tasks=total,
                    engagement_score=engagement,
                    skill_improvement=skill_improvement,
                ),
            )
        except IntegrityError as e:
            raise ConflictError(
                f"Progress of mentorship {mentorship_id} week {week} was written concurrently."
            ) from e

    async def advance_week(self, session: AsyncSession, program_id: int) -> ProgramDto:
        """
        Move an active program to its next week.

        The finished week's progress is snapshotted and the new week's tasks are
        generated in the same unit. Advancing a completed program is a no-op that
        returns it unchanged.

        Raises:
            NotFoundError: Unknown program.
        """
        program = await self._get_program(session, program_id)
        if not await self.program_repository.advance_week(
            session=session, program_id=program_id
        ):
            program = await self._get_program(session, program_id, refresh=True)
            self.logger.info(
                "[ProgramService] program %s is %s; advance_week ignored.",
                program_id,
                program.status.value,
            )
            return ProgramDto.model_validate(program)

        program = await self._get_program(session, program_id, refresh=True)
        finished_week = program.week - 1
        await self.snapshot_progress(
            session, program.mentorship_id, program.program_id, finished_week
        )
        tasks = await self._generate_weekly_tasks(session, program, week=program.week)
        mentorship = await self._get_mentorship(session, program.mentorship_id)
        await session.commit()

        self.logger.info(
            "[ProgramService] program %s advanced to week %s.", program_id, program.week
        )
        await self.notification_publisher.publish(
            notification_messages.tasks_assigned(
                mentorship, week=program.week, task_count=len(tasks)
            )
        )
        return ProgramDto.model_validate(program)

    async def complete_program(self, session: AsyncSession, program_id: int) -> ProgramDto:
        """
        Close an active program.

        Raises:
            NotFoundError: Unknown program.
            PreconditionFailedError: The program is already completed.
            ConflictError: A concurrent request completed it first.
        """
        program = await self._get_program(session, program_id)
        ensure_transition(
            PROGRAM_TRANSITIONS, program.status, ProgramStatus.COMPLETED, "Program"
        )
        if not await self.program_repository.update_status(
            session=session,
            program_id=program_id,
            sources=source_statuses(PROGRAM_TRANSITIONS, ProgramStatus.COMPLETED),
            target=ProgramStatus.COMPLETED,
            completed_at=datetime.now(timezone.utc),
        ):
            raise ConflictError(f"Program {program_id} was completed concurrently.")

        await self.snapshot_progress(
            session, program.mentorship_id, program.program_id, program.week
        )
        await session.commit()

        program = await self._get_program(session, program_id, refresh=True)
        return ProgramDto.model_validate(program)

    async def create_task(
        self, session: AsyncSession, program_id: int, task_data: TaskCreateDto
    ) -> TaskDto:
        """Add a custom task to an active program."""
        program = await self._get_program(session, program_id)
        if program.status != ProgramStatus.ACTIVE:
            raise PreconditionFailedError(
                f"Program {program_id} is completed; tasks can no longer be added."
            )

        (task,) = await self.task_repository.insert_tasks(
            session=session,
            entities=[
                TaskEntity(
                    mentorship_id=program.mentorship_id,
                    program_id=program.program_id,
                    week=task_data.week,
                    title=task_data.title,
                    description=task_data.description,
                    type=task_data.type,
                    status=TaskStatus.PENDING,
                    is_generated=False,
                    due_date=task_data.due_date,
                )
            ],
        )
        await session.commit()

        return TaskDto.model_validate(task)

    async def start_task(self, session: AsyncSession, task_id: int) -> TaskDto:
        """
        Mark a pending task as in progress. A task already in progress is returned
        unchanged.

        Raises:
            NotFoundError: Unknown task.
            PreconditionFailedError: The task is completed.
        """
        task = await self._get_task(session, task_id)
        if task.status == TaskStatus.IN_PROGRESS:
            return TaskDto.model_validate(task)
        ensure_transition(TASK_TRANSITIONS, task.status, TaskStatus.IN_PROGRESS, "Task")

        if not await self.task_repository.update_status(
            session=session,
            task_id=task_id,
            sources=source_statuses(TASK_TRANSITIONS, TaskStatus.IN_PROGRESS),
            target=TaskStatus.IN_PROGRESS,
        ):
            raise ConflictError(f"Task {task_id} changed status concurrently.")
        await session.commit()

        task = await self._get_task(session, task_id, refresh=True)
        return TaskDto.model_validate(task)

    async def complete_task(
        self, session: AsyncSession, task_id: int, feedback: str | None = None
    ) -> TaskDto:
        """
        Complete a task and refresh the progress snapshot of its week.

        Completing an already completed task is a no-op: `completed_at` keeps its
        first value and the feedback is not overwritten.

        Raises:
            NotFoundError: Unknown task.
        """
        task = await self._get_task(session, task_id)
        if task.status == TaskStatus.COMPLETED:
            return TaskDto.model_validate(task)

        values = {"completed_at": datetime.now(timezone.utc)}
        if feedback is not None:
            values["mentor_feedback"] = feedback
        if not await self.task_repository.update_status(
            session=session,
            task_id=task_id,
            sources=source_statuses(TASK_TRANSITIONS, TaskStatus.COMPLETED),
            target=TaskStatus.COMPLETED,
            **values,
        ):
            # Lost the race to another completion; the outcome is the same.
            task = await self._get_task(session, task_id, refresh=True)
            return TaskDto.model_validate(task)

        await self.snapshot_progress(
            session, task.mentorship_id, task.program_id, task.week
        )
        await session.commit()

        task = await self._get_task(session, task_id, refresh=True)
        return TaskDto.model_validate(task)

    async def recompute_progress(
        self, session: AsyncSession, mentorship_id: int, week: int
    ) -> ProgressDto:
        """
        Recompute the progress snapshot of one week of a mentorship.

        Safe to call any number of times: the row for that week is replaced, never
        accumulated.

        Raises:
            ValueError: `week` is smaller than 1.
            NotFoundError: Unknown mentorship.
            PreconditionFailedError: The mentorship has no program.
        """
        if week < 1:
            raise ValueError("week must be >= 1")
        await self._get_mentorship(session, mentorship_id)
        programs = await self.program_repository.get_programs_by_mentorship_ids(
            session=session, mentorship_ids=[mentorship_id]
        )
        if not programs:
            raise PreconditionFailedError(f"Mentorship {mentorship_id} has no program.")

        progress = await self.snapshot_progress(
            session, mentorship_id, programs[-1].program_id, week
        )
        await session.commit()

        return ProgressDto.model_validate(progress)

    async def list_tasks(
        self, session: AsyncSession, mentorship_id: int, week: int | None = None
    ) -> list[TaskDto]:
        await self._get_mentorship(session, mentorship_id)
        tasks = await self.task_repository.get_tasks(
            session=session, mentorship_id=mentorship_id, week=week
        )
        return [TaskDto.model_validate(task) for task in tasks]

    async def list_progress(
        self, session: AsyncSession, mentorship_id: int
    ) -> list[ProgressDto]:
        await self._get_mentorship(session, mentorship_id)
        snapshots = await self.progress_repository.get_progress_by_mentorship(
            session=session, mentorship_id=mentorship_id
        )
        return [ProgressDto.model_validate(snapshot) for snapshot in snapshots]
