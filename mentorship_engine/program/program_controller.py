from http import HTTPStatus

from fastapi import APIRouter, Query

from mentorship_engine.common.api_endpoints import (
    MENTORSHIP_PROGRAMS_ENDPOINT,
    MENTORSHIP_PROGRESS_ENDPOINT,
    MENTORSHIP_TASKS_ENDPOINT,
    MENTORSHIP_WEEK_PROGRESS_ENDPOINT,
    PROGRAM_ADVANCE_ENDPOINT,
    PROGRAM_COMPLETE_ENDPOINT,
    PROGRAM_TASKS_ENDPOINT,
    TASK_COMPLETE_ENDPOINT,
    TASK_START_ENDPOINT,
)
from mentorship_engine.common.fast_api_response_wrapper import api_response
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.program_create_dto import ProgramCreateDto
from mentorship_engine.dto.task_create_dto import TaskCompleteDto, TaskCreateDto
from mentorship_engine.utils.permission_decorators import authenticate


class ProgramController:
    """FastAPI controller for weekly programs, their tasks and progress snapshots."""

    def __init__(self, program_service, database):
        """
        Initialize the ProgramController with its dependencies and register routes.

        Args:
            program_service (ProgramService): Program tracker logic.
            database (Database): Database access object providing async session management.
        """
        self.program_service = program_service
        self.database = database

        self.router = APIRouter(tags=["programs"])

        admin = authenticate(roles=[UserRole.ADMIN])
        member = authenticate(roles=[UserRole.ADMIN, UserRole.MENTORSHIP])
        routes = [
            (MENTORSHIP_PROGRAMS_ENDPOINT, admin(self.create_program), "POST"),
            (PROGRAM_ADVANCE_ENDPOINT, member(self.advance_week), "POST"),
            (PROGRAM_COMPLETE_ENDPOINT, admin(self.complete_program), "POST"),
            (PROGRAM_TASKS_ENDPOINT, member(self.create_task), "POST"),
            (MENTORSHIP_TASKS_ENDPOINT, authenticate()(self.list_tasks), "GET"),
            (TASK_START_ENDPOINT, authenticate()(self.start_task), "POST"),
            (TASK_COMPLETE_ENDPOINT, authenticate()(self.complete_task), "POST"),
            (MENTORSHIP_WEEK_PROGRESS_ENDPOINT, member(self.recompute_progress), "POST"),
            (MENTORSHIP_PROGRESS_ENDPOINT, authenticate()(self.list_progress), "GET"),
        ]
        for path, endpoint, method in routes:
            self.router.add_api_route(
                path, endpoint=endpoint, methods=[method], response_model=None
            )

    async def create_program(self, mentorship_id: int, body: ProgramCreateDto):
        """Open week 1 of a mentorship's program in the given cycle."""
        async with self.database.session() as session:
            program = await self.program_service.create_program(
                session, mentorship_id, body.cycle_id
            )

        return api_response(
            message="Program created.",
            data=program,
            status_code=HTTPStatus.CREATED,
        )

    async def advance_week(self, program_id: int):
        async with self.database.session() as session:
            program = await self.program_service.advance_week(session, program_id)

        return api_response(message=f"Program is at week {program.week}.", data=program)

    async def complete_program(self, program_id: int):
        async with self.database.session() as session:
            program = await self.program_service.complete_program(session, program_id)

        return api_response(message="Program completed.", data=program)

    async def create_task(self, program_id: int, body: TaskCreateDto):
        async with self.database.session() as session:
            task = await self.program_service.create_task(session, program_id, body)

        return api_response(
            message="Task created.", data=task, status_code=HTTPStatus.CREATED
        )

    async def list_tasks(self, mentorship_id: int, week: int | None = Query(None, ge=1)):
        async with self.database.session() as session:
            tasks = await self.program_service.list_tasks(
                session, mentorship_id, week=week
            )

        return api_response(message="Successfully fetched tasks.", data=tasks)

    async def start_task(self, task_id: int):
        async with self.database.session() as session:
            task = await self.program_service.start_task(session, task_id)

        return api_response(message="Task started.", data=task)

    async def complete_task(self, task_id: int, body: TaskCompleteDto | None = None):
        """Complete a task. Completing it again returns it unchanged."""
        feedback = body.feedback if body else None
        async with self.database.session() as session:
            task = await self.program_service.complete_task(
                session, task_id, feedback=feedback
            )

        return api_response(message="Task completed.", data=task)

    async def recompute_progress(self, mentorship_id: int, week: int):
        async with self.database.session() as session:
            progress = await self.program_service.recompute_progress(
                session, mentorship_id, week
            )

        return api_response(message="Progress updated.", data=progress)

    async def list_progress(self, mentorship_id: int):
        async with self.database.session() as session:
            progress = await self.program_service.list_progress(session, mentorship_id)

        return api_response(message="Successfully fetched progress.", data=progress)
