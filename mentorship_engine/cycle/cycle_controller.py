from http import HTTPStatus

from fastapi import APIRouter, Query

from mentorship_engine.common.api_endpoints import (
    CYCLE_COMPLETE_ENDPOINT,
    CYCLE_ENDPOINT,
    CYCLE_INTERESTS_ENDPOINT,
    CYCLE_LAUNCH_ENDPOINT,
    CYCLES_ENDPOINT,
)
from mentorship_engine.common.fast_api_response_wrapper import api_response
from mentorship_engine.common.mentorship_enums import ParticipantRole
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.cycle_create_dto import CycleCreateDto
from mentorship_engine.dto.interest_dto import InterestCreateDto
from mentorship_engine.utils.permission_decorators import authenticate


class CycleController:
    """
    FastAPI controller for mentorship cycles and the interests declared in them.

    Cycle administration requires the admin role; any authenticated user may
    read cycles and manage their own interest.
    """

    def __init__(self, cycle_service, interest_service, database):
        """
        Initialize the CycleController with its dependencies and register routes.

        Args:
            cycle_service (CycleService): Cycle lifecycle logic.
            interest_service (InterestService): Interest registry logic.
            database (Database): Database access object providing async session management.
        """
        if not cycle_service or not interest_service:
            raise ValueError("CycleService and InterestService instances are required.")

        self.cycle_service = cycle_service
        self.interest_service = interest_service
        self.database = database

        self.router = APIRouter(tags=["cycles"])

        admin = authenticate(roles=[UserRole.ADMIN])
        self.router.add_api_route(
            CYCLES_ENDPOINT,
            endpoint=admin(self.create_cycle),
            methods=["POST"],
            response_model=None,
        )
        self.router.add_api_route(
            CYCLES_ENDPOINT,
            endpoint=authenticate()(self.list_cycles),
            methods=["GET"],
            response_model=None,
        )
        self.router.add_api_route(
            CYCLE_ENDPOINT,
            endpoint=authenticate()(self.get_cycle),
            methods=["GET"],
            response_model=None,
        )
        self.router.add_api_route(
            CYCLE_ENDPOINT,
            endpoint=admin(self.delete_cycle),
            methods=["DELETE"],
            response_model=None,
        )
        self.router.add_api_route(
            CYCLE_LAUNCH_ENDPOINT,
            endpoint=admin(self.launch_cycle),
            methods=["POST"],
            response_model=None,
        )
        self.router.add_api_route(
            CYCLE_COMPLETE_ENDPOINT,
            endpoint=admin(self.complete_cycle),
            methods=["POST"],
            response_model=None,
        )
        self.router.add_api_route(
            CYCLE_INTERESTS_ENDPOINT,
            endpoint=authenticate()(self.declare_interest),
            methods=["POST"],
            response_model=None,
        )
        self.router.add_api_route(
            CYCLE_INTERESTS_ENDPOINT,
            endpoint=authenticate()(self.withdraw_interest),
            methods=["DELETE"],
            response_model=None,
        )
        self.router.add_api_route(
            CYCLE_INTERESTS_ENDPOINT,
            endpoint=admin(self.list_interests),
            methods=["GET"],
            response_model=None,
        )

    async def create_cycle(self, body: CycleCreateDto):
        async with self.database.session() as session:
            cycle = await self.cycle_service.create_cycle(session, body)

        return api_response(
            message="Cycle created successfully.",
            data=cycle,
            status_code=HTTPStatus.CREATED,
        )

    async def list_cycles(self):
        """List every cycle, newest start date first."""
        async with self.database.session() as session:
            cycles = await self.cycle_service.list_cycles(session)

        return api_response(message="Successfully fetched all cycles.", data=cycles)

    async def get_cycle(self, cycle_id: int):
        async with self.database.session() as session:
            cycle = await self.cycle_service.get_cycle(session, cycle_id)

        return api_response(message="Successfully fetched cycle.", data=cycle)

    async def delete_cycle(self, cycle_id: int):
        async with self.database.session() as session:
            await self.cycle_service.delete_cycle(session, cycle_id)

        return api_response(message=f"Cycle {cycle_id} deleted.")

    async def launch_cycle(self, cycle_id: int):
        """Open an upcoming cycle and notify every interested user."""
        async with self.database.session() as session:
            cycle = await self.cycle_service.launch(session, cycle_id)

        return api_response(message="Cycle launched.", data=cycle)

    async def complete_cycle(self, cycle_id: int):
        async with self.database.session() as session:
            cycle = await self.cycle_service.complete_cycle(session, cycle_id)

        return api_response(message="Cycle completed.", data=cycle)

    async def declare_interest(self, cycle_id: int, user_id: int, body: InterestCreateDto):
        """
        Declare the caller's interest in a cycle as mentor or mentee.

        Declaring again after a withdrawal re-activates the same interest.
        """
        async with self.database.session() as session:
            interest = await self.interest_service.declare_interest(
                session, cycle_id, user_id, body
            )

        return api_response(message="Interest recorded.", data=interest)

    async def withdraw_interest(self, cycle_id: int, user_id: int):
        async with self.database.session() as session:
            interest = await self.interest_service.withdraw_interest(
                session, cycle_id, user_id
            )

        return api_response(message="Interest withdrawn.", data=interest)

    async def list_interests(
        self, cycle_id: int, role: ParticipantRole | None = Query(None)
    ):
        async with self.database.session() as session:
            interests = await self.interest_service.list_interests(
                session, cycle_id, role=role
            )

        return api_response(message="Successfully fetched interests.", data=interests)
