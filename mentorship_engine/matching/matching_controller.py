from http import HTTPStatus

from fastapi import APIRouter, Query

from mentorship_engine.common.api_endpoints import (
    ASSIGNMENTS_ENDPOINT,
    AVAILABILITY_ENDPOINT,
    CYCLE_MATCHING_ENDPOINT,
    MENTEE_SUGGESTIONS_ENDPOINT,
)
from mentorship_engine.common.constants import DEFAULT_MIN_MATCH_SCORE, MAX_MATCH_SCORE
from mentorship_engine.common.fast_api_response_wrapper import api_error, api_response
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.match_request_dto import (
    AssignmentCreateDto,
    MatchingRequestDto,
)
from mentorship_engine.dto.user_context_dto import UserContextDto
from mentorship_engine.utils.permission_decorators import authenticate


class MatchingController:
    """
    Endpoints that create or propose matches.

    Automated runs and manual assignment are administrative; a mentee may also
    ask for a ranked list of suitable mentors.
    """

    def __init__(self, matching_service, assignment_service, database):
        """
        Initialize the MatchingController with its dependencies and register routes.

        Args:
            matching_service (MatchingService): Automated matching runs.
            assignment_service (AssignmentService): Manual mentor/mentee assignment.
            database (Database): Database access object providing async session management.
        """
        self.matching_service = matching_service
        self.assignment_service = assignment_service
        self.database = database

        self.router = APIRouter(tags=["matching"])

        admin = authenticate(roles=[UserRole.ADMIN])
        self.router.add_api_route(
            CYCLE_MATCHING_ENDPOINT,
            endpoint=admin(self.run_matching),
            methods=["POST"],
            response_model=None,
        )
        self.router.add_api_route(
            AVAILABILITY_ENDPOINT,
            endpoint=admin(self.get_availability),
            methods=["GET"],
            response_model=None,
        )
        self.router.add_api_route(
            ASSIGNMENTS_ENDPOINT,
            endpoint=admin(self.create_assignment),
            methods=["POST"],
            response_model=None,
        )
        self.router.add_api_route(
            MENTEE_SUGGESTIONS_ENDPOINT,
            endpoint=authenticate()(self.suggest_mentors),
            methods=["GET"],
            response_model=None,
        )

    async def run_matching(self, cycle_id: int, body: MatchingRequestDto | None = None):
        """
        Run the automated matching engine over a cycle.

        The body is optional; by default matches scoring 70 or more are proposed
        and left pending for both sides to approve.

        Returns:
            API response with one entry per proposed pair, flagged `isNew` when
            the run created it.
        """
        body = body or MatchingRequestDto()
        async with self.database.session() as session:
            results = await self.matching_service.run_automated_matching(
                session,
                cycle_id,
                min_score=body.min_score,
                auto_approve=body.auto_approve,
            )

        created = sum(1 for r in results if r.is_new)
        return api_response(
            message=f"Matching finished: {created} new match(es).",
            data=results,
        )

    async def get_availability(self, cycle_id: int | None = Query(None, alias="cycleId")):
        async with self.database.session() as session:
            availability = (
                await self.assignment_service.get_available_mentors_and_mentees(
                    session, cycle_id=cycle_id
                )
            )

        return api_response(
            message="Successfully fetched available mentors and mentees.",
            data=availability,
        )

    async def create_assignment(self, body: AssignmentCreateDto):
        async with self.database.session() as session:
            mentorship = await self.assignment_service.assign(
                session,
                body.cycle_id,
                body.mentor_id,
                body.mentee_id,
                goals=body.goals,
            )

        return api_response(
            message="Mentorship assigned.",
            data=mentorship,
            status_code=HTTPStatus.CREATED,
        )

    async def suggest_mentors(
        self,
        profile_user_id: int,
        current_user: UserContextDto,
        cycle_id: int | None = Query(None, alias="cycleId"),
        min_score: float = Query(
            DEFAULT_MIN_MATCH_SCORE, alias="minScore", ge=0, le=MAX_MATCH_SCORE
        ),
    ):
        """Ranked mentor suggestions for a mentee; the mentee or an administrator may ask."""
        if not (
            current_user.user_id == profile_user_id
            or current_user.has_role(UserRole.ADMIN)
        ):
            return api_error(
                message="Forbidden: users may only see their own suggestions",
                status_code=HTTPStatus.FORBIDDEN,
            )

        async with self.database.session() as session:
            suggestions = await self.matching_service.suggest_mentors(
                session, profile_user_id, cycle_id=cycle_id, min_score=min_score
            )

        return api_response(
            message=f"Found {len(suggestions)} suggested mentor(s).",
            data=suggestions,
        )
