from fastapi import APIRouter, Query

from mentorship_engine.common.api_endpoints import (
    MATCH_APPROVE_ENDPOINT,
    MATCH_REJECT_ENDPOINT,
    MATCHES_APPROVE_ENDPOINT,
    MATCHES_ENDPOINT,
    MENTORSHIP_CANCEL_ENDPOINT,
    MENTORSHIP_COMPLETE_ENDPOINT,
    MENTORSHIP_ENDPOINT,
    MENTORSHIP_SESSIONS_ENDPOINT,
    MENTORSHIP_START_ENDPOINT,
    MENTORSHIPS_ENDPOINT,
)
from mentorship_engine.common.fast_api_response_wrapper import api_response
from mentorship_engine.common.mentorship_enums import MatchStatus, MentorshipStatus
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.match_request_dto import ApproveMatchesRequestDto
from mentorship_engine.dto.mentorship_dto import MentorshipCancelDto
from mentorship_engine.dto.user_context_dto import UserContextDto
from mentorship_engine.utils.permission_decorators import authenticate


def _actor_of(current_user: UserContextDto) -> int | None:
    """Administrators act on behalf of both sides of a match."""
    return None if current_user.has_role(UserRole.ADMIN) else current_user.user_id


class MentorshipController:
    """
    FastAPI controller for match approval and the mentorship lifecycle.

    Participants approve or reject their own matches; lifecycle transitions are
    open to the mentorship role and administrators.
    """

    def __init__(self, match_approval_service, mentorship_lifecycle_service, database):
        """
        Initialize the MentorshipController with its dependencies and register routes.

        Args:
            match_approval_service (MatchApprovalService): Two-sided approval workflow.
            mentorship_lifecycle_service (MentorshipLifecycleService): Status transitions.
            database (Database): Database access object providing async session management.
        """
        self.match_approval_service = match_approval_service
        self.mentorship_lifecycle_service = mentorship_lifecycle_service
        self.database = database

        self.router = APIRouter(tags=["mentorships"])

        admin = authenticate(roles=[UserRole.ADMIN])
        member = authenticate(roles=[UserRole.ADMIN, UserRole.MENTORSHIP])
        routes = [
            (MATCHES_ENDPOINT, admin(self.list_matches), "GET"),
            (MATCHES_APPROVE_ENDPOINT, admin(self.approve_matches), "POST"),
            (MATCH_APPROVE_ENDPOINT, authenticate()(self.approve_match), "POST"),
            (MATCH_REJECT_ENDPOINT, authenticate()(self.reject_match), "POST"),
            (MENTORSHIPS_ENDPOINT, authenticate()(self.list_mentorships), "GET"),
            (MENTORSHIP_ENDPOINT, authenticate()(self.get_mentorship), "GET"),
            (MENTORSHIP_START_ENDPOINT, member(self.start_mentorship), "POST"),
            (MENTORSHIP_SESSIONS_ENDPOINT, member(self.record_session), "POST"),
            (MENTORSHIP_COMPLETE_ENDPOINT, member(self.complete_mentorship), "POST"),
            (MENTORSHIP_CANCEL_ENDPOINT, member(self.cancel_mentorship), "POST"),
        ]
        for path, endpoint, method in routes:
            self.router.add_api_route(
                path, endpoint=endpoint, methods=[method], response_model=None
            )

    async def list_matches(
        self,
        cycle_id: int | None = Query(None, alias="cycleId"),
        status: MatchStatus | None = Query(None),
    ):
        async with self.database.session() as session:
            matches = await self.match_approval_service.list_matches(
                session, cycle_id=cycle_id, status=status
            )

        return api_response(message="Successfully fetched matches.", data=matches)

    async def approve_matches(self, body: ApproveMatchesRequestDto):
        """
        Approve several matches on behalf of both sides.

        Returns:
            API response with one result per match id; failures are reported per
            id and never abort the batch.
        """
        async with self.database.session() as session:
            results = await self.match_approval_service.approve_many(
                session, body.match_ids
            )

        succeeded = sum(1 for r in results if r.success)
        return api_response(
            message=f"Approved {succeeded} of {len(results)} match(es).",
            data=results,
        )

    async def approve_match(self, match_id: int, current_user: UserContextDto):
        async with self.database.session() as session:
            result = await self.match_approval_service.approve(
                session, match_id, _actor_of(current_user)
            )

        return api_response(message="Match approval recorded.", data=result)

    async def reject_match(self, match_id: int, current_user: UserContextDto):
        async with self.database.session() as session:
            match = await self.match_approval_service.reject(
                session, match_id, _actor_of(current_user)
            )

        return api_response(message="Match rejected.", data=match)

    async def list_mentorships(
        self,
        current_user: UserContextDto,
        cycle_id: int | None = Query(None, alias="cycleId"),
        status: MentorshipStatus | None = Query(None),
        mentor_id: int | None = Query(None, alias="mentorId"),
        mentee_id: int | None = Query(None, alias="menteeId"),
    ):
        """
        List mentorships filtered by cycle, status, mentor and mentee.

        Administrators see every mentorship; other users only the ones they take
        part in.
        """
        async with self.database.session() as session:
            mentorships = await self.mentorship_lifecycle_service.list_mentorships(
                session,
                cycle_id=cycle_id,
                status=status,
                mentor_id=mentor_id,
                mentee_id=mentee_id,
                participant_id=_actor_of(current_user),
            )

        return api_response(
            message="Successfully fetched mentorships.", data=mentorships
        )

    async def get_mentorship(self, mentorship_id: int):
        async with self.database.session() as session:
            mentorship = await self.mentorship_lifecycle_service.get_mentorship(
                session, mentorship_id
            )

        return api_response(message="Successfully fetched mentorship.", data=mentorship)

    async def start_mentorship(self, mentorship_id: int):
        async with self.database.session() as session:
            mentorship = await self.mentorship_lifecycle_service.start(
                session, mentorship_id
            )

        return api_response(message="Mentorship started.", data=mentorship)

    async def record_session(self, mentorship_id: int):
        async with self.database.session() as session:
            mentorship = await self.mentorship_lifecycle_service.record_session(
                session, mentorship_id
            )

        return api_response(message="Session recorded.", data=mentorship)

    async def complete_mentorship(self, mentorship_id: int):
        async with self.database.session() as session:
            mentorship = await self.mentorship_lifecycle_service.complete(
                session, mentorship_id
            )

        return api_response(message="Mentorship completed.", data=mentorship)

    async def cancel_mentorship(self, mentorship_id: int, body: MentorshipCancelDto):
        async with self.database.session() as session:
            mentorship = await self.mentorship_lifecycle_service.cancel(
                session, mentorship_id, body.reason
            )

        return api_response(message="Mentorship cancelled.", data=mentorship)
