from http import HTTPStatus

from fastapi import APIRouter

from mentorship_engine.common.api_endpoints import (
    MENTEE_PROFILE_ENDPOINT,
    MENTOR_PROFILE_ENDPOINT,
    MENTOR_PROFILE_VERIFY_ENDPOINT,
)
from mentorship_engine.common.fast_api_response_wrapper import api_error, api_response
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.profile_create_dto import (
    MenteeProfileCreateDto,
    MentorProfileCreateDto,
)
from mentorship_engine.dto.user_context_dto import UserContextDto
from mentorship_engine.utils.permission_decorators import authenticate


def _forbidden():
    return api_error(
        message="Forbidden: users may only manage their own profile",
        status_code=HTTPStatus.FORBIDDEN,
    )


def _owns(current_user: UserContextDto, profile_user_id: int) -> bool:
    return (
        current_user.user_id == profile_user_id
        or current_user.has_role(UserRole.ADMIN)
    )


class ProfileController:
    """
    FastAPI controller exposing mentor and mentee profiles.

    Users read and write their own profiles; administrators may manage any
    profile and are the only ones who can verify a mentor.
    """

    def __init__(self, profile_registry_service, database):
        """
        Initialize the ProfileController with its dependencies and register routes.

        Args:
            profile_registry_service (ProfileRegistryService): Profile persistence logic.
            database (Database): Database access object providing async session management.
        """
        self.profile_registry_service = profile_registry_service
        self.database = database

        self.router = APIRouter(tags=["profiles"])

        routes = [
            (MENTOR_PROFILE_ENDPOINT, authenticate()(self.get_mentor_profile), "GET"),
            (MENTOR_PROFILE_ENDPOINT, authenticate()(self.upsert_mentor_profile), "PUT"),
            (MENTEE_PROFILE_ENDPOINT, authenticate()(self.get_mentee_profile), "GET"),
            (MENTEE_PROFILE_ENDPOINT, authenticate()(self.upsert_mentee_profile), "PUT"),
            (
                MENTOR_PROFILE_VERIFY_ENDPOINT,
                authenticate(roles=[UserRole.ADMIN])(self.verify_mentor),
                "POST",
            ),
        ]
        for path, endpoint, method in routes:
            self.router.add_api_route(
                path, endpoint=endpoint, methods=[method], response_model=None
            )

    async def get_mentor_profile(self, profile_user_id: int):
        async with self.database.session() as session:
            profile = await self.profile_registry_service.get_mentor_profile(
                session, profile_user_id
            )

        return api_response(message="Profile retrieved successfully", data=profile)

    async def upsert_mentor_profile(
        self,
        profile_user_id: int,
        current_user: UserContextDto,
        body: MentorProfileCreateDto,
    ):
        """
        Create or replace a mentor profile.

        Capacity counters are not part of the body; `maxMentees` cannot drop
        below the number of mentees the mentor currently holds.
        """
        if not _owns(current_user, profile_user_id):
            return _forbidden()

        async with self.database.session() as session:
            profile = await self.profile_registry_service.upsert_mentor_profile(
                session, profile_user_id, body
            )

        return api_response(message="Profile updated successfully", data=profile)

    async def get_mentee_profile(self, profile_user_id: int):
        async with self.database.session() as session:
            profile = await self.profile_registry_service.get_mentee_profile(
                session, profile_user_id
            )

        return api_response(message="Profile retrieved successfully", data=profile)

    async def upsert_mentee_profile(
        self,
        profile_user_id: int,
        current_user: UserContextDto,
        body: MenteeProfileCreateDto,
    ):
        if not _owns(current_user, profile_user_id):
            return _forbidden()

        async with self.database.session() as session:
            profile = await self.profile_registry_service.upsert_mentee_profile(
                session, profile_user_id, body
            )

        return api_response(message="Profile updated successfully", data=profile)

    async def verify_mentor(self, profile_user_id: int):
        async with self.database.session() as session:
            profile = await self.profile_registry_service.verify_mentor(
                session, profile_user_id
            )

        return api_response(message="Mentor verified.", data=profile)
