from fastapi import APIRouter

from mentorship_engine.common.api_endpoints import ONBOARDING_NOTIFICATIONS_ENDPOINT
from mentorship_engine.common.fast_api_response_wrapper import api_response
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.onboarding_request_dto import OnboardingRequestDto
from mentorship_engine.utils.permission_decorators import authenticate


class NotificationController:
    def __init__(self, onboarding_service, database):
        """
        Initialize the NotificationController and register the onboarding route.

        Args:
            onboarding_service (OnboardingService): Sends onboarding instructions.
            database (Database): Database access object providing async session management.
        """
        self.onboarding_service = onboarding_service
        self.database = database

        self.router = APIRouter(tags=["notifications"])

        self.router.add_api_route(
            ONBOARDING_NOTIFICATIONS_ENDPOINT,
            endpoint=authenticate(roles=[UserRole.ADMIN])(self.send_onboarding),
            methods=["POST"],
            response_model=None,
        )

    async def send_onboarding(self, body: OnboardingRequestDto):
        """
        Queue onboarding notifications for mentors or mentees.

        With `cycleId` only the users interested in that cycle are notified;
        without it every profile of the role is.
        """
        async with self.database.session() as session:
            summary = await self.onboarding_service.send_onboarding_notifications(
                session, body.target_role, cycle_id=body.cycle_id
            )

        return api_response(
            message=f"Queued {summary['queued']} onboarding notification(s).",
            data=summary,
        )
