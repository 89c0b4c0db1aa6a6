from fastapi import APIRouter, Query

from mentorship_engine.common.api_endpoints import ANALYTICS_ENDPOINT, PROGRESS_ENDPOINT
from mentorship_engine.common.fast_api_response_wrapper import api_response
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.utils.permission_decorators import authenticate


class AnalyticsController:
    def __init__(self, analytics_service, database):
        """
        Initialize the AnalyticsController and register its admin-only read routes.

        Args:
            analytics_service (AnalyticsService): Aggregated reads.
            database (Database): Database access object providing async session management.
        """
        self.analytics_service = analytics_service
        self.database = database

        self.router = APIRouter(tags=["analytics"])

        admin = authenticate(roles=[UserRole.ADMIN])
        self.router.add_api_route(
            PROGRESS_ENDPOINT,
            endpoint=admin(self.get_mentorship_progress),
            methods=["GET"],
            response_model=None,
        )
        self.router.add_api_route(
            ANALYTICS_ENDPOINT,
            endpoint=admin(self.get_mentorship_analytics),
            methods=["GET"],
            response_model=None,
        )

    async def get_mentorship_progress(
        self, cycle_id: int | None = Query(None, alias="cycleId")
    ):
        async with self.database.session() as session:
            progress = await self.analytics_service.get_mentorship_progress(
                session, cycle_id=cycle_id
            )

        return api_response(
            message="Successfully fetched mentorship progress.", data=progress
        )

    async def get_mentorship_analytics(
        self, cycle_id: int | None = Query(None, alias="cycleId")
    ):
        async with self.database.session() as session:
            analytics = await self.analytics_service.get_mentorship_analytics(
                session, cycle_id=cycle_id
            )

        return api_response(
            message="Successfully fetched mentorship analytics.", data=analytics
        )
