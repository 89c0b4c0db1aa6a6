from http import HTTPStatus

from fastapi import APIRouter

from mentorship_engine.common.api_endpoints import (
    MENTORSHIP_CERTIFICATE_ENDPOINT,
    MENTORSHIP_EVALUATIONS_ENDPOINT,
)
from mentorship_engine.common.fast_api_response_wrapper import api_response
from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.evaluation_create_dto import EvaluationCreateDto
from mentorship_engine.utils.permission_decorators import authenticate


class EvaluationController:
    """
    FastAPI controller for mentorship evaluations and completion certificates.

    Evaluations are always submitted as the calling user; certificates are
    issued by administrators.
    """

    def __init__(self, evaluation_service, certificate_service, database):
        self.evaluation_service = evaluation_service
        self.certificate_service = certificate_service
        self.database = database

        self.router = APIRouter(tags=["evaluations"])

        self.router.add_api_route(
            MENTORSHIP_EVALUATIONS_ENDPOINT,
            endpoint=authenticate()(self.submit_evaluation),
            methods=["POST"],
            response_model=None,
        )
        self.router.add_api_route(
            MENTORSHIP_EVALUATIONS_ENDPOINT,
            endpoint=authenticate()(self.list_evaluations),
            methods=["GET"],
            response_model=None,
        )
        self.router.add_api_route(
            MENTORSHIP_CERTIFICATE_ENDPOINT,
            endpoint=authenticate(roles=[UserRole.ADMIN])(self.issue_certificate),
            methods=["POST"],
            response_model=None,
        )
        self.router.add_api_route(
            MENTORSHIP_CERTIFICATE_ENDPOINT,
            endpoint=authenticate()(self.get_certificate),
            methods=["GET"],
            response_model=None,
        )

    async def submit_evaluation(
        self, mentorship_id: int, user_id: int, body: EvaluationCreateDto
    ):
        """
        Submit the caller's evaluation of a mentorship.

        Each participant may submit one evaluation per checkpoint (mid-program
        and final); ratings are integers from 1 to 5.
        """
        async with self.database.session() as session:
            evaluation = await self.evaluation_service.submit_evaluation(
                session, mentorship_id, user_id, body
            )

        return api_response(
            message="Evaluation submitted.",
            data=evaluation,
            status_code=HTTPStatus.CREATED,
        )

    async def list_evaluations(self, mentorship_id: int):
        async with self.database.session() as session:
            evaluations = await self.evaluation_service.list_evaluations(
                session, mentorship_id
            )

        return api_response(message="Successfully fetched evaluations.", data=evaluations)

    async def issue_certificate(self, mentorship_id: int):
        async with self.database.session() as session:
            certificate = await self.certificate_service.issue_certificate(
                session, mentorship_id
            )

        return api_response(
            message="Certificate issued.",
            data=certificate,
            status_code=HTTPStatus.CREATED,
        )

    async def get_certificate(self, mentorship_id: int):
        async with self.database.session() as session:
            certificate = await self.certificate_service.get_certificate(
                session, mentorship_id
            )

        return api_response(message="Successfully fetched certificate.", data=certificate)
