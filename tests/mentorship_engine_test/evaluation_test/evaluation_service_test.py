from unittest.mock import AsyncMock, MagicMock

from mentorship_engine.common.mentorship_enums import EvaluationType
from mentorship_engine.common.mentorship_errors import (
    DuplicateError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.dto.evaluation_create_dto import EvaluationCreateDto
from tests.mentorship_engine_test.repository_test.base_repository_test_lib import (
    BaseRepositoryTestLib,
    build_services,
    make_mentee,
    make_mentor,
)


class TestEvaluationService(BaseRepositoryTestLib):
    async def asyncSetUp(self):
        await super().asyncSetUp()

        mock_publisher = MagicMock()
        mock_publisher.publish = AsyncMock(return_value=0)
        self.services = build_services(MagicMock(), mock_publisher)
        self.service = self.services.evaluation

        cycle = await self.create_cycle()
        await self.insert_entities([make_mentor(1), make_mentee(10)])
        mentorship = await self.services.assignment.assign(
            self.session, cycle.cycle_id, 1, 10
        )
        self.mentorship_id = mentorship.mentorship_id

    @staticmethod
    def _final(**ratings):
        return EvaluationCreateDto(type=EvaluationType.FINAL, **ratings)

    async def test_submit_evaluation(self):
        """Test the evaluation is stored against the current program."""
        evaluation = await self.service.submit_evaluation(
            self.session,
            self.mentorship_id,
            1,
            self._final(engagement_rating=4, feedback="Steady progress"),
        )

        self.assertTrue(evaluation.is_mentor)
        self.assertIsNotNone(evaluation.program_id)
        self.assertEqual(evaluation.engagement_rating, 4)

        evaluations = await self.service.list_evaluations(self.session, self.mentorship_id)
        self.assertEqual([e.evaluator_id for e in evaluations], [1])

    async def test_duplicate_submission(self):
        """Test a participant submits each checkpoint once."""
        await self.service.submit_evaluation(
            self.session, self.mentorship_id, 10, self._final(satisfaction_rating=5)
        )

        with self.assertRaises(DuplicateError):
            await self.service.submit_evaluation(
                self.session, self.mentorship_id, 10, self._final(satisfaction_rating=3)
            )
        other = await self.service.submit_evaluation(
            self.session,
            self.mentorship_id,
            10,
            EvaluationCreateDto(type=EvaluationType.MID_PROGRAM, satisfaction_rating=3),
        )
        self.assertFalse(other.is_mentor)

    async def test_outsider_and_cancelled(self):
        """Test outsiders and cancelled mentorships cannot be evaluated."""
        with self.assertRaises(PreconditionFailedError):
            await self.service.submit_evaluation(
                self.session, self.mentorship_id, 99, self._final()
            )

        await self.services.lifecycle.cancel(self.session, self.mentorship_id, "Ended early")
        with self.assertRaises(PreconditionFailedError):
            await self.service.submit_evaluation(
                self.session, self.mentorship_id, 1, self._final()
            )

    async def test_unknown_mentorship(self):
        """Test evaluating an unknown mentorship raises NotFoundError."""
        with self.assertRaises(NotFoundError):
            await self.service.submit_evaluation(self.session, 999, 1, self._final())
