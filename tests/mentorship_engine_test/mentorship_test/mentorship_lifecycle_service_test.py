from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import select

from mentorship_engine.common.mentorship_enums import (
    EvaluationType,
    MatchStatus,
    MentorshipStatus,
    ProgramStatus,
    ScoreSource,
)
from mentorship_engine.common.mentorship_errors import (
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.dto.evaluation_create_dto import EvaluationCreateDto
from mentorship_engine.entity.match_entity import MatchEntity
from mentorship_engine.entity.program_entity import ProgramEntity
from tests.mentorship_engine_test.repository_test.base_repository_test_lib import (
    BaseRepositoryTestLib,
    build_services,
    make_mentee,
    make_mentor,
)


class TestMentorshipLifecycleService(BaseRepositoryTestLib):
    async def asyncSetUp(self):
        await super().asyncSetUp()

        self.mock_logger = MagicMock()
        self.mock_publisher = MagicMock()
        self.mock_publisher.publish = AsyncMock(return_value=0)
        self.services = build_services(self.mock_logger, self.mock_publisher)
        self.service = self.services.lifecycle

        self.cycle = await self.create_cycle()
        match = MatchEntity(
            cycle_id=self.cycle.cycle_id,
            mentor_id=1,
            mentee_id=10,
            status=MatchStatus.PENDING,
        )
        await self.insert_entities(
            [make_mentor(1, current_mentees=1, total_mentees=1), make_mentee(10), match]
        )
        result = await self.services.approval.approve(self.session, match.match_id, None)
        self.mentorship_id = result.mentorship_id

    async def _mentor(self):
        return await self.services.mentor_profile_repository.get_by_user_id(
            self.session, 1, refresh=True
        )

    async def _evaluate(self, evaluator_id, evaluation_type, rating):
        await self.services.evaluation.submit_evaluation(
            self.session,
            self.mentorship_id,
            evaluator_id,
            EvaluationCreateDto(
                type=evaluation_type,
                engagement_rating=rating,
                satisfaction_rating=rating,
            ),
        )

    async def test_complete_requires_active(self):
        """Test completing a pending mentorship is refused."""
        with self.assertRaises(PreconditionFailedError):
            await self.service.complete(self.session, self.mentorship_id)

    async def test_start_opens_week_one_program(self):
        """Test starting a pending mentorship activates it and opens its program."""
        mentorship = await self.service.start(self.session, self.mentorship_id)

        self.assertEqual(mentorship.status, MentorshipStatus.ACTIVE)
        self.assertIsNotNone(mentorship.started_at)
        program = (await self.session.execute(select(ProgramEntity))).scalar_one()
        self.assertEqual(program.week, 1)

        with self.assertRaises(PreconditionFailedError):
            await self.service.start(self.session, self.mentorship_id)

    async def test_complete_with_final_evaluations(self):
        """Test final ratings of five from both sides give scores of five."""
        await self.service.start(self.session, self.mentorship_id)
        await self._evaluate(1, EvaluationType.FINAL, 5)
        await self._evaluate(10, EvaluationType.FINAL, 5)

        mentorship = await self.service.complete(self.session, self.mentorship_id)

        self.assertEqual(mentorship.status, MentorshipStatus.COMPLETED)
        self.assertEqual(mentorship.engagement_score, 5)
        self.assertEqual(mentorship.satisfaction_score, 5)
        self.assertEqual(mentorship.score_source, ScoreSource.FINAL)
        self.assertIsNotNone(mentorship.completed_at)

        mentor = await self._mentor()
        self.assertEqual(mentor.current_mentees, 0)
        self.assertEqual(mentor.total_mentees, 1)
        program = (
            await self.session.execute(
                select(ProgramEntity).execution_options(populate_existing=True)
            )
        ).scalar_one()
        self.assertEqual(program.status, ProgramStatus.COMPLETED)

    async def test_complete_falls_back_to_mid_program(self):
        """Test mid-program ratings are used when no final evaluation exists."""
        await self.service.start(self.session, self.mentorship_id)
        await self._evaluate(1, EvaluationType.MID_PROGRAM, 4)
        await self._evaluate(10, EvaluationType.MID_PROGRAM, 3)

        mentorship = await self.service.complete(self.session, self.mentorship_id)

        self.assertEqual(mentorship.engagement_score, 3.5)
        self.assertEqual(mentorship.score_source, ScoreSource.MID_PROGRAM)

    async def test_complete_falls_back_per_unrated_score(self):
        """Test a final evaluation without ratings does not erase mid-program ones."""
        await self.service.start(self.session, self.mentorship_id)
        await self._evaluate(1, EvaluationType.MID_PROGRAM, 4)
        await self.services.evaluation.submit_evaluation(
            self.session,
            self.mentorship_id,
            10,
            EvaluationCreateDto(
                type=EvaluationType.FINAL, engagement_rating=2, feedback="Great pairing"
            ),
        )

        mentorship = await self.service.complete(self.session, self.mentorship_id)

        self.assertEqual(mentorship.engagement_score, 2)
        self.assertEqual(mentorship.satisfaction_score, 4)
        self.assertEqual(mentorship.score_source, ScoreSource.MID_PROGRAM)

    async def test_complete_without_evaluations(self):
        """Test scores stay empty when nobody evaluated the mentorship."""
        await self.service.start(self.session, self.mentorship_id)

        mentorship = await self.service.complete(self.session, self.mentorship_id)

        self.assertIsNone(mentorship.engagement_score)
        self.assertIsNone(mentorship.score_source)

    async def test_list_mentorships_filters(self):
        """Test the listing filters by cycle, status, mentor, mentee and participant."""
        listed = await self.service.list_mentorships(
            self.session, cycle_id=self.cycle.cycle_id, mentor_id=1
        )
        self.assertEqual([m.mentorship_id for m in listed], [self.mentorship_id])

        by_participant = await self.service.list_mentorships(
            self.session, participant_id=10
        )
        self.assertEqual(len(by_participant), 1)

        self.assertEqual(
            await self.service.list_mentorships(self.session, mentee_id=11), []
        )
        self.assertEqual(
            await self.service.list_mentorships(
                self.session, status=MentorshipStatus.ACTIVE
            ),
            [],
        )
        self.assertEqual(
            await self.service.list_mentorships(self.session, participant_id=99), []
        )

    async def test_record_session(self):
        """Test sessions are only counted on an active mentorship."""
        with self.assertRaises(PreconditionFailedError):
            await self.service.record_session(self.session, self.mentorship_id)

        await self.service.start(self.session, self.mentorship_id)
        await self.service.record_session(self.session, self.mentorship_id)
        mentorship = await self.service.record_session(self.session, self.mentorship_id)

        self.assertEqual(mentorship.sessions_completed, 2)

    async def test_cancel_releases_slot(self):
        """Test cancelling keeps the reason and frees the mentor's slot."""
        mentorship = await self.service.cancel(
            self.session, self.mentorship_id, "Mentee moved abroad"
        )

        self.assertEqual(mentorship.status, MentorshipStatus.CANCELLED)
        self.assertEqual(mentorship.cancel_reason, "Mentee moved abroad")
        self.assertEqual((await self._mentor()).current_mentees, 0)

        with self.assertRaises(PreconditionFailedError):
            await self.service.cancel(self.session, self.mentorship_id, "again")
        with self.assertRaises(PreconditionFailedError):
            await self.service.start(self.session, self.mentorship_id)

    async def test_unknown_mentorship(self):
        """Test unknown ids raise NotFoundError."""
        with self.assertRaises(NotFoundError):
            await self.service.get_mentorship(self.session, 999)
        with self.assertRaises(NotFoundError):
            await self.service.start(self.session, 999)
