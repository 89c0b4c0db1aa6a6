from unittest.mock import AsyncMock, MagicMock

from mentorship_engine.analytics.analytics_service import AnalyticsService
from mentorship_engine.common.mentorship_enums import (
    EvaluationType,
    MatchStatus,
    MentorshipStatus,
)
from mentorship_engine.dto.evaluation_create_dto import EvaluationCreateDto
from mentorship_engine.entity.match_entity import MatchEntity
from mentorship_engine.repository.progress_repository import ProgressRepository
from mentorship_engine.repository.program_repository import ProgramRepository
from mentorship_engine.repository.task_repository import TaskRepository
from tests.mentorship_engine_test.repository_test.base_repository_test_lib import (
    BaseRepositoryTestLib,
    build_services,
    make_mentee,
    make_mentor,
)


class TestAnalyticsService(BaseRepositoryTestLib):
    async def asyncSetUp(self):
        await super().asyncSetUp()

        mock_publisher = MagicMock()
        mock_publisher.publish = AsyncMock(return_value=0)
        self.services = build_services(MagicMock(), mock_publisher)
        self.service = AnalyticsService(
            match_repository=self.services.match_repository,
            mentorship_repository=self.services.mentorship_repository,
            program_repository=ProgramRepository(),
            task_repository=TaskRepository(),
            progress_repository=ProgressRepository(),
        )

        self.cycle = await self.create_cycle()
        await self.insert_entities(
            [
                make_mentor(1),
                make_mentor(2),
                make_mentee(10),
                make_mentee(11),
                MatchEntity(
                    cycle_id=self.cycle.cycle_id,
                    mentor_id=3,
                    mentee_id=12,
                    status=MatchStatus.PENDING,
                    match_score=80,
                ),
            ]
        )

        assign = self.services.assignment.assign
        self.finished = await assign(self.session, self.cycle.cycle_id, 1, 10)
        self.dropped = await assign(self.session, self.cycle.cycle_id, 2, 11)

        tasks = await self.services.program.list_tasks(
            self.session, self.finished.mentorship_id
        )
        await self.services.program.complete_task(self.session, tasks[0].task_id)
        await self.services.evaluation.submit_evaluation(
            self.session,
            self.finished.mentorship_id,
            10,
            EvaluationCreateDto(
                type=EvaluationType.FINAL, engagement_rating=4, satisfaction_rating=5
            ),
        )
        await self.services.lifecycle.complete(self.session, self.finished.mentorship_id)
        await self.services.lifecycle.cancel(
            self.session, self.dropped.mentorship_id, "No longer available"
        )

    async def test_mentorship_analytics(self):
        """Test outcome counts, averages and the completion rate of a cycle."""
        analytics = await self.service.get_mentorship_analytics(
            self.session, self.cycle.cycle_id
        )

        self.assertEqual(analytics.total_matches, 3)
        self.assertEqual(analytics.matches_by_status, {"approved": 2, "pending": 1})
        self.assertEqual(analytics.total_mentorships, 2)
        self.assertEqual(
            analytics.mentorships_by_status, {"completed": 1, "cancelled": 1}
        )
        self.assertEqual(analytics.average_match_score, 80)
        self.assertEqual(analytics.average_engagement_score, 4)
        self.assertEqual(analytics.average_satisfaction_score, 5)
        self.assertEqual(analytics.certificates_issued, 0)
        self.assertEqual(analytics.completion_rate, 50.0)

    async def test_empty_cycle(self):
        """Test a cycle without activity reports zeros."""
        other = await self.create_cycle(name="empty")

        analytics = await self.service.get_mentorship_analytics(
            self.session, other.cycle_id
        )

        self.assertEqual(analytics.total_matches, 0)
        self.assertIsNone(analytics.average_match_score)
        self.assertEqual(analytics.completion_rate, 0.0)

    async def test_mentorship_progress(self):
        """Test each mentorship reports its week, task counts and latest snapshot."""
        progress = await self.service.get_mentorship_progress(self.session)

        by_id = {p.mentorship_id: p for p in progress}
        finished = by_id[self.finished.mentorship_id]
        self.assertEqual(finished.status, MentorshipStatus.COMPLETED)
        self.assertEqual(finished.current_week, 1)
        self.assertEqual((finished.tasks_completed, finished.total_tasks), (1, 3))
        self.assertEqual(finished.latest_progress.week, 1)
        self.assertEqual(finished.latest_progress.engagement_score, 33.33)

        dropped = by_id[self.dropped.mentorship_id]
        self.assertEqual(dropped.status, MentorshipStatus.CANCELLED)
        self.assertEqual(dropped.tasks_completed, 0)
        self.assertIsNone(dropped.latest_progress)
