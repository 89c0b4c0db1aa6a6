from unittest.mock import AsyncMock, MagicMock

from mentorship_engine.common.mentorship_enums import MatchStatus, MentorshipStatus
from mentorship_engine.common.mentorship_errors import (
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.entity.match_entity import MatchEntity
from tests.mentorship_engine_test.repository_test.base_repository_test_lib import (
    BaseRepositoryTestLib,
    build_services,
    make_mentee,
    make_mentor,
)


class TestMatchApprovalService(BaseRepositoryTestLib):
    async def asyncSetUp(self):
        await super().asyncSetUp()

        self.mock_logger = MagicMock()
        self.mock_publisher = MagicMock()
        self.mock_publisher.publish = AsyncMock(return_value=0)
        self.services = build_services(self.mock_logger, self.mock_publisher)
        self.service = self.services.approval

        self.cycle = await self.create_cycle(reserved_mentorships=1)
        self.match = MatchEntity(
            cycle_id=self.cycle.cycle_id,
            mentor_id=1,
            mentee_id=10,
            status=MatchStatus.PENDING,
            match_score=95,
        )
        await self.insert_entities(
            [
                make_mentor(1, current_mentees=1, total_mentees=1),
                make_mentee(10),
                self.match,
            ]
        )

    async def _mentor(self):
        return await self.services.mentor_profile_repository.get_by_user_id(
            self.session, 1, refresh=True
        )

    async def test_both_sides_approve(self):
        """Test the match is approved only after both participants agree."""
        first = await self.service.approve(self.session, self.match.match_id, 1)

        self.assertEqual(first.status, MatchStatus.PENDING)
        self.assertIsNone(first.mentorship_id)

        second = await self.service.approve(self.session, self.match.match_id, 10)

        self.assertTrue(second.success)
        self.assertEqual(second.status, MatchStatus.APPROVED)
        self.assertIsNotNone(second.mentorship_id)

        mentorship = await self.services.lifecycle.get_mentorship(
            self.session, second.mentorship_id
        )
        self.assertEqual(mentorship.status, MentorshipStatus.PENDING)
        self.assertEqual(mentorship.goals, "grow into a backend technology role")
        self.assertEqual((await self._mentor()).current_mentees, 1)

    async def test_repeat_approval_is_noop(self):
        """Test approving the same side twice leaves the match pending."""
        await self.service.approve(self.session, self.match.match_id, 1)
        result = await self.service.approve(self.session, self.match.match_id, 1)

        self.assertEqual(result.status, MatchStatus.PENDING)

    async def test_administrator_approves_both_sides(self):
        """Test an administrator approval completes the match in one call."""
        result = await self.service.approve(self.session, self.match.match_id, None)
        again = await self.service.approve(self.session, self.match.match_id, None)

        self.assertEqual(result.status, MatchStatus.APPROVED)
        self.assertEqual(again.mentorship_id, result.mentorship_id)

    async def test_non_participant_cannot_approve(self):
        """Test a user outside the match is refused."""
        with self.assertRaises(PreconditionFailedError):
            await self.service.approve(self.session, self.match.match_id, 99)

    async def test_unknown_match(self):
        """Test approving an unknown match raises NotFoundError."""
        with self.assertRaises(NotFoundError):
            await self.service.approve(self.session, 999, 1)

    async def test_reject_releases_slot(self):
        """Test rejecting a pending match gives back the mentor slot and the cycle place."""
        result = await self.service.reject(self.session, self.match.match_id, 10)

        self.assertEqual(result.status, MatchStatus.REJECTED)
        mentor = await self._mentor()
        self.assertEqual(mentor.current_mentees, 0)
        self.assertEqual(mentor.total_mentees, 0)
        self.mock_publisher.publish.assert_awaited_once()
        cycle = await self.services.cycle_repository.get_cycle_by_id(
            self.session, self.cycle.cycle_id, refresh=True
        )
        self.assertEqual(cycle.reserved_mentorships, 0)

        with self.assertRaises(PreconditionFailedError):
            await self.service.approve(self.session, self.match.match_id, 1)

    async def test_reject_after_approval_fails(self):
        """Test an approved match can no longer be rejected."""
        await self.service.approve(self.session, self.match.match_id, None)

        with self.assertRaises(PreconditionFailedError):
            await self.service.reject(self.session, self.match.match_id, None)
        self.assertEqual((await self._mentor()).current_mentees, 1)

    async def test_approve_many_reports_each_id(self):
        """Test a failing id is reported without aborting the batch."""
        results = await self.service.approve_many(
            self.session, [999, self.match.match_id]
        )

        self.assertEqual([r.match_id for r in results], [999, self.match.match_id])
        self.assertFalse(results[0].success)
        self.assertIn("999", results[0].error)
        self.assertTrue(results[1].success)
        self.assertEqual(results[1].status, MatchStatus.APPROVED)

    async def test_list_matches(self):
        """Test listing matches filtered by status."""
        pending = await self.service.list_matches(
            self.session, cycle_id=self.cycle.cycle_id, status=MatchStatus.PENDING
        )
        rejected = await self.service.list_matches(
            self.session, status=MatchStatus.REJECTED
        )

        self.assertEqual([m.match_id for m in pending], [self.match.match_id])
        self.assertEqual(rejected, [])
