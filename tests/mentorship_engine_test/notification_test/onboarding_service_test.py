import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from mentorship_engine.common.mentorship_enums import (
    InterestStatus,
    NotificationType,
    ParticipantRole,
)
from mentorship_engine.common.mentorship_errors import NotFoundError
from mentorship_engine.notification.onboarding_service import OnboardingService


class TestOnboardingService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.mock_cycle_repository = MagicMock()
        self.mock_cycle_repository.get_cycle_by_id = AsyncMock()
        self.mock_interest_repository = MagicMock()
        self.mock_interest_repository.get_interests_by_cycle = AsyncMock()
        self.mock_mentor_repository = MagicMock()
        self.mock_mentor_repository.get_all_profiles = AsyncMock()
        self.mock_mentee_repository = MagicMock()
        self.mock_mentee_repository.get_all_profiles = AsyncMock()
        self.mock_publisher = MagicMock()
        self.mock_publisher.publish = AsyncMock(side_effect=lambda items: len(items))
        self.mock_session = AsyncMock()

        self.service = OnboardingService(
            logger=MagicMock(),
            cycle_repository=self.mock_cycle_repository,
            interest_repository=self.mock_interest_repository,
            mentor_profile_repository=self.mock_mentor_repository,
            mentee_profile_repository=self.mock_mentee_repository,
            notification_publisher=self.mock_publisher,
        )

    async def test_all_profiles_of_role(self):
        """Test every mentee profile is notified when no cycle is given."""
        self.mock_mentee_repository.get_all_profiles.return_value = [
            SimpleNamespace(user_id=10),
            SimpleNamespace(user_id=11),
        ]

        result = await self.service.send_onboarding_notifications(
            self.mock_session, ParticipantRole.MENTEE
        )

        self.assertEqual(result, {"recipients": 2, "queued": 2})
        self.mock_mentor_repository.get_all_profiles.assert_not_awaited()
        (notifications,) = self.mock_publisher.publish.await_args.args
        self.assertEqual([n.recipient_id for n in notifications], [10, 11])
        self.assertEqual(notifications[0].type, NotificationType.ONBOARDING)
        self.assertEqual(notifications[0].payload, {"role": "mentee", "cycleId": None})

    async def test_interested_users_of_cycle(self):
        """Test only interested users of the requested role are notified for a cycle."""
        self.mock_cycle_repository.get_cycle_by_id.return_value = SimpleNamespace(
            cycle_id=3
        )
        self.mock_interest_repository.get_interests_by_cycle.return_value = [
            SimpleNamespace(user_id=5)
        ]

        result = await self.service.send_onboarding_notifications(
            self.mock_session, ParticipantRole.MENTOR, cycle_id=3
        )

        self.assertEqual(result, {"recipients": 1, "queued": 1})
        self.mock_interest_repository.get_interests_by_cycle.assert_awaited_once_with(
            session=self.mock_session,
            cycle_id=3,
            role=ParticipantRole.MENTOR,
            status=InterestStatus.INTERESTED,
        )

    async def test_unknown_cycle(self):
        """Test an unknown cycle raises NotFoundError and sends nothing."""
        self.mock_cycle_repository.get_cycle_by_id.return_value = None

        with self.assertRaises(NotFoundError):
            await self.service.send_onboarding_notifications(
                self.mock_session, ParticipantRole.MENTOR, cycle_id=99
            )
        self.mock_publisher.publish.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
