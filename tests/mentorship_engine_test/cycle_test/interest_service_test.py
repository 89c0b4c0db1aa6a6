from unittest.mock import MagicMock

from mentorship_engine.common.mentorship_enums import (
    CycleStatus,
    InterestStatus,
    ParticipantRole,
)
from mentorship_engine.common.mentorship_errors import (
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.cycle.interest_service import InterestService
from mentorship_engine.dto.interest_dto import InterestCreateDto
from mentorship_engine.repository.cycle_repository import CycleRepository
from mentorship_engine.repository.interest_repository import InterestRepository
from tests.mentorship_engine_test.repository_test.base_repository_test_lib import (
    BaseRepositoryTestLib,
)


class TestInterestService(BaseRepositoryTestLib):
    async def asyncSetUp(self):
        await super().asyncSetUp()

        self.service = InterestService(
            logger=MagicMock(),
            cycle_repository=CycleRepository(),
            interest_repository=InterestRepository(),
        )
        self.cycle = await self.create_cycle(status=CycleStatus.UPCOMING)

    async def test_declare_and_withdraw(self):
        """Test a declaration can be withdrawn and renewed in place."""
        declared = await self.service.declare_interest(
            self.session,
            self.cycle.cycle_id,
            7,
            InterestCreateDto(role=ParticipantRole.MENTEE, message="Keen to learn"),
        )
        withdrawn = await self.service.withdraw_interest(
            self.session, self.cycle.cycle_id, 7
        )
        again = await self.service.withdraw_interest(self.session, self.cycle.cycle_id, 7)
        renewed = await self.service.declare_interest(
            self.session,
            self.cycle.cycle_id,
            7,
            InterestCreateDto(role=ParticipantRole.MENTOR),
        )

        self.assertEqual(declared.status, InterestStatus.INTERESTED)
        self.assertEqual(withdrawn.status, InterestStatus.WITHDRAWN)
        self.assertEqual(again.status, InterestStatus.WITHDRAWN)
        self.assertEqual(renewed.interest_id, declared.interest_id)
        self.assertEqual(renewed.role, ParticipantRole.MENTOR)
        self.assertIsNone(renewed.message)

    async def test_list_interests_by_role(self):
        """Test interests can be filtered by role."""
        for user_id, role in ((1, ParticipantRole.MENTOR), (2, ParticipantRole.MENTEE)):
            await self.service.declare_interest(
                self.session, self.cycle.cycle_id, user_id, InterestCreateDto(role=role)
            )

        mentors = await self.service.list_interests(
            self.session, self.cycle.cycle_id, role=ParticipantRole.MENTOR
        )
        everyone = await self.service.list_interests(self.session, self.cycle.cycle_id)

        self.assertEqual([i.user_id for i in mentors], [1])
        self.assertEqual(len(everyone), 2)

    async def test_rules(self):
        """Test unknown cycles, completed cycles and missing declarations."""
        done = await self.create_cycle(name="done", status=CycleStatus.COMPLETED)
        body = InterestCreateDto(role=ParticipantRole.MENTOR)

        with self.assertRaises(NotFoundError):
            await self.service.declare_interest(self.session, 999, 1, body)
        with self.assertRaises(PreconditionFailedError):
            await self.service.declare_interest(self.session, done.cycle_id, 1, body)
        with self.assertRaises(NotFoundError):
            await self.service.withdraw_interest(self.session, self.cycle.cycle_id, 1)
