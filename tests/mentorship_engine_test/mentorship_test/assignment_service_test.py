import asyncio
import tempfile
import unittest
from datetime import date
from unittest.mock import AsyncMock, MagicMock

from mentorship_engine.common.database import Database
from mentorship_engine.common.mentorship_enums import (
    CycleStatus,
    InterestStatus,
    MentorshipStatus,
    ParticipantRole,
)
from mentorship_engine.common.mentorship_errors import (
    CapacityExceededError,
    DuplicateError,
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.entity.cycle_entity import CycleEntity
from mentorship_engine.entity.interest_entity import InterestEntity
from tests.mentorship_engine_test.repository_test.base_repository_test_lib import (
    BaseRepositoryTestLib,
    build_services,
    make_mentee,
    make_mentor,
)


class TestAssignmentService(BaseRepositoryTestLib):
    async def asyncSetUp(self):
        await super().asyncSetUp()

        self.mock_publisher = MagicMock()
        self.mock_publisher.publish = AsyncMock(return_value=0)
        self.services = build_services(MagicMock(), self.mock_publisher)
        self.service = self.services.assignment

        self.cycle = await self.create_cycle(max_mentorships=2)
        await self.insert_entities(
            [
                make_mentor(1, max_mentees=1),
                make_mentor(2, is_active=False),
                make_mentee(10),
                make_mentee(11),
                make_mentee(12, commitment_agreed=False),
            ]
        )

    async def test_assign_creates_active_mentorship(self):
        """Test a manual assignment starts the mentorship with a week-1 program."""
        mentorship = await self.service.assign(
            self.session, self.cycle.cycle_id, 1, 10, goals="Ship a side project"
        )

        self.assertEqual(mentorship.status, MentorshipStatus.ACTIVE)
        self.assertEqual(mentorship.goals, "Ship a side project")
        tasks = await self.services.program.list_tasks(
            self.session, mentorship.mentorship_id, week=1
        )
        self.assertEqual(len(tasks), 3)
        mentor = await self.services.mentor_profile_repository.get_by_user_id(
            self.session, 1, refresh=True
        )
        self.assertEqual(mentor.current_mentees, 1)
        self.mock_publisher.publish.assert_awaited_once()

    async def test_assign_rejects_full_mentor(self):
        """Test a mentor without free capacity cannot be assigned."""
        await self.service.assign(self.session, self.cycle.cycle_id, 1, 10)

        with self.assertRaises(CapacityExceededError):
            await self.service.assign(self.session, self.cycle.cycle_id, 1, 11)

    async def test_assign_rejects_matched_mentee(self):
        """Test a mentee already holding a live match cannot be assigned again."""
        await self.insert_entities([make_mentor(3)])
        await self.service.assign(self.session, self.cycle.cycle_id, 1, 10)

        with self.assertRaises(DuplicateError):
            await self.service.assign(self.session, self.cycle.cycle_id, 3, 10)

    async def test_assign_validation(self):
        """Test self-pairs, unknown profiles, inactive mentors and uncommitted mentees are refused."""
        with self.assertRaises(ValueError):
            await self.service.assign(self.session, self.cycle.cycle_id, 1, 1)
        with self.assertRaises(NotFoundError):
            await self.service.assign(self.session, self.cycle.cycle_id, 99, 10)
        with self.assertRaises(NotFoundError):
            await self.service.assign(self.session, self.cycle.cycle_id, 1, 99)
        with self.assertRaises(PreconditionFailedError):
            await self.service.assign(self.session, self.cycle.cycle_id, 2, 10)
        with self.assertRaises(PreconditionFailedError):
            await self.service.assign(self.session, self.cycle.cycle_id, 1, 12)
        with self.assertRaises(NotFoundError):
            await self.service.assign(self.session, 999, 1, 10)

    async def test_available_mentors_and_mentees(self):
        """Test the availability lists leave out full, withdrawn and uncommitted users."""
        await self.insert_entities(
            [
                InterestEntity(
                    cycle_id=self.cycle.cycle_id,
                    user_id=11,
                    role=ParticipantRole.MENTEE,
                    status=InterestStatus.WITHDRAWN,
                )
            ]
        )

        availability = await self.service.get_available_mentors_and_mentees(
            self.session, self.cycle.cycle_id
        )

        self.assertEqual([m.user_id for m in availability.mentors], [1])
        self.assertEqual([m.user_id for m in availability.mentees], [10])

    async def test_assign_rejects_full_cycle(self):
        """Test the cycle's max mentorships caps manual assignments."""
        await self.insert_entities([make_mentor(3), make_mentee(13)])
        await self.service.assign(self.session, self.cycle.cycle_id, 1, 10)
        await self.service.assign(self.session, self.cycle.cycle_id, 3, 11)

        with self.assertRaises(CapacityExceededError):
            await self.service.assign(self.session, self.cycle.cycle_id, 3, 13)

        cycle_id = self.cycle.cycle_id
        await self.session.rollback()
        cycle = await self.services.cycle_repository.get_cycle_by_id(
            self.session, cycle_id, refresh=True
        )
        self.assertEqual(cycle.reserved_mentorships, 2)
        mentor = await self.services.mentor_profile_repository.get_by_user_id(
            self.session, 3, refresh=True
        )
        self.assertEqual(mentor.current_mentees, 1)


class TestConcurrentAssignment(unittest.IsolatedAsyncioTestCase):
    """Two requests racing for the last place of a cycle, each on its own connection."""

    async def asyncSetUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.db = Database(f"sqlite+aiosqlite:///{self.tmp_dir.name}/engine.db")
        await self.db.create_schema()

        self.mock_publisher = MagicMock()
        self.mock_publisher.publish = AsyncMock(return_value=0)
        self.services = build_services(MagicMock(), self.mock_publisher)

        async with self.db.session() as session:
            self.cycle = CycleEntity(
                name="2026-spring",
                start_date=date(2026, 3, 1),
                end_date=date(2026, 6, 1),
                status=CycleStatus.ACTIVE,
                max_mentorships=1,
            )
            session.add_all(
                [
                    self.cycle,
                    make_mentor(1, max_mentees=1),
                    make_mentor(2, max_mentees=1),
                    make_mentee(10),
                    make_mentee(11),
                ]
            )
            await session.commit()
            self.cycle_id = self.cycle.cycle_id

    async def asyncTearDown(self):
        await self.db.close()
        self.tmp_dir.cleanup()

    async def _assign(self, mentor_id, mentee_id):
        async with self.db.session() as session:
            return await self.services.assignment.assign(
                session, self.cycle_id, mentor_id, mentee_id
            )

    async def test_last_place_is_taken_once(self):
        """Test concurrent assignments never exceed the cycle's max mentorships."""
        results = await asyncio.gather(
            self._assign(1, 10), self._assign(2, 11), return_exceptions=True
        )

        self.assertEqual(
            sorted(type(result).__name__ for result in results),
            ["CapacityExceededError", "MentorshipDto"],
        )
        async with self.db.session() as session:
            live = await self.services.match_repository.count_matches(
                session, self.cycle_id, live_only=True
            )
            cycle = await self.services.cycle_repository.get_cycle_by_id(
                session, self.cycle_id
            )
        self.assertEqual(live, 1)
        self.assertEqual(cycle.reserved_mentorships, 1)
