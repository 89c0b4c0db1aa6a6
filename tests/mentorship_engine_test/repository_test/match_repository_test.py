from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from mentorship_engine.common.mentorship_enums import MatchStatus
from mentorship_engine.entity.match_entity import MatchEntity
from mentorship_engine.repository.match_repository import MatchRepository
from tests.mentorship_engine_test.repository_test.base_repository_test_lib import (
    BaseRepositoryTestLib,
)


class TestMatchRepository(BaseRepositoryTestLib):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.repo = MatchRepository()
        self.cycle = await self.create_cycle()

    def _match(self, mentor_id, mentee_id, status=MatchStatus.PENDING, **kwargs):
        return MatchEntity(
            cycle_id=self.cycle.cycle_id,
            mentor_id=mentor_id,
            mentee_id=mentee_id,
            status=status,
            **kwargs,
        )

    async def test_mentee_holds_one_live_match_per_cycle(self):
        """Test a second live match for the same mentee violates the unique index."""
        await self.insert_entities([self._match(1, 10)])

        with self.assertRaises(IntegrityError):
            await self.repo.insert_match(self.session, self._match(2, 10))
        await self.session.rollback()

    async def test_rejected_match_frees_the_mentee(self):
        """Test a rejected match does not block a new live match."""
        await self.insert_entities([self._match(1, 10, MatchStatus.REJECTED)])

        match = await self.repo.insert_match(self.session, self._match(2, 10))
        await self.session.commit()

        self.assertIsNotNone(match.match_id)
        self.assertEqual(
            await self.repo.get_live_mentee_ids(self.session, self.cycle.cycle_id), {10}
        )
        self.assertEqual(
            await self.repo.get_rejected_pairs(self.session, self.cycle.cycle_id),
            {(1, 10)},
        )
        self.assertEqual(
            await self.repo.count_matches(self.session, self.cycle.cycle_id), 2
        )
        self.assertEqual(
            await self.repo.count_matches(
                self.session, self.cycle.cycle_id, live_only=True
            ),
            1,
        )

    async def test_approval_needs_both_flags(self):
        """Test the approved flip happens once, and only after both sides agreed."""
        match = self._match(1, 10)
        await self.insert_entities([match])
        now = datetime.now(timezone.utc)

        self.assertTrue(await self.repo.set_approval_flag(self.session, match.match_id, True))
        self.assertFalse(
            await self.repo.approve_if_both_agreed(self.session, match.match_id, now)
        )
        self.assertTrue(
            await self.repo.set_approval_flag(self.session, match.match_id, False)
        )
        self.assertTrue(
            await self.repo.approve_if_both_agreed(self.session, match.match_id, now)
        )
        self.assertFalse(
            await self.repo.approve_if_both_agreed(self.session, match.match_id, now)
        )
        self.assertFalse(
            await self.repo.set_approval_flag(self.session, match.match_id, True)
        )
        await self.session.commit()

        match = await self.repo.get_match_by_id(self.session, match.match_id, refresh=True)
        self.assertEqual(match.status, MatchStatus.APPROVED)
        self.assertIsNotNone(match.matched_at)

    async def test_update_status_only_from_sources(self):
        """Test the conditional update ignores matches outside the source states."""
        match = self._match(1, 10, MatchStatus.APPROVED)
        await self.insert_entities([match])

        updated = await self.repo.update_status(
            self.session,
            match.match_id,
            sources=[MatchStatus.PENDING],
            target=MatchStatus.REJECTED,
        )

        self.assertFalse(updated)

    async def test_get_matches_filters(self):
        """Test filtering matches by cycle and status."""
        other = await self.create_cycle(name="other")
        await self.insert_entities(
            [
                self._match(1, 10),
                self._match(1, 11, MatchStatus.REJECTED),
                MatchEntity(cycle_id=other.cycle_id, mentor_id=1, mentee_id=12),
            ]
        )

        pending = await self.repo.get_matches(
            self.session, cycle_id=self.cycle.cycle_id, statuses=[MatchStatus.PENDING]
        )
        everything = await self.repo.get_matches(self.session)

        self.assertEqual([m.mentee_id for m in pending], [10])
        self.assertEqual(len(everything), 3)
