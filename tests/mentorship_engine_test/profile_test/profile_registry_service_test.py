from unittest.mock import MagicMock

from mentorship_engine.common.mentorship_enums import (
    CommunicationMedium,
    ExperienceLevel,
    MentorshipTheme,
)
from mentorship_engine.common.mentorship_errors import (
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.dto.profile_create_dto import (
    MenteeProfileCreateDto,
    MentorProfileCreateDto,
)
from mentorship_engine.dto.profile_dto import AvailabilityWindowDto
from mentorship_engine.profile.profile_registry_service import ProfileRegistryService
from mentorship_engine.repository.mentee_profile_repository import (
    MenteeProfileRepository,
)
from mentorship_engine.repository.mentor_profile_repository import (
    MentorProfileRepository,
)
from tests.mentorship_engine_test.repository_test.base_repository_test_lib import (
    BaseRepositoryTestLib,
    make_mentor,
)


class TestProfileRegistryService(BaseRepositoryTestLib):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.service = ProfileRegistryService(
            logger=MagicMock(),
            mentor_profile_repository=MentorProfileRepository(),
            mentee_profile_repository=MenteeProfileRepository(),
        )

    async def test_new_mentor_starts_unverified(self):
        """Test a new mentor profile starts unverified with no mentees."""
        profile = await self.service.upsert_mentor_profile(
            self.session,
            5,
            MentorProfileCreateDto(
                company="Acme",
                themes=[MentorshipTheme.TECHNOLOGY],
                communication_mediums=[CommunicationMedium.VIDEO],
                availability=AvailabilityWindowDto(days=["mon"], time_blocks=["evening"]),
                max_mentees=2,
            ),
        )

        self.assertFalse(profile.is_verified)
        self.assertEqual((profile.current_mentees, profile.total_mentees), (0, 0))
        self.assertEqual(profile.themes, ["technology"])
        self.assertEqual(profile.availability, {"days": ["mon"], "timeBlocks": ["evening"]})

        verified = await self.service.verify_mentor(self.session, 5)
        self.assertTrue(verified.is_verified)

    async def test_update_keeps_capacity_counters(self):
        """Test editing a profile leaves the counters and verification alone."""
        await self.insert_entities([make_mentor(1, current_mentees=1, total_mentees=4)])

        profile = await self.service.upsert_mentor_profile(
            self.session, 1, MentorProfileCreateDto(company="Globex", max_mentees=3)
        )

        self.assertEqual(profile.company, "Globex")
        self.assertEqual((profile.current_mentees, profile.total_mentees), (1, 4))
        self.assertTrue(profile.is_verified)
        self.assertIsNone(profile.availability)

    async def test_max_mentees_below_current_load(self):
        """Test the capacity cannot be lowered below the current load."""
        await self.insert_entities([make_mentor(1, current_mentees=2, total_mentees=2)])

        with self.assertRaises(PreconditionFailedError):
            await self.service.upsert_mentor_profile(
                self.session, 1, MentorProfileCreateDto(max_mentees=1)
            )

    async def test_mentee_profile(self):
        """Test a mentee profile is created and read back."""
        await self.service.upsert_mentee_profile(
            self.session,
            10,
            MenteeProfileCreateDto(
                field_of_interest="data engineering",
                experience_level=ExperienceLevel.BEGINNER,
                commitment_agreed=True,
            ),
        )

        profile = await self.service.get_mentee_profile(self.session, 10)

        self.assertEqual(profile.field_of_interest, "data engineering")
        self.assertTrue(profile.commitment_agreed)

    async def test_unknown_profiles(self):
        """Test unknown profiles raise NotFoundError."""
        with self.assertRaises(NotFoundError):
            await self.service.get_mentor_profile(self.session, 404)
        with self.assertRaises(NotFoundError):
            await self.service.get_mentee_profile(self.session, 404)
        with self.assertRaises(NotFoundError):
            await self.service.verify_mentor(self.session, 404)
