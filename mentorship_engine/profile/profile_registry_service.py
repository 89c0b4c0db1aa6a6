from sqlalchemy.ext.asyncio import AsyncSession

from mentorship_engine.common.mentorship_errors import (
    NotFoundError,
    PreconditionFailedError,
)
from mentorship_engine.dto.profile_create_dto import (
    MenteeProfileCreateDto,
    MentorProfileCreateDto,
)
from mentorship_engine.dto.profile_dto import MenteeProfileDto, MentorProfileDto
from mentorship_engine.entity.mentee_profile_entity import MenteeProfileEntity
from mentorship_engine.entity.mentor_profile_entity import MentorProfileEntity


def _availability_column(profile_data) -> dict | None:
    if profile_data.availability is None:
        return None
    return profile_data.availability.model_dump(by_alias=True)


class ProfileRegistryService:
    """
    Thin registry of mentor and mentee profiles.

    Capacity counters are never written here; they change only through the
    reservations made by matching, assignment and the mentorship lifecycle.
    """

    def __init__(self, logger, mentor_profile_repository, mentee_profile_repository):
        self.logger = logger
        self.mentor_profile_repository = mentor_profile_repository
        self.mentee_profile_repository = mentee_profile_repository

    async def get_mentor_profile(
        self, session: AsyncSession, user_id: int
    ) -> MentorProfileDto:
        profile = await self.mentor_profile_repository.get_by_user_id(
            session=session, user_id=user_id
        )
        if not profile:
            raise NotFoundError("Mentor profile", user_id)
        return MentorProfileDto.model_validate(profile)

    async def get_mentee_profile(
        self, session: AsyncSession, user_id: int
    ) -> MenteeProfileDto:
        profile = await self.mentee_profile_repository.get_by_user_id(
            session=session, user_id=user_id
        )
        if not profile:
            raise NotFoundError("Mentee profile", user_id)
        return MenteeProfileDto.model_validate(profile)

    async def upsert_mentor_profile(
        self, session: AsyncSession, user_id: int, profile_data: MentorProfileCreateDto
    ) -> MentorProfileDto:
        """
        Create or replace a mentor profile. A new profile starts unverified.

        Raises:
            PreconditionFailedError: `max_mentees` would drop below the mentor's
                current load.
        """
        profile = await self.mentor_profile_repository.get_by_user_id(
            session=session, user_id=user_id, refresh=True
        )
        if profile is None:
            profile = MentorProfileEntity(
                user_id=user_id, current_mentees=0, total_mentees=0, is_verified=False
            )
        elif profile_data.max_mentees < profile.current_mentees:
            raise PreconditionFailedError(
                f"Mentor {user_id} currently has {profile.current_mentees} mentee(s); "
                f"maxMentees cannot be lowered to {profile_data.max_mentees}."
            )

        fields = profile_data.model_dump(mode="json", exclude={"availability"})
        for name, value in fields.items():
            setattr(profile, name, value)
        profile.availability = _availability_column(profile_data)

        profile = await self.mentor_profile_repository.upsert_profile(
            session=session, entity=profile
        )
        await session.commit()

        self.logger.info("[ProfileRegistryService] mentor profile %s saved.", user_id)
        return MentorProfileDto.model_validate(profile)

    async def upsert_mentee_profile(
        self, session: AsyncSession, user_id: int, profile_data: MenteeProfileCreateDto
    ) -> MenteeProfileDto:
        """Create or replace a mentee profile."""
        profile = await self.mentee_profile_repository.get_by_user_id(
            session=session, user_id=user_id
        )
        if profile is None:
            profile = MenteeProfileEntity(user_id=user_id)

        fields = profile_data.model_dump(mode="json", exclude={"availability"})
        for name, value in fields.items():
            setattr(profile, name, value)
        profile.availability = _availability_column(profile_data)

        profile = await self.mentee_profile_repository.upsert_profile(
            session=session, entity=profile
        )
        await session.commit()

        self.logger.info("[ProfileRegistryService] mentee profile %s saved.", user_id)
        return MenteeProfileDto.model_validate(profile)

    async def verify_mentor(self, session: AsyncSession, user_id: int) -> MentorProfileDto:
        profile = await self.mentor_profile_repository.get_by_user_id(
            session=session, user_id=user_id
        )
        if not profile:
            raise NotFoundError("Mentor profile", user_id)

        profile.is_verified = True
        profile = await self.mentor_profile_repository.upsert_profile(
            session=session, entity=profile
        )
        await session.commit()

        self.logger.info("[ProfileRegistryService] mentor %s verified.", user_id)
        return MentorProfileDto.model_validate(profile)
